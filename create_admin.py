"""Create the admin account, or reset its password if it already exists.

    python create_admin.py --email admin@example.com --password 's3cret!'

Defaults come from the ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME settings.
"""
import logging
import click
from sqlalchemy.exc import SQLAlchemyError
from config import settings
from database import SessionLocal, Base, engine
from exceptions import WeakPassword
from logging_config import configure_logging
from security import normalize_email, get_password_hash, validate_password_strength
from services.stores import UserStore
import models  # ensure model registration

logger = logging.getLogger(__name__)


def bootstrap_admin(db, email: str, password: str, name: str) -> tuple[int, bool]:
    """Return ``(user_id, created)``."""
    validate_password_strength(password)
    email = normalize_email(email)
    users = UserStore(db)
    password_hash = get_password_hash(password)

    existing = users.get_by_email(email)
    if existing is not None:
        if users.update_password(existing.id, password_hash, full_name=name):
            logger.info("Admin password updated", extra={"user_id": existing.id})
            return existing.id, False

    user = users.create(email, name, password_hash)
    logger.info("Admin user created", extra={"user_id": user.id})
    return user.id, True


@click.command()
@click.option("--email", default=lambda: settings.ADMIN_EMAIL, show_default="ADMIN_EMAIL", help="Admin email address.")
@click.option("--password", default=lambda: settings.ADMIN_PASSWORD, show_default="ADMIN_PASSWORD", help="Admin password.")
@click.option("--name", default=lambda: settings.ADMIN_NAME, show_default="ADMIN_NAME", help="Display name.")
def create_admin(email, password, name):
    """Create or reset the admin account."""
    if not password:
        raise click.UsageError("No password given; pass --password or set ADMIN_PASSWORD")
    if engine.url.get_backend_name() == "sqlite":
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user_id, created = bootstrap_admin(db, email, password, name)
    except WeakPassword as e:
        raise click.BadParameter(e.message, param_hint="--password")
    except SQLAlchemyError as e:
        raise click.ClickException(f"Database error: {e}")
    finally:
        db.close()

    if created:
        click.echo(f"Admin user created: {normalize_email(email)} (id {user_id})")
    else:
        click.echo(f"Admin user already exists; password updated: {normalize_email(email)}")


if __name__ == "__main__":
    configure_logging()
    create_admin()
