"""Thin persistence adapters over the SQLAlchemy session.

The workflows talk to these instead of the ORM so the store can be swapped or
faked. Errors are not translated here; callers decide which ``SQLAlchemyError``
becomes which failure.
"""
from __future__ import annotations
from datetime import datetime
from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from models.user import User
from models.otp import Otp
from models.login_log import LoginLog

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> User | None:
        return self.db.execute(select(User).where(User.email == email)).scalars().first()

    def get_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def exists(self, email: str) -> bool:
        return self.db.execute(select(User.id).where(User.email == email)).first() is not None

    def create(self, email: str, full_name: str, password_hash: str) -> User:
        user = User(email=email, full_name=full_name, password_hash=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def update_password(self, user_id: int, password_hash: str, full_name: str | None = None) -> bool:
        """Return False when the user no longer exists."""
        user = self.db.get(User, user_id)
        if user is None:
            return False
        user.password_hash = password_hash
        if full_name is not None:
            user.full_name = full_name
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return True

    def record_login(self, email: str, method: str = "email") -> None:
        self.db.add(LoginLog(email=email, method=method))
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class OtpStore:
    def __init__(self, db: Session):
        self.db = db

    def upsert(self, email: str, purpose: str, otp_hash: str, expires_at: datetime) -> None:
        """Insert or replace the single row for (email, purpose).

        Conflict resolution happens in the database so concurrent issuers for
        the same pair leave exactly one row behind (last write wins).
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"OTP upsert is not supported on dialect {dialect!r}")
        now = datetime.utcnow()
        stmt = insert(Otp).values(
            email=email, purpose=purpose, otp_hash=otp_hash, expires_at=expires_at, created_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Otp.email, Otp.purpose],
            set_={"otp_hash": otp_hash, "expires_at": expires_at, "created_at": now},
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def get(self, email: str, purpose: str) -> Otp | None:
        return self.db.execute(
            select(Otp).where(Otp.email == email, Otp.purpose == purpose)
        ).scalars().first()

    def delete(self, email: str, purpose: str) -> int:
        try:
            result = self.db.execute(delete(Otp).where(Otp.email == email, Otp.purpose == purpose))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result.rowcount
