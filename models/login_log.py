from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Index
from database import Base


class LoginLog(Base):
    """Append-only record of successful logins."""
    __tablename__ = "login_logs"
    __table_args__ = (
        Index("ix_login_logs_email_created", "email", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False)
    method = Column(String(20), nullable=False, default="email")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
