from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from database import Base


class Otp(Base):
    """Hashed one-time code; at most one row per (email, purpose)."""
    __tablename__ = "otps"
    __table_args__ = (
        UniqueConstraint("email", "purpose", name="uq_otps_email_purpose"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    purpose = Column(String(32), nullable=False)  # 'signup' | 'forgot_password'
    otp_hash = Column(String(255), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
