from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_SECRETS = {"change-me", "changeme", "default", "secret", "your-secret-key-change-in-production"}


class Settings(BaseSettings):
    # Application Settings
    PROJECT_NAME: str = "Know How Cafe Auth"
    APP_NAME: str = "Know How Cafe"
    # unset means production; only an explicit "development" relaxes the guards below
    ENVIRONMENT: str = "production"
    DEBUG: bool = False

    # Database Configuration (SQLite or PostgreSQL; the OTP upsert supports only these)
    DATABASE_URL: str = "sqlite:///./auth.db"

    # JWT Settings
    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_HOURS: int = 2
    REMEMBER_ME_TTL_DAYS: int = 30

    # Session cookie
    COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False  # set True behind HTTPS

    # OTP / password hashing
    OTP_EXPIRE_MINUTES: int = 10
    HASH_ROUNDS: int = 10
    MIN_PASSWORD_LENGTH: int = 6

    # Email Settings (Brevo SMTP relay)
    SMTP_HOST: str = "smtp-relay.brevo.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_START_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    MAIL_FROM_NAME: str = "Know How Cafe"
    MAIL_FROM_EMAIL: str = "no-reply@knowhowcafe.local"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:5173"]

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # Admin bootstrap (create_admin.py)
    ADMIN_EMAIL: str = "knowhowcafe2025@gmail.com"
    ADMIN_PASSWORD: str | None = None
    ADMIN_NAME: str = "Admin"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def _post_init(self):
        # Refuse to sign sessions with a placeholder secret outside development
        if not self.is_development:
            if not self.JWT_SECRET or self.JWT_SECRET.lower() in INSECURE_SECRETS:
                raise ValueError("JWT_SECRET must be set to a strong value outside development")
            if len(self.JWT_SECRET) < 32:
                raise ValueError("JWT_SECRET must be at least 32 characters outside development")


settings = Settings()
settings._post_init()
