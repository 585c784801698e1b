from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "mp_user"
    postgres_password: str = "changeme"
    postgres_db: str = "multiprompt"

    # Full SQLAlchemy URL; overrides the postgres_* fields when set
    # e.g. "sqlite+aiosqlite:///./data/multiprompt.db"
    database_url: str = ""

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Session cookie (signed JWT)
    session_secret_key: str = "dev-secret"
    session_algorithm: str = "HS256"
    session_expire_days: int = 7
    session_cookie_name: str = "sess"

    # Encryption for stored provider keys
    fernet_key: str = ""

    # Bootstrap admin, created on startup if missing
    admin_user: str = "admin"
    admin_password: str = "admin123!"

    # Process-wide provider fallbacks (used when the user has no stored key/model)
    openai_api_key_1: str = ""
    openai_model_1: str = ""
    anthropic_api_key_1: str = ""
    anthropic_model_1: str = ""
    gemini_api_key_1: str = ""
    gemini_model_1: str = ""

    # Provider endpoints
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_version: str = "2023-06-01"
    anthropic_max_tokens: int = 1024
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    provider_timeout_seconds: float = 60.0

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 3000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Login throttling
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if not settings.fernet_key:
        errors.append(
            'FERNET_KEY must be set (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")'
        )

    if settings.is_production:
        if settings.session_secret_key in ("dev-secret", ""):
            errors.append("SESSION_SECRET_KEY must be set to a secure random value")
        elif len(settings.session_secret_key) < 32:
            errors.append("SESSION_SECRET_KEY must be at least 32 characters")
        if settings.admin_password == "admin123!":
            errors.append("ADMIN_PASSWORD must be changed from the default in production")
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
