# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Centralised settings, read from env vars once."""
import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    SERVICE_NAME: str = "clubhours-backend"
    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Records Service (no-code tabular API)
    RECORDS_API_URL: str = os.getenv("RECORDS_API_URL", "http://localhost:3000/api").rstrip("/")
    RECORDS_TOKEN: str = os.getenv("RECORDS_TOKEN", "")
    MEMBERS_TABLE_ID: str = os.getenv("MEMBERS_TABLE_ID", "")
    WORK_HOURS_TABLE_ID: str = os.getenv("WORK_HOURS_TABLE_ID", "")
    RECORDS_TIMEOUT: float = float(os.getenv("RECORDS_TIMEOUT", "10"))
    # "hours" for current tables, "seconds" for the older table generation
    RECORDS_DURATION_UNIT: str = os.getenv("RECORDS_DURATION_UNIT", "hours").strip().lower()
    # Zone in which stored date-time instants are read back as calendar days
    RECORDS_TIMEZONE: str = os.getenv("RECORDS_TIMEZONE", "Europe/Berlin")

    # Member table field names
    FIELD_FIRST_NAME: str = os.getenv("FIELD_FIRST_NAME", "Vorname")
    FIELD_LAST_NAME: str = os.getenv("FIELD_LAST_NAME", "Nachname")
    FIELD_EMAIL: str = os.getenv("FIELD_EMAIL", "Email")
    FIELD_FAMILY: str = os.getenv("FIELD_FAMILY", "Familie")
    FIELD_BIRTH_DATE: str = os.getenv("FIELD_BIRTH_DATE", "Geburtsdatum")
    FIELD_JOIN_DATE: str = os.getenv("FIELD_JOIN_DATE", "Eintrittsdatum")

    # Work-hour table field names
    FIELD_MEMBER_LINK: str = os.getenv("FIELD_MEMBER_LINK", "Mitglied_id")
    FIELD_MEMBER_UUID: str = os.getenv("FIELD_MEMBER_UUID", "Mitglied_UUID")
    FIELD_DATE: str = os.getenv("FIELD_DATE", "Datum")
    FIELD_DESCRIPTION: str = os.getenv("FIELD_DESCRIPTION", "Tätigkeit")
    FIELD_DURATION: str = os.getenv("FIELD_DURATION", "Stunden")

    # Eligibility rules
    STANDARD_REQUIRED_HOURS: float = float(os.getenv("STANDARD_REQUIRED_HOURS", "8.0"))
    MIN_ELIGIBLE_AGE: int = int(os.getenv("MIN_ELIGIBLE_AGE", "17"))
    MAX_ELIGIBLE_AGE: int = int(os.getenv("MAX_ELIGIBLE_AGE", "70"))
    LATE_ENTRY_MONTH: int = int(os.getenv("LATE_ENTRY_MONTH", "7"))
    LATE_ENTRY_DAY: int = int(os.getenv("LATE_ENTRY_DAY", "1"))

    # Auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "your-secret-key")
    ACCESS_TOKEN_TTL_SECONDS: int = int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", str(24 * 60 * 60)))
    SELECTION_TOKEN_TTL_SECONDS: int = int(os.getenv("SELECTION_TOKEN_TTL_SECONDS", str(5 * 60)))
    RESET_TOKEN_TTL_SECONDS: int = int(os.getenv("RESET_TOKEN_TTL_SECONDS", str(24 * 60 * 60)))

    # Credential store
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./users.db")

    # Email
    EMAIL_HOST: str = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    EMAIL_PORT: int = int(os.getenv("EMAIL_PORT", "587"))
    EMAIL_USER: str = os.getenv("EMAIL_USER", "")
    EMAIL_PASSWORD: str = os.getenv("EMAIL_PASSWORD", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", os.getenv("EMAIL_USER", ""))
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

    # Rate limiting: (max requests, window seconds) per tier
    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "true")
    RATE_LIMIT_AUTH: tuple = (
        int(os.getenv("RATE_LIMIT_AUTH_MAX", "3")),
        int(os.getenv("RATE_LIMIT_AUTH_WINDOW", "3")),
    )
    RATE_LIMIT_READ: tuple = (
        int(os.getenv("RATE_LIMIT_READ_MAX", "10")),
        int(os.getenv("RATE_LIMIT_READ_WINDOW", "2")),
    )
    RATE_LIMIT_WRITE: tuple = (
        int(os.getenv("RATE_LIMIT_WRITE_MAX", "3")),
        int(os.getenv("RATE_LIMIT_WRITE_WINDOW", "3")),
    )
    RATE_LIMIT_BYPASS: set = {"/health", "/health/ready", "/metrics", "/api/health"}
    AUTH_PATHS: set = {"/api/login", "/api/select-member", "/api/forgotPassword", "/api/resetPassword"}

    CORS_ORIGINS: list = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]


settings = Settings()
