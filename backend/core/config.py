import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "database").strip().lower()
STORAGE_BACKENDS = {"database", "memory"}

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:5173"])

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER") or os.getenv("EMAIL_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS") or os.getenv("EMAIL_PASS", "")
SMTP_USE_TLS = _get_bool(os.getenv("SMTP_USE_TLS"), default=True)
EMAIL_FROM = os.getenv("EMAIL_FROM") or SMTP_USER or "noreply@weeklyagenda.com"

NOTIFICATIONS_ENABLED = _get_bool(os.getenv("NOTIFICATIONS_ENABLED"), default=True)
NOTIFICATION_INTERVAL_SECONDS = int(os.getenv("NOTIFICATION_INTERVAL_SECONDS", "60"))
NOTIFICATION_LOOKAHEAD_MINUTES = int(os.getenv("NOTIFICATION_LOOKAHEAD_MINUTES", "30"))

def validate_runtime_config() -> None:
    if STORAGE_BACKEND not in STORAGE_BACKENDS:
        raise RuntimeError(f"STORAGE_BACKEND must be one of {sorted(STORAGE_BACKENDS)}.")
    if NOTIFICATION_INTERVAL_SECONDS <= 0 or NOTIFICATION_LOOKAHEAD_MINUTES <= 0:
        raise RuntimeError("Notification interval and lookahead must be positive.")
    if APP_ENV.lower() == "production" and STORAGE_BACKEND == "memory":
        raise RuntimeError("The in-memory store cannot be used in production.")
