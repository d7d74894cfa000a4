import os
from datetime import datetime, time

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_time(value: str | None, default: time) -> time:
    if not value:
        return default
    return datetime.strptime(value.strip(), "%H:%M").time()


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./medcare.db")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:4200"])

# Appointments may be booked from today through today + BOOKING_HORIZON_DAYS, inclusive.
BOOKING_HORIZON_DAYS = int(os.getenv("BOOKING_HORIZON_DAYS", "7"))

SEED_TIME_SLOTS = _get_bool(os.getenv("SEED_TIME_SLOTS"), default=True)
SLOT_DAY_START = _get_time(os.getenv("SLOT_DAY_START"), time(9, 0))
SLOT_DAY_END = _get_time(os.getenv("SLOT_DAY_END"), time(17, 0))
SLOT_LENGTH_MINUTES = int(os.getenv("SLOT_LENGTH_MINUTES", "30"))


def validate_runtime_config() -> None:
    if BOOKING_HORIZON_DAYS < 0:
        raise RuntimeError("BOOKING_HORIZON_DAYS must not be negative.")
    if SLOT_LENGTH_MINUTES <= 0:
        raise RuntimeError("SLOT_LENGTH_MINUTES must be positive.")
    if SLOT_DAY_END <= SLOT_DAY_START:
        raise RuntimeError("SLOT_DAY_END must be later than SLOT_DAY_START.")
