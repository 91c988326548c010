import time
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    """Milisegundos desde epoch, como Date.now() en el navegador."""
    return int(time.time() * 1000)


def as_utc(value: datetime) -> datetime:
    # SQLite devuelve fechas sin zona horaria; se asumen UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Formatea una fecha en ISO 8601 UTC con milisegundos y sufijo 'Z'."""
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def naive_utc(value: datetime) -> datetime:
    # Columnas TIMESTAMP de MySQL: sin zona horaria, siempre en UTC
    return as_utc(value).replace(tzinfo=None)
