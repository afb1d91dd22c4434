"""Utility functions for spellol daily rotation."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 string (or pass through a datetime) as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime | None) -> str | None:
    """Format a datetime as an ISO-8601 UTC string."""
    if dt is None:
        return None
    return parse_timestamp(dt).isoformat()


def in_syllable_band(syllable_count: int, syllable_min: int | None = None,
                     syllable_max: int | None = None) -> bool:
    """Check an inclusive syllable band. Missing bounds are open."""
    if syllable_min is not None and syllable_count < syllable_min:
        return False
    if syllable_max is not None and syllable_count > syllable_max:
        return False
    return True
