"""Clock helpers.

Everything that stamps a date goes through here so tests can patch one place.
"""

from datetime import date, datetime


def today_iso() -> str:
    """Calendar date, e.g. 2025-03-14."""
    return date.today().isoformat()


def now_iso() -> str:
    """Microsecond-resolution local timestamp, e.g. 2025-03-14T09:30:00.125000.

    Stamps are compared as strings, so two events in the same second must
    still order correctly.
    """
    return datetime.now().isoformat(timespec="microseconds")


def parse_date(value: str) -> str | None:
    """Return the value if it is an ISO date or timestamp, else None."""
    value = value.strip()
    if not value:
        return None
    try:
        if "T" in value:
            datetime.fromisoformat(value)
        else:
            date.fromisoformat(value)
    except ValueError:
        return None
    return value
