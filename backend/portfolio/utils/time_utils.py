from datetime import date, datetime, timezone
from typing import Optional
import pytz


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def local_today(tz_name: Optional[str] = None) -> date:
    """Calendar day used for daily counters and fingerprints.

    With no timezone name the process local clock decides, which is what the
    daily counter reset is defined against.
    """
    if tz_name:
        return datetime.now(pytz.timezone(tz_name)).date()
    return datetime.now().date()
