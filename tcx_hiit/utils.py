import math
from datetime import datetime, timezone


def round_half_up(value):
    """Round to the nearest integer, with .5 going up (toward +inf)."""
    return int(math.floor(value + 0.5))


def format_locale_timestamp(moment: datetime) -> str:
    """Return a timestamp such as '10/19/2026, 3:04:05 PM'."""
    hour = moment.hour % 12 or 12
    suffix = 'AM' if moment.hour < 12 else 'PM'
    return (f"{moment.month}/{moment.day}/{moment.year}, "
            f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}")


def format_iso_date(moment: datetime) -> str:
    """Calendar date in YYYY-MM-DD form, in UTC for aware datetimes."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()
