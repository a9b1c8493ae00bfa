from datetime import datetime, timedelta, timezone as dt_tz

# Display timezone of the learners (China Standard Time)
CST = dt_tz(timedelta(hours=8))

SECONDS_PER_DAY = 24 * 3600


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from start to end; negative when end is earlier."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def to_local_iso(dt_utc):
    return dt_utc.astimezone(CST).isoformat()


def local_date(dt_utc):
    return dt_utc.astimezone(CST).date()
