from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def day_key(now: datetime | None = None) -> str:
    """Calendar date (YYYY-MM-DD) used as the check-in key.

    Days roll over at UTC midnight; aware datetimes in other zones are
    converted first, naive ones are taken as UTC.
    """
    now = now or utcnow()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date().isoformat()


def seconds_until_midnight(now: datetime) -> float:
    """Seconds from ``now`` until 00:00:00 of the next day in ``now``'s own zone."""
    midnight = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return (midnight - now).total_seconds()
