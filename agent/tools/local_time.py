"""Local time tool."""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_local_time(location: str) -> str:
    """
    Get the local time for a specified location.

    Args:
        location: IANA time zone name, for example ``Europe/Paris``
    """
    try:
        zone = ZoneInfo(location)
    except (ZoneInfoNotFoundError, ValueError):
        return f"Unknown time zone: {location}. Use an IANA name such as Europe/Paris."
    now = datetime.now(zone)
    return f"{now.strftime('%H:%M')} ({now.strftime('%A, %d %B %Y')}, {location})"
