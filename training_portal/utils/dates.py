# utils/dates.py
from datetime import datetime


def to_datetime(value):
    """Accept a datetime or an ISO string; anything else becomes None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def format_date(value, fmt='%Y-%m-%d'):
    parsed = to_datetime(value)
    return parsed.strftime(fmt) if parsed else ''


def format_time(time_value):
    """'14:05' -> '2:05 PM'."""
    if not time_value:
        return ''
    hours, minutes = (int(part) for part in time_value.split(':')[:2])
    period = 'PM' if hours >= 12 else 'AM'
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def format_time_range(time_from=None, time_to=None, duration=None):
    if time_from and time_to:
        time_range = f"{format_time(time_from)} - {format_time(time_to)}"
        return f"{time_range} ({duration})" if duration else time_range
    if time_from:
        return format_time(time_from)
    return ''
