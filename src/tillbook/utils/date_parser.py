"""Date parsing utilities for shift, holiday and history dates."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "15 Jan 2024", etc.
    - Relative days: "today", "yesterday", "tomorrow"
    - Weekdays: "last friday", "next monday"
    - Offsets: "3 days ago", "2 weeks ago", "1 month ago"

    Args:
        date_str: Date string
        today: Reference date for relative input (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    if not text:
        raise ValueError("Date cannot be empty")
    today = today or date.today()

    relative_days = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_days:
        return relative_days[text]

    words = text.split()
    if len(words) == 2 and words[0] in ("last", "next") and words[1] in WEEKDAYS:
        target = WEEKDAYS.index(words[1])
        if words[0] == "last":
            days = (today.weekday() - target) % 7 or 7
            return today - timedelta(days=days)
        days = (target - today.weekday()) % 7 or 7
        return today + timedelta(days=days)

    if len(words) == 3 and words[2] == "ago" and words[0].isdigit():
        count = int(words[0])
        unit = words[1].rstrip("s")
        if unit == "day":
            return today - timedelta(days=count)
        if unit == "week":
            return today - timedelta(weeks=count)
        if unit == "month":
            return today - relativedelta(months=count)

    try:
        return date_parser.parse(text, dayfirst=False).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e
