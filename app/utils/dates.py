from datetime import datetime, date, timedelta, time
from typing import List, Tuple, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from app.utils.errors import ValidationFailed

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

END_OF_DAY = time(23, 59, 59, 999000)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    # Millisecond precision, BSON dates drop microseconds
    return datetime.combine(value.date(), END_OF_DAY)


def to_datetime(value: Union[datetime, date, str, None], field: str = 'date') -> datetime:
    """Coerce a date, datetime or ISO string into a naive datetime"""
    if value is None:
        raise ValidationFailed(f"{field} is required", {field: ['Missing data for required field.']})
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time())
    try:
        parsed = date_parser.isoparse(str(value))
    except (ValueError, OverflowError):
        raise ValidationFailed(f"Invalid {field}: {value!r}", {field: ['Not a valid date.']})
    return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed


def weekday_name(value: datetime) -> str:
    return WEEKDAYS[value.weekday()]


def week_bounds(value: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999 of the week containing value"""
    week_start = start_of_day(value) - timedelta(days=value.weekday())
    week_end = end_of_day(week_start + timedelta(days=6))
    return week_start, week_end


def period_range(mode: str, offset: int, now: datetime) -> Tuple[datetime, datetime]:
    """
    Resolve a reporting window.

    week: the Monday-Sunday week containing now + offset weeks.
    month: first to last calendar day of this month + offset months.
    """
    if mode == 'week':
        return week_bounds(now + timedelta(days=7 * offset))
    if mode == 'month':
        first = start_of_day(now).replace(day=1) + relativedelta(months=offset)
        last = first + relativedelta(months=1) - timedelta(days=1)
        return first, end_of_day(last)
    raise ValidationFailed(f"Unknown schedule mode: {mode!r}", {'mode': ["Must be 'week' or 'month'"]})


def weeks_in_range(range_start: datetime, range_end: datetime) -> List[Tuple[datetime, datetime]]:
    """Every Monday-aligned week that intersects [range_start, range_end]"""
    weeks = []
    week_start, week_end = week_bounds(range_start)
    while week_start <= range_end:
        weeks.append((week_start, week_end))
        week_start += timedelta(days=7)
        week_end += timedelta(days=7)
    return weeks


def in_range(value: datetime, range_start: datetime, range_end: datetime) -> bool:
    return value is not None and range_start <= value <= range_end
