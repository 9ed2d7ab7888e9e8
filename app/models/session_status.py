from datetime import datetime, timedelta
from typing import Dict, Optional

from app.utils.dates import WEEKDAYS, end_of_day, start_of_day
from app.utils.errors import InvalidStatusCode, ValidationFailed

COMPLETED = 'C'             # completed and paid
ADVANCE_PAID = 'A'          # session pending, already paid
PENDING = 'P'               # pending, unpaid
TEACHER_ABSENT = 'T'        # no payment
STUDENT_ABSENT = 'S'        # no payment
ADVANCE_TEACHER_ABSENT = 'AT'
ADVANCE_STUDENT_ABSENT = 'AS'
NOT_SCHEDULED = 'N'

STATUS_CODES = (
    COMPLETED, ADVANCE_PAID, PENDING, TEACHER_ABSENT,
    STUDENT_ABSENT, ADVANCE_TEACHER_ABSENT, ADVANCE_STUDENT_ABSENT, NOT_SCHEDULED
)

STATUS_LABELS = {
    COMPLETED: 'Completed & paid',
    ADVANCE_PAID: 'Advance paid',
    PENDING: 'Pending',
    TEACHER_ABSENT: 'Teacher absent',
    STUDENT_ABSENT: 'Student absent',
    ADVANCE_TEACHER_ABSENT: 'Advance paid, teacher absent',
    ADVANCE_STUDENT_ABSENT: 'Advance paid, student absent',
    NOT_SCHEDULED: 'Not scheduled',
}

PAID_CODES = frozenset({COMPLETED, ADVANCE_PAID})
ADVANCE_ABSENCE_CODES = frozenset({ADVANCE_TEACHER_ABSENT, ADVANCE_STUDENT_ABSENT})


def normalize_code(code) -> str:
    if not isinstance(code, str) or code.strip().upper() not in STATUS_CODES:
        raise InvalidStatusCode(code)
    return code.strip().upper()


def counts_as_paid(code: str, include_advance_absences: bool = False) -> bool:
    """Whether a day's code counts toward realized teacher/company earnings"""
    if code in PAID_CODES:
        return True
    return include_advance_absences and code in ADVANCE_ABSENCE_CODES


class SessionDay:
    """Status of one weekday inside a booking"""

    def __init__(self, status: str = NOT_SCHEDULED, date: Optional[datetime] = None,
                 week_start: Optional[datetime] = None, week_end: Optional[datetime] = None):
        self.status = status
        self.date = date
        self.week_start = week_start
        self.week_end = week_end

    @classmethod
    def scheduled(cls, day_date: datetime, week_start: datetime, week_end: datetime) -> 'SessionDay':
        return cls(PENDING, day_date, week_start, week_end)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'SessionDay':
        data = data or {}
        return cls(
            status=data.get('status', NOT_SCHEDULED),
            date=data.get('date'),
            week_start=data.get('week_start'),
            week_end=data.get('week_end')
        )

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'date': self.date,
            'week_start': self.week_start,
            'week_end': self.week_end
        }

    def transition(self, new_code: str, day: str, booking_week_start: datetime,
                   day_date: Optional[datetime] = None) -> 'SessionDay':
        """
        Return the day after an operator writes new_code.

        N detaches the day from the calendar. Any other code keeps an
        existing date; a day without one gets day_date, or the booking's
        own date for that weekday.
        """
        new_code = normalize_code(new_code)
        if new_code == NOT_SCHEDULED:
            return SessionDay(NOT_SCHEDULED)

        week_start = start_of_day(booking_week_start)
        week_end = end_of_day(week_start + timedelta(days=6))

        if self.date is not None and day_date is None:
            return SessionDay(new_code, self.date, self.week_start or week_start, self.week_end or week_end)

        if day_date is None:
            day_date = week_start + timedelta(days=WEEKDAYS.index(day))
        elif not week_start <= day_date <= week_end:
            raise ValidationFailed(
                f"Date for {day} falls outside the booking week",
                {'date': [f"Must be between {week_start.date()} and {week_end.date()}"]}
            )

        return SessionDay(new_code, start_of_day(day_date), week_start, week_end)


def blank_week() -> Dict[str, SessionDay]:
    return {day: SessionDay() for day in WEEKDAYS}
