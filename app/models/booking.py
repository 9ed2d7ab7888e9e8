from datetime import datetime, timedelta
from bson import ObjectId
from typing import Optional, Dict

from app.models.session_status import SessionDay, blank_week
from app.utils.dates import WEEKDAYS, end_of_day, start_of_day
from app.utils.errors import ValidationFailed
from app.utils.rates import get_rate, parse_duration

BOOKING_STATUSES = ('active', 'completed', 'cancelled')

DEFAULT_DURATION = 1.0


class ScheduleDay:
    """One weekday of a weekly schedule"""

    def __init__(self, is_scheduled: bool = False, duration: float = DEFAULT_DURATION):
        self.is_scheduled = is_scheduled
        self.duration = duration

    @classmethod
    def from_raw(cls, raw, day: str) -> 'ScheduleDay':
        """
        Accepts a bare boolean, {'isScheduled': ..., 'duration': ...} or
        {'is_scheduled': ..., 'duration': ...}.
        """
        if raw is None:
            return cls(False)
        if isinstance(raw, bool):
            return cls(raw)
        if isinstance(raw, ScheduleDay):
            return raw
        if not isinstance(raw, dict):
            raise ValidationFailed(
                f"Invalid schedule entry for {day}",
                {'weekly_schedule': {day: ['Must be a boolean or an object']}}
            )

        is_scheduled = raw.get('is_scheduled', raw.get('isScheduled', False))
        if not isinstance(is_scheduled, bool):
            raise ValidationFailed(
                f"Invalid isScheduled for {day}: {is_scheduled!r}",
                {'weekly_schedule': {day: ['isScheduled must be true or false']}}
            )
        duration = raw.get('duration')
        if duration is None:
            duration = DEFAULT_DURATION
        elif is_scheduled:
            duration = parse_duration(duration)
        else:
            # Unscheduled days carry no earnings, keep whatever duration parses
            try:
                duration = parse_duration(duration)
            except ValidationFailed:
                duration = DEFAULT_DURATION
        return cls(is_scheduled, duration)

    def to_dict(self) -> dict:
        return {'is_scheduled': self.is_scheduled, 'duration': self.duration}


def normalize_weekly_schedule(raw: Optional[Dict]) -> Dict[str, ScheduleDay]:
    """Normalize an incoming schedule into a ScheduleDay for all seven weekdays"""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ValidationFailed('weekly_schedule must be an object', {'weekly_schedule': ['Not a valid mapping.']})

    unknown = [key for key in raw if str(key).lower() not in WEEKDAYS]
    if unknown:
        raise ValidationFailed(
            f"Unknown weekdays in schedule: {', '.join(map(str, unknown))}",
            {'weekly_schedule': {str(key): ['Unknown weekday.'] for key in unknown}}
        )

    lowered = {str(key).lower(): value for key, value in raw.items()}
    return {day: ScheduleDay.from_raw(lowered.get(day), day) for day in WEEKDAYS}


class Booking:
    """
    One student's scheduled sessions with one teacher for a single
    Monday-Sunday week.
    """

    def __init__(self, teacher_id, teacher_name, student_name, parent_fb_name,
                 grade_level, subject, week_start_date, weekly_schedule=None,
                 contact_number=None, email=None, notes=None):
        self.teacher_id = ObjectId(teacher_id) if teacher_id else None
        self.teacher_name = teacher_name
        self.student_name = student_name
        self.parent_fb_name = parent_fb_name
        self.grade_level = grade_level
        self.subject = subject
        self.contact_number = contact_number
        self.email = email
        self.notes = notes
        self.week_start_date = start_of_day(week_start_date)
        self.week_end_date = end_of_day(self.week_start_date + timedelta(days=6))
        self.weekly_schedule = normalize_weekly_schedule(weekly_schedule)
        self.session_status = blank_week()
        self.total_earnings_per_week = 0
        self.status = 'active'  # 'active', 'completed', 'cancelled'
        self.is_deleted = False
        self.deleted_at = None
        self.created_at = None
        self.updated_at = None

    def day_date(self, day: str) -> datetime:
        return self.week_start_date + timedelta(days=WEEKDAYS.index(day))

    def initialize_sessions(self):
        """Mark scheduled days pending on their concrete date, the rest N"""
        for day in WEEKDAYS:
            if self.weekly_schedule[day].is_scheduled:
                self.session_status[day] = SessionDay.scheduled(
                    self.day_date(day), self.week_start_date, self.week_end_date
                )
            else:
                self.session_status[day] = SessionDay()
        self.total_earnings_per_week = self.calculate_weekly_total()

    def calculate_weekly_total(self) -> int:
        """Sum of full rates (not shares) over scheduled days"""
        return sum(
            get_rate(entry.duration).total_rate
            for entry in self.weekly_schedule.values()
            if entry.is_scheduled
        )

    def scheduled_days(self):
        return [day for day in WEEKDAYS if self.weekly_schedule[day].is_scheduled]

    def to_dict(self):
        """Convert booking to a MongoDB document"""
        data = {
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher_name,
            'student_name': self.student_name,
            'parent_fb_name': self.parent_fb_name,
            'grade_level': self.grade_level,
            'subject': self.subject,
            'contact_number': self.contact_number,
            'email': self.email,
            'notes': self.notes,
            'week_start_date': self.week_start_date,
            'week_end_date': self.week_end_date,
            'weekly_schedule': {day: entry.to_dict() for day, entry in self.weekly_schedule.items()},
            'session_status': {day: entry.to_dict() for day, entry in self.session_status.items()},
            'total_earnings_per_week': self.total_earnings_per_week,
            'status': self.status,
            'is_deleted': self.is_deleted,
            'deleted_at': self.deleted_at,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

        if hasattr(self, '_id') and self._id is not None:
            data['_id'] = self._id

        return data

    @classmethod
    def from_dict(cls, data):
        """Create booking from a MongoDB document"""
        booking = cls(
            teacher_id=data.get('teacher_id'),
            teacher_name=data.get('teacher_name'),
            student_name=data.get('student_name'),
            parent_fb_name=data.get('parent_fb_name'),
            grade_level=data.get('grade_level'),
            subject=data.get('subject'),
            week_start_date=data['week_start_date'],
            weekly_schedule=data.get('weekly_schedule'),
            contact_number=data.get('contact_number'),
            email=data.get('email'),
            notes=data.get('notes')
        )

        if '_id' in data:
            booking._id = data['_id']
        if data.get('week_end_date'):
            booking.week_end_date = data['week_end_date']
        if 'session_status' in data:
            booking.session_status = {
                day: SessionDay.from_dict((data['session_status'] or {}).get(day))
                for day in WEEKDAYS
            }
        booking.total_earnings_per_week = data.get('total_earnings_per_week', 0)
        booking.status = data.get('status', 'active')
        booking.is_deleted = data.get('is_deleted', False)
        booking.deleted_at = data.get('deleted_at')
        if 'created_at' in data:
            booking.created_at = data['created_at']
        if 'updated_at' in data:
            booking.updated_at = data['updated_at']
        return booking

    def to_response(self):
        """JSON-safe representation for API responses"""
        data = self.to_dict()
        data['_id'] = str(data['_id']) if data.get('_id') else None
        data['teacher_id'] = str(self.teacher_id) if self.teacher_id else None
        return data
