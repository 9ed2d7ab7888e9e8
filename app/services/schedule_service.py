"""
Teacher schedule projection
Rebuilds a teacher's booked sessions for a week or a calendar month and
computes the realized earnings per booking-week.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from app.context import AppContext, to_object_id
from app.models.booking import Booking
from app.models.session_status import NOT_SCHEDULED, counts_as_paid
from app.utils.dates import in_range, period_range, weekday_name, weeks_in_range
from app.utils.rates import get_rate

logger = logging.getLogger(__name__)

SCHEDULE_MODES = ('week', 'month')


class ScheduleService:
    """Read-only weekly/monthly schedule projection for one teacher"""

    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.db = ctx.db

    def project(self, teacher_id, mode: str = 'week', offset: int = 0) -> List[Dict]:
        """
        One row per (booking, week) overlapping the requested period.

        Sessions are placed by their recorded date, not by their schedule
        key, and listed under the weekday of that date. Month view leaves
        out booking-weeks where nothing has been recorded (all N).
        """
        range_start, range_end = period_range(mode, offset, self.ctx.now())
        bookings = self._teacher_bookings(teacher_id)

        rows = []
        if mode == 'week':
            for booking in bookings:
                row = self._build_row(booking, range_start, range_end)
                if row:
                    rows.append(row)
        else:
            for week_start, week_end in weeks_in_range(range_start, range_end):
                for booking in bookings:
                    row = self._build_row(booking, week_start, week_end)
                    if row and any(day['status'] != NOT_SCHEDULED for day in row['days']):
                        rows.append(row)

        rows.sort(key=lambda row: row['week_start'])
        logger.debug(f"Projected {len(rows)} rows for teacher {teacher_id} ({mode} {offset:+d})")
        return rows

    def summarize(self, rows: List[Dict]) -> Dict:
        """Totals for a projected period, as shown on the salary view"""
        statuses = Counter(day['status'] for row in rows for day in row['days'])
        teacher_earnings = sum(row['week_earnings'] for row in rows)
        company_earnings = sum(row['company_earnings'] for row in rows)
        return {
            'teacher_earnings': teacher_earnings,
            'company_earnings': company_earnings,
            'total_revenue': teacher_earnings + company_earnings,
            'sessions_by_status': dict(statuses),
            'paid_sessions': sum(1 for row in rows for day in row['days'] if day['is_paid']),
            'rows': len(rows)
        }

    def _teacher_bookings(self, teacher_id) -> List[Booking]:
        cursor = self.db.bookings.find({
            'teacher_id': to_object_id(teacher_id, 'teacher'),
            'is_deleted': False
        })
        return [Booking.from_dict(data) for data in cursor]

    def _build_row(self, booking: Booking, range_start: datetime, range_end: datetime) -> Optional[Dict]:
        include_advance_absences = self.ctx.count_advance_absences_as_paid
        days = []
        week_earnings = 0
        company_earnings = 0

        for day in booking.scheduled_days():
            session = booking.session_status[day]
            if not in_range(session.date, range_start, range_end):
                continue

            rate = get_rate(booking.weekly_schedule[day].duration)
            is_paid = counts_as_paid(session.status, include_advance_absences)
            if is_paid:
                week_earnings += rate.teacher_share
                company_earnings += rate.company_share

            days.append({
                'day': weekday_name(session.date),
                'scheduled_day': day,
                'date': session.date,
                'status': session.status,
                'duration': rate.duration,
                'rate': rate.total_rate,
                'earnings': rate.teacher_share if is_paid else 0,
                'is_paid': is_paid
            })

        if not days:
            return None

        days.sort(key=lambda entry: entry['date'])
        return {
            'booking_id': str(booking._id),
            'student_name': booking.student_name,
            'parent_fb_name': booking.parent_fb_name,
            'subject': booking.subject,
            'grade_level': booking.grade_level,
            'booking_status': booking.status,
            'week_start': range_start,
            'week_end': range_end,
            'days': days,
            'week_earnings': week_earnings,
            'company_earnings': company_earnings
        }
