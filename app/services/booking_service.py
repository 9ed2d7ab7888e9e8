import logging
from typing import Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument

from app.context import AppContext, to_object_id
from app.models.booking import Booking, BOOKING_STATUSES
from app.models.session_status import NOT_SCHEDULED, SessionDay, normalize_code
from app.services.student_service import StudentService
from app.utils.dates import WEEKDAYS, to_datetime
from app.utils.errors import RecordNotFound, ValidationFailed

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = (
    'teacher_id', 'student_name', 'parent_fb_name', 'grade_level', 'subject', 'week_start_date'
)


class BookingService:
    """Weekly booking lifecycle: creation, session-day status and deletion"""

    def __init__(self, ctx: AppContext, student_service: Optional[StudentService] = None):
        self.ctx = ctx
        self.db = ctx.db
        self.student_service = student_service or StudentService(ctx)

    # Creation

    def create_booking(self, payload: Dict, upsert_student: bool = True) -> Booking:
        """
        Create one week's booking for a teacher.

        Scheduled days start pending (P) on their concrete date, the rest
        are N. The student record is upserted afterwards on a best-effort
        basis and the teacher's booking counter is incremented.
        """
        missing = [
            name for name in REQUIRED_BOOKING_FIELDS
            if payload.get(name) is None or (isinstance(payload.get(name), str) and not payload[name].strip())
        ]
        if missing:
            raise ValidationFailed(
                f"Missing required fields: {', '.join(missing)}",
                {name: ['Missing data for required field.'] for name in missing}
            )

        week_start = to_datetime(payload['week_start_date'], 'week_start_date')
        if week_start.weekday() != 0:
            if self.ctx.enforce_monday_week_start:
                raise ValidationFailed(
                    'week_start_date must be a Monday',
                    {'week_start_date': [f"{week_start.date()} is a {week_start.strftime('%A')}"]}
                )
            logger.warning(f"Booking week starts on {week_start.strftime('%A')} {week_start.date()}")

        teacher_id = to_object_id(payload['teacher_id'], 'teacher')
        teacher = self.db.teachers.find_one({'_id': teacher_id, 'is_deleted': {'$ne': True}})
        if not teacher:
            raise RecordNotFound('teacher', payload['teacher_id'])

        booking = Booking(
            teacher_id=teacher_id,
            teacher_name=teacher.get('name'),
            student_name=payload['student_name'].strip(),
            parent_fb_name=payload['parent_fb_name'].strip(),
            grade_level=payload['grade_level'],
            subject=payload['subject'].strip(),
            week_start_date=week_start,
            weekly_schedule=payload.get('weekly_schedule'),
            contact_number=payload.get('contact_number'),
            email=payload.get('email'),
            notes=payload.get('notes')
        )
        booking.initialize_sessions()
        booking.created_at = booking.updated_at = self.ctx.now()

        result = self.db.bookings.insert_one(booking.to_dict())
        booking._id = result.inserted_id
        logger.info(
            f"Created booking {booking._id} for {booking.student_name} with {booking.teacher_name} "
            f"week of {booking.week_start_date.date()} ({len(booking.scheduled_days())} sessions, "
            f"total {booking.total_earnings_per_week})"
        )

        if upsert_student:
            try:
                self.student_service.upsert_from_booking(booking)
            except Exception as e:
                # Booking stays in place, the student record catches up on the next booking
                logger.error(f"Student upsert failed for booking {booking._id}: {str(e)}")

        self.db.teachers.update_one({'_id': teacher_id}, {'$inc': {'total_bookings': 1}})
        return booking

    # Reads

    def get_booking(self, booking_id) -> Booking:
        data = self.db.bookings.find_one({'_id': to_object_id(booking_id, 'booking')})
        if not data:
            raise RecordNotFound('booking', booking_id)
        return Booking.from_dict(data)

    def list_bookings(self, status: Optional[str] = None, teacher_id=None) -> List[Booking]:
        query = {'is_deleted': False}
        if status:
            query['status'] = status
        if teacher_id:
            query['teacher_id'] = to_object_id(teacher_id, 'teacher')

        cursor = self.db.bookings.find(query).sort('week_start_date', DESCENDING)
        return [Booking.from_dict(data) for data in cursor]

    def get_bookings_by_teacher(self, teacher_id) -> List[Booking]:
        return self.list_bookings(teacher_id=teacher_id)

    def get_booking_stats(self) -> Dict[str, int]:
        stats = {'total': self.db.bookings.count_documents({'is_deleted': False})}
        for status in BOOKING_STATUSES:
            stats[status] = self.db.bookings.count_documents({'is_deleted': False, 'status': status})
        return stats

    # Session-day status

    def update_session_status(self, booking_id, status_map: Dict) -> Booking:
        """
        Apply an operator's week of status codes.

        status_map maps weekday names to a code or to
        {'status': code, 'date': optional date}. Weekdays left out are
        unchanged. Days the weekly schedule leaves out only take N.
        """
        if not isinstance(status_map, dict) or not status_map:
            raise ValidationFailed('session_status must be a non-empty object',
                                   {'session_status': ['Not a valid mapping.']})

        booking = self.get_booking(booking_id)
        changes = {}
        for raw_day, entry in status_map.items():
            day = str(raw_day).lower()
            if day not in WEEKDAYS:
                raise ValidationFailed(f"Unknown weekday: {raw_day}", {'session_status': {str(raw_day): ['Unknown weekday.']}})

            if isinstance(entry, dict):
                code = entry.get('status')
                day_date = entry.get('date')
            else:
                code, day_date = entry, None

            code = normalize_code(code)
            if code != NOT_SCHEDULED and not booking.weekly_schedule[day].is_scheduled:
                raise ValidationFailed(
                    f"{day.capitalize()} is not scheduled in this booking",
                    {'session_status': {day: ['Only N is allowed on an unscheduled day.']}}
                )

            current = booking.session_status[day]
            changes[day] = current.transition(
                code,
                day,
                booking.week_start_date,
                to_datetime(day_date) if day_date else None
            )

        return self._write_days(booking, changes)

    def set_day_status(self, booking_id, day: str, code: str, day_date=None) -> Booking:
        """Single-day form of update_session_status"""
        return self.update_session_status(booking_id, {day: {'status': code, 'date': day_date}})

    def _write_days(self, booking: Booking, changes: Dict[str, SessionDay]) -> Booking:
        update = {f'session_status.{day}': entry.to_dict() for day, entry in changes.items()}
        update['updated_at'] = self.ctx.now()

        data = self.db.bookings.find_one_and_update(
            {'_id': booking._id},
            {'$set': update},
            return_document=ReturnDocument.AFTER
        )
        if not data:
            raise RecordNotFound('booking', booking._id)

        for day, entry in changes.items():
            previous = booking.session_status[day].status
            if previous != entry.status:
                logger.info(f"Booking {booking._id} {day}: {previous} -> {entry.status}")
        return Booking.from_dict(data)

    # Whole-booking lifecycle

    def update_booking_status(self, booking_id, status: str) -> Booking:
        if status not in BOOKING_STATUSES:
            raise ValidationFailed(f"Unknown booking status: {status!r}",
                                   {'status': [f"Must be one of {', '.join(BOOKING_STATUSES)}"]})

        data = self.db.bookings.find_one_and_update(
            {'_id': to_object_id(booking_id, 'booking')},
            {'$set': {'status': status, 'updated_at': self.ctx.now()}},
            return_document=ReturnDocument.AFTER
        )
        if not data:
            raise RecordNotFound('booking', booking_id)
        return Booking.from_dict(data)

    def delete_booking(self, booking_id, permanent: bool = False) -> Dict:
        """
        Soft-delete (or permanently remove) a booking. The teacher's
        booking counter drops once per booking, whichever comes first.
        """
        object_id = to_object_id(booking_id, 'booking')

        if permanent:
            data = self.db.bookings.find_one_and_delete({'_id': object_id})
            if not data:
                raise RecordNotFound('booking', booking_id)
            counted = not data.get('is_deleted', False)
        else:
            data = self.db.bookings.find_one_and_update(
                {'_id': object_id},
                {'$set': {'is_deleted': True, 'deleted_at': self.ctx.now()}}
            )
            if not data:
                raise RecordNotFound('booking', booking_id)
            counted = not data.get('is_deleted', False)

        if counted:
            self.db.teachers.update_one(
                {'_id': data['teacher_id'], 'total_bookings': {'$gt': 0}},
                {'$inc': {'total_bookings': -1}}
            )

        logger.info(f"Booking {booking_id} {'permanently deleted' if permanent else 'moved to deleted items'}")
        return {'booking_id': str(object_id), 'permanent': permanent}
