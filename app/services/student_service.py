import logging
from typing import Dict, Optional

from app.context import AppContext
from app.models.booking import Booking
from app.models.student import Student, exact_name_pattern

logger = logging.getLogger(__name__)


class StudentService:
    """Student records derived from bookings"""

    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.db = ctx.db

    def find_by_identity(self, student_name: str, parent_fb_name: str) -> Optional[dict]:
        return self.db.students.find_one({
            'student_name': exact_name_pattern(student_name),
            'parent_fb_name': exact_name_pattern(parent_fb_name),
            'is_deleted': False
        })

    def upsert_from_booking(self, booking: Booking) -> Dict:
        """
        Create the booking's student, or refresh the existing one with the
        booking's teacher, grade and contact details and mark it active.
        """
        now = self.ctx.now()
        existing = self.find_by_identity(booking.student_name, booking.parent_fb_name)

        if existing:
            update = {
                'assigned_teacher_for_the_week': booking.teacher_id,
                'grade_level': booking.grade_level,
                'status': 'active',
                'updated_at': now
            }
            if booking.contact_number:
                update['contact_number'] = booking.contact_number
            if booking.email:
                update['email'] = booking.email
            if existing.get('status') != 'active':
                update['last_status_change'] = now
                update['inactive_days'] = 0

            self.db.students.update_one({'_id': existing['_id']}, {'$set': update})
            existing.update(update)
            logger.info(f"Student {booking.student_name} assigned to teacher {booking.teacher_name}")
            return existing

        student = Student(
            _id=None,
            student_name=booking.student_name,
            parent_fb_name=booking.parent_fb_name,
            grade_level=booking.grade_level,
            contact_number=booking.contact_number,
            email=booking.email,
            assigned_teacher_for_the_week=booking.teacher_id,
            status='active',
            last_status_change=now,
            created_at=now,
            updated_at=now
        )
        result = self.db.students.insert_one(student.to_dict())
        student._id = result.inserted_id
        logger.info(f"Created student {student.student_name} from booking")
        return student.to_dict()

    def remove_duplicates(self) -> Dict:
        """
        Soft-delete duplicate students, keeping the oldest record for each
        case-insensitive (student_name, parent_fb_name) pair.
        """
        seen = set()
        duplicate_ids = []

        for data in self.db.students.find({'is_deleted': False}).sort('created_at', 1):
            key = Student.from_dict(data).identity_key
            if key in seen:
                duplicate_ids.append(data['_id'])
            else:
                seen.add(key)

        if duplicate_ids:
            self.db.students.update_many(
                {'_id': {'$in': duplicate_ids}},
                {'$set': {'is_deleted': True, 'deleted_at': self.ctx.now()}}
            )
            logger.info(f"Removed {len(duplicate_ids)} duplicate students")

        return {
            'removed_count': len(duplicate_ids),
            'removed_ids': [str(student_id) for student_id in duplicate_ids]
        }
