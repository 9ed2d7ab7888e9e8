"""
Teacher/student status reconciliation
Recomputes the active/inactive label of every teacher and student from
the bookings of the current Monday-Sunday week.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

from app.context import AppContext, to_object_id
from app.models.student import Student, exact_name_pattern
from app.models.teacher import Teacher
from app.utils.dates import week_bounds
from app.utils.job_lock import JobLock

logger = logging.getLogger(__name__)

STATUS_CHECK_JOB = 'status_check'

SECONDS_PER_DAY = 24 * 60 * 60


class StatusService:
    """Active/inactive bookkeeping for teachers and students"""

    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.db = ctx.db

    def _current_week_query(self, now: datetime) -> Dict:
        week_start, week_end = week_bounds(now)
        return {
            'is_deleted': False,
            'status': 'active',
            'week_start_date': {'$lte': week_end},
            'week_end_date': {'$gte': week_start}
        }

    def has_current_week_bookings(self, teacher_id, now: datetime) -> bool:
        query = self._current_week_query(now)
        query['teacher_id'] = teacher_id
        return self.db.bookings.count_documents(query) > 0

    def has_current_week_teacher(self, student_name: str, parent_fb_name: str, now: datetime) -> bool:
        query = self._current_week_query(now)
        query['student_name'] = exact_name_pattern(student_name)
        query['parent_fb_name'] = exact_name_pattern(parent_fb_name)
        return self.db.bookings.count_documents(query) > 0

    @staticmethod
    def _status_update(current_status: str, is_active: bool, inactive_days: int,
                       last_status_change: Optional[datetime], now: datetime) -> Dict:
        """
        Fields to write for one entity, empty when nothing changes.

        A flip stamps last_status_change and restarts the counter at 0
        (active) or 1 (inactive). A record that stays inactive counts whole
        days since its last flip.
        """
        new_status = 'active' if is_active else 'inactive'

        if current_status != new_status:
            return {
                'status': new_status,
                'last_status_change': now,
                'inactive_days': 0 if is_active else 1,
                'updated_at': now
            }

        if new_status == 'inactive':
            since = last_status_change or now
            days = int((now - since).total_seconds() // SECONDS_PER_DAY)
            if days > 0 and days != inactive_days:
                return {'inactive_days': days, 'updated_at': now}

        return {}

    def _reconcile_teacher(self, data: dict, now: datetime) -> bool:
        teacher = Teacher.from_dict(data)
        update = self._status_update(
            teacher.status,
            self.has_current_week_bookings(teacher._id, now),
            teacher.inactive_days,
            teacher.last_status_change,
            now
        )
        if not update:
            return False

        self.db.teachers.update_one({'_id': teacher._id}, {'$set': update})
        if 'status' in update:
            logger.info(f"Teacher {teacher.name} status updated to {update['status']}")
        else:
            logger.info(f"Teacher {teacher.name} inactive for {update['inactive_days']} days")
        return True

    def _reconcile_student(self, data: dict, now: datetime) -> bool:
        student = Student.from_dict(data)
        update = self._status_update(
            student.status,
            self.has_current_week_teacher(student.student_name, student.parent_fb_name, now),
            student.inactive_days,
            student.last_status_change,
            now
        )
        if not update:
            return False

        if update.get('status') == 'inactive':
            update['assigned_teacher_for_the_week'] = None

        self.db.students.update_one({'_id': student._id}, {'$set': update})
        if 'status' in update:
            logger.info(f"Student {student.student_name} status updated to {update['status']}")
        else:
            logger.info(f"Student {student.student_name} inactive for {update['inactive_days']} days")
        return True

    def update_teacher_status(self, teacher_id) -> Optional[dict]:
        """Refresh one teacher; None for missing or deleted records"""
        object_id = to_object_id(teacher_id, 'teacher')
        data = self.db.teachers.find_one({'_id': object_id})
        if not data or data.get('is_deleted'):
            return None
        self._reconcile_teacher(data, self.ctx.now())
        return self.db.teachers.find_one({'_id': object_id})

    def update_student_status(self, student_id) -> Optional[dict]:
        """Refresh one student; None for missing or deleted records"""
        object_id = to_object_id(student_id, 'student')
        data = self.db.students.find_one({'_id': object_id})
        if not data or data.get('is_deleted'):
            return None
        self._reconcile_student(data, self.ctx.now())
        return self.db.students.find_one({'_id': object_id})

    def update_all_teacher_statuses(self, now: datetime) -> Dict[str, int]:
        updated = errors = 0
        for data in self.db.teachers.find({'is_deleted': False}):
            try:
                if self._reconcile_teacher(data, now):
                    updated += 1
            except Exception as e:
                errors += 1
                logger.error(f"Error updating status for teacher {data.get('_id')}: {str(e)}")
        logger.info(f"Updated {updated} teacher statuses")
        return {'updated': updated, 'errors': errors}

    def update_all_student_statuses(self, now: datetime) -> Dict[str, int]:
        updated = errors = 0
        for data in self.db.students.find({'is_deleted': False}):
            try:
                if self._reconcile_student(data, now):
                    updated += 1
            except Exception as e:
                errors += 1
                logger.error(f"Error updating status for student {data.get('_id')}: {str(e)}")
        logger.info(f"Updated {updated} student statuses")
        return {'updated': updated, 'errors': errors}

    def run_status_check(self) -> Dict:
        """
        Full sweep over teachers then students.

        Returns {'teachers_updated', 'students_updated', 'errors'}, or
        {'skipped': True} when another sweep holds the job lock.
        """
        lock = JobLock(self.db, STATUS_CHECK_JOB, self.ctx.status_check_lock_ttl, self.ctx.now)
        with lock.held() as acquired:
            if not acquired:
                return {'skipped': True, 'teachers_updated': 0, 'students_updated': 0, 'errors': 0}

            now = self.ctx.now()
            week_start, week_end = week_bounds(now)
            logger.info(f"Running status check for week {week_start.date()} to {week_end.date()}")

            teachers = self.update_all_teacher_statuses(now)
            students = self.update_all_student_statuses(now)

            result = {
                'skipped': False,
                'teachers_updated': teachers['updated'],
                'students_updated': students['updated'],
                'errors': teachers['errors'] + students['errors']
            }
            logger.info(
                f"Status check complete: {result['teachers_updated']} teachers and "
                f"{result['students_updated']} students updated"
            )
            return result
