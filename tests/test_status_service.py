from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from app.services.status_service import STATUS_CHECK_JOB, StatusService
from app.utils.job_lock import JobLock
from tests.conftest import NOW


@pytest.fixture
def status_service(ctx):
    return StatusService(ctx)


def make_student(db, name='Alice', parent='Maria Santos', **fields):
    doc = {
        'student_name': name,
        'parent_fb_name': parent,
        'grade_level': 'Grade 5',
        'status': 'active',
        'inactive_days': 0,
        'last_status_change': None,
        'assigned_teacher_for_the_week': None,
        'is_deleted': False,
        'created_at': NOW - timedelta(days=30),
    }
    doc.update(fields)
    return db.students.insert_one(doc).inserted_id


def test_teacher_with_current_booking_becomes_active(db, status_service, make_booking, teacher_id):
    db.teachers.update_one({'_id': teacher_id}, {'$set': {'status': 'inactive', 'inactive_days': 4}})
    make_booking(upsert_student=False)

    result = status_service.run_status_check()

    assert result == {'skipped': False, 'teachers_updated': 1, 'students_updated': 0, 'errors': 0}
    teacher = db.teachers.find_one({'_id': teacher_id})
    assert teacher['status'] == 'active'
    assert teacher['inactive_days'] == 0
    assert teacher['last_status_change'] == NOW


def test_teacher_without_booking_becomes_inactive(db, status_service, teacher_id):
    status_service.run_status_check()

    teacher = db.teachers.find_one({'_id': teacher_id})
    assert teacher['status'] == 'inactive'
    assert teacher['inactive_days'] == 1
    assert teacher['last_status_change'] == NOW


def test_inactive_days_count_from_last_change(db, status_service, teacher_id):
    db.teachers.update_one({'_id': teacher_id}, {'$set': {
        'status': 'inactive',
        'inactive_days': 1,
        'last_status_change': NOW - timedelta(days=5, hours=3),
    }})

    result = status_service.run_status_check()

    assert result['teachers_updated'] == 1
    teacher = db.teachers.find_one({'_id': teacher_id})
    assert teacher['status'] == 'inactive'
    assert teacher['inactive_days'] == 5
    assert teacher['last_status_change'] == NOW - timedelta(days=5, hours=3)


def test_only_active_current_week_bookings_count(db, status_service, booking_service, make_booking, teacher_id):
    last_week = make_booking(week_start='2025-11-24', upsert_student=False)
    cancelled = make_booking(upsert_student=False)
    booking_service.update_booking_status(str(cancelled._id), 'cancelled')
    deleted = make_booking(upsert_student=False)
    booking_service.delete_booking(str(deleted._id))

    assert not status_service.has_current_week_bookings(teacher_id, NOW)
    status_service.run_status_check()
    assert db.teachers.find_one({'_id': teacher_id})['status'] == 'inactive'
    assert last_week.week_end_date < NOW


def test_booking_on_week_boundary_counts(db, status_service, make_booking, teacher_id, clock):
    make_booking(upsert_student=False)
    clock.current = datetime(2025, 12, 7, 23, 59)
    assert status_service.has_current_week_bookings(teacher_id, clock())
    clock.current = datetime(2025, 12, 8, 0, 0)
    assert not status_service.has_current_week_bookings(teacher_id, clock())


def test_student_matched_case_insensitively(db, status_service, make_booking, teacher_id):
    make_booking(student_name='ALICE', parent_fb_name='maria santos', upsert_student=False)
    student_id = make_student(db, status='inactive', inactive_days=9)

    status_service.run_status_check()

    student = db.students.find_one({'_id': student_id})
    assert student['status'] == 'active'
    assert student['inactive_days'] == 0


def test_student_names_are_matched_literally(db, status_service, make_booking):
    make_booking(student_name='Jo (Jr.)', upsert_student=False)
    exact = make_student(db, name='Jo (Jr.)', status='inactive')
    pattern_like = make_student(db, name='Jo .*')

    status_service.run_status_check()

    assert db.students.find_one({'_id': exact})['status'] == 'active'
    assert db.students.find_one({'_id': pattern_like})['status'] == 'inactive'


def test_student_going_inactive_loses_teacher(db, status_service, teacher_id):
    student_id = make_student(db, assigned_teacher_for_the_week=teacher_id)

    status_service.run_status_check()

    student = db.students.find_one({'_id': student_id})
    assert student['status'] == 'inactive'
    assert student['inactive_days'] == 1
    assert student['assigned_teacher_for_the_week'] is None


def test_second_run_changes_nothing(db, status_service, make_booking, make_teacher):
    make_booking()
    make_teacher(name='Mr. Lim')
    make_student(db, name='Bea', parent='Ana Cruz')

    first = status_service.run_status_check()
    snapshot = (list(db.teachers.find()), list(db.students.find()))
    second = status_service.run_status_check()

    assert first['teachers_updated'] == 1
    assert first['students_updated'] == 1
    assert second == {'skipped': False, 'teachers_updated': 0, 'students_updated': 0, 'errors': 0}
    assert (list(db.teachers.find()), list(db.students.find())) == snapshot


def test_deleted_records_are_ignored(db, status_service, teacher_id):
    db.teachers.update_one({'_id': teacher_id}, {'$set': {'is_deleted': True}})
    student_id = make_student(db, is_deleted=True)

    result = status_service.run_status_check()

    assert result['teachers_updated'] == 0
    assert result['students_updated'] == 0
    assert db.students.find_one({'_id': student_id})['status'] == 'active'
    assert status_service.update_teacher_status(str(teacher_id)) is None


def test_one_failing_teacher_does_not_stop_the_sweep(db, status_service, make_teacher, monkeypatch):
    broken = make_teacher(name='Mr. Broken')
    healthy = make_teacher(name='Ms. Healthy')
    original = status_service.has_current_week_bookings

    def flaky(teacher_id, now):
        if teacher_id == broken:
            raise RuntimeError('read timed out')
        return original(teacher_id, now)

    monkeypatch.setattr(status_service, 'has_current_week_bookings', flaky)
    result = status_service.run_status_check()

    assert result['errors'] == 1
    assert result['teachers_updated'] == 1
    assert db.teachers.find_one({'_id': broken})['status'] == 'active'
    assert db.teachers.find_one({'_id': healthy})['status'] == 'inactive'


def test_run_skipped_while_lock_held(db, ctx, status_service, teacher_id):
    other_run = JobLock(db, STATUS_CHECK_JOB, 900, ctx.now)
    assert other_run.acquire()

    result = status_service.run_status_check()

    assert result['skipped'] is True
    assert db.teachers.find_one({'_id': teacher_id})['status'] == 'active'

    other_run.release()
    assert status_service.run_status_check()['teachers_updated'] == 1
    assert db.job_locks.count_documents({}) == 0


def test_expired_lock_is_taken_over(db, ctx, clock, status_service, teacher_id):
    crashed_run = JobLock(db, STATUS_CHECK_JOB, 900, ctx.now)
    assert crashed_run.acquire()

    clock.advance(minutes=16)
    result = status_service.run_status_check()

    assert result['skipped'] is False
    assert result['teachers_updated'] == 1


def test_single_entity_refresh(db, status_service, make_booking, teacher_id):
    make_booking(upsert_student=False)
    idle_student = make_student(db, name='Bea', parent='Ana Cruz')
    db.teachers.update_one({'_id': teacher_id}, {'$set': {'status': 'inactive'}})

    assert status_service.update_teacher_status(str(teacher_id))['status'] == 'active'
    assert status_service.update_student_status(str(idle_student))['status'] == 'inactive'
    assert status_service.update_student_status(str(ObjectId())) is None
