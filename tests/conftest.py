from datetime import datetime, timedelta

import mongomock
import pytest

from app.context import AppContext
from app.models.teacher import Teacher
from app.services.booking_service import BookingService

# Wednesday of the week starting Monday 2025-12-01
NOW = datetime(2025, 12, 3, 10, 0)


class FrozenClock:
    """Time source whose value only moves when a test moves it"""

    def __init__(self, now):
        self.current = now

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def db():
    return mongomock.MongoClient().liynmar_test


@pytest.fixture
def ctx(db, clock):
    return AppContext(db=db, clock=clock)


@pytest.fixture
def make_teacher(db):
    def _make(name='Ms. Reyes', status='active', **fields):
        teacher = Teacher(_id=None, name=name, major_subject='Math', status=status,
                          email=f"{name.split()[-1].lower()}@example.com", **fields)
        return db.teachers.insert_one(teacher.to_dict()).inserted_id
    return _make


@pytest.fixture
def teacher_id(make_teacher):
    return make_teacher()


@pytest.fixture
def booking_service(ctx):
    return BookingService(ctx)


@pytest.fixture
def make_booking(booking_service, teacher_id):
    def _make(week_start='2025-12-01', schedule=None, teacher=None, **fields):
        payload = {
            'teacher_id': str(teacher or teacher_id),
            'student_name': 'Alice',
            'parent_fb_name': 'Maria Santos',
            'grade_level': 'Grade 5',
            'subject': 'Math',
            'week_start_date': week_start,
            'weekly_schedule': schedule if schedule is not None else {
                'monday': {'isScheduled': True, 'duration': 1},
                'wednesday': {'isScheduled': True, 'duration': 1},
            },
        }
        upsert_student = fields.pop('upsert_student', True)
        payload.update(fields)
        return booking_service.create_booking(payload, upsert_student=upsert_student)
    return _make


@pytest.fixture
def flask_app(db, clock):
    from app.app import create_app
    app, _ = create_app('testing', db=db, clock=clock)
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()
