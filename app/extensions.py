from flask_cors import CORS
from celery import Celery
from pymongo import MongoClient, ASCENDING, DESCENDING

from app.context import AppContext, EXTENSION_KEY

# Initialize extensions
cors = CORS()
celery = Celery('liynmar', include=['app.tasks.status_tasks'])


def init_context(app, db=None, clock=None) -> AppContext:
    """Connect MongoDB (unless a database is supplied) and store the app context."""
    if db is None:
        client = MongoClient(app.config['MONGO_URI'], tz_aware=False)
        db = client.get_default_database(app.config.get('MONGODB_DB', 'liynmar'))
        app.extensions['mongo_client'] = client

    ctx = AppContext.from_config(db, app.config, clock=clock)
    app.extensions[EXTENSION_KEY] = ctx
    return ctx


def init_celery(app, celery_app=celery):
    """Tie the Celery object to the app's config and run tasks in an app context."""
    celery_app.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        timezone=app.config.get('CELERY_TIMEZONE', 'UTC')
    )

    class ContextTask(celery_app.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery_app.Task = ContextTask
    return celery_app


def ensure_indexes(db):
    """Create the indexes the booking queries and status check rely on."""
    db.bookings.create_index([('teacher_id', ASCENDING)])
    db.bookings.create_index([('teacher_id', ASCENDING), ('week_start_date', DESCENDING)])
    db.bookings.create_index([('week_start_date', ASCENDING), ('week_end_date', ASCENDING)])
    db.bookings.create_index([('status', ASCENDING)])
    db.bookings.create_index([('is_deleted', ASCENDING)])
    db.teachers.create_index([('email', ASCENDING)], unique=True, sparse=True)
    db.teachers.create_index([('status', ASCENDING)])
    db.teachers.create_index([('is_deleted', ASCENDING)])
    db.students.create_index([('student_name', ASCENDING)])
    db.students.create_index([('status', ASCENDING)])
    db.students.create_index([('is_deleted', ASCENDING)])
    db.students.create_index([('assigned_teacher_for_the_week', ASCENDING)])
