import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    MONGODB_URI = os.environ.get('MONGODB_URI') or 'mongodb://localhost:27017/liynmar'

    MONGODB_DB = os.environ.get('MONGODB_DB') or 'liynmar'

    # MongoClient picks the database from the URI path, MONGODB_DB otherwise
    @staticmethod
    def get_mongo_uri():
        """Get MongoDB URI with the database name in its path"""
        uri = os.environ.get('MONGODB_URI') or 'mongodb://localhost:27017/liynmar'

        # If it's a MongoDB Atlas URI without database name, add 'liynmar'
        if 'mongodb.net/' in uri and '?' in uri:
            base_uri, params = uri.split('?', 1)
            if not base_uri.endswith('/'):
                base_uri += '/'
            if base_uri.endswith('mongodb.net/'):
                uri = f"{base_uri}liynmar?{params}"

        return uri

    MONGO_URI = get_mongo_uri.__func__()

    # Celery Configuration
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL') or 'redis://localhost:6379/0'
    CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND') or 'redis://localhost:6379/0'
    CELERY_TIMEZONE = os.environ.get('CELERY_TIMEZONE') or 'Asia/Manila'

    # App Configuration
    APP_HOST = os.environ.get('APP_HOST') or '0.0.0.0'
    APP_PORT = int(os.environ.get('APP_PORT') or 5000)
    CORS_ORIGINS = os.environ.get('CLIENT_URL') or 'http://localhost:3000'
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    # Earnings policy: whether AT/AS (advance paid, then absent) count as paid
    COUNT_ADVANCE_ABSENCES_AS_PAID = _env_flag('COUNT_ADVANCE_ABSENCES_AS_PAID', False)

    # Reject bookings whose week start is not a Monday
    ENFORCE_MONDAY_WEEK_START = _env_flag('ENFORCE_MONDAY_WEEK_START', True)

    # Status reconciliation job
    STATUS_CHECK_LOCK_TTL = int(os.environ.get('STATUS_CHECK_LOCK_TTL') or 900)  # 15 minutes
    RECONCILE_DAILY_HOUR = int(os.environ.get('RECONCILE_DAILY_HOUR') or 0)
    RECONCILE_DAILY_MINUTE = int(os.environ.get('RECONCILE_DAILY_MINUTE') or 5)
    RECONCILE_WEEKLY_HOUR = int(os.environ.get('RECONCILE_WEEKLY_HOUR') or 0)
    RECONCILE_WEEKLY_MINUTE = int(os.environ.get('RECONCILE_WEEKLY_MINUTE') or 1)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    FLASK_ENV = 'development'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    FLASK_ENV = 'production'


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    MONGODB_DB = 'liynmar_test'
    MONGODB_URI = 'mongodb://localhost:27017/liynmar_test'
    MONGO_URI = 'mongodb://localhost:27017/liynmar_test'
    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
