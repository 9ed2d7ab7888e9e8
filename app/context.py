"""
Application context handed to the booking, schedule and status services.
Built once by create_app (or by a script/test) and passed explicitly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from app.utils.errors import RecordNotFound

EXTENSION_KEY = 'liynmar'


@dataclass
class AppContext:
    db: Database
    count_advance_absences_as_paid: bool = False
    enforce_monday_week_start: bool = True
    status_check_lock_ttl: int = 900
    clock: Callable[[], datetime] = field(default=datetime.now)

    @classmethod
    def from_config(cls, db, config: Mapping, clock: Callable[[], datetime] = None) -> 'AppContext':
        return cls(
            db=db,
            count_advance_absences_as_paid=bool(config.get('COUNT_ADVANCE_ABSENCES_AS_PAID', False)),
            enforce_monday_week_start=bool(config.get('ENFORCE_MONDAY_WEEK_START', True)),
            status_check_lock_ttl=int(config.get('STATUS_CHECK_LOCK_TTL', 900)),
            clock=clock or datetime.now
        )

    def now(self) -> datetime:
        return self.clock()


def get_context(app) -> AppContext:
    """Fetch the context stored on a Flask app by create_app"""
    return app.extensions[EXTENSION_KEY]


def to_object_id(value, kind: str) -> ObjectId:
    """Parse an id, treating malformed values as missing records"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise RecordNotFound(kind, value)
