import logging
import uuid
from contextlib import contextmanager
from datetime import timedelta

from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)


class JobLock:
    """
    Lease lock stored in the job_locks collection.

    A run holds the lock until it releases it or the lease expires, so a
    crashed worker cannot block later runs forever.
    """

    def __init__(self, db, name, ttl_seconds, clock):
        self.collection = db.job_locks
        self.name = name
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.owner = uuid.uuid4().hex

    def acquire(self) -> bool:
        now = self.clock()
        lease = {'owner': self.owner, 'locked_at': now, 'locked_until': now + self.ttl}

        try:
            self.collection.insert_one({'_id': self.name, **lease})
            return True
        except DuplicateKeyError:
            pass

        # Take over an expired lease
        taken = self.collection.find_one_and_update(
            {'_id': self.name, 'locked_until': {'$lt': now}},
            {'$set': lease}
        )
        return taken is not None

    def release(self):
        self.collection.delete_one({'_id': self.name, 'owner': self.owner})

    @contextmanager
    def held(self):
        """Yield True while holding the lock, False if another run has it"""
        acquired = self.acquire()
        if not acquired:
            logger.warning(f"Job '{self.name}' is already running, skipping")
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
