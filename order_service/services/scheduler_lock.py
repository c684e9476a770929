"""Lease-based named locks kept in the ``scheduler_lock`` table.

At most one holder per name across all instances sharing the database. A lease
ends at ``lock_until`` even if its holder dies, so a crashed instance blocks
the job for at most ``lock_at_most_for``.
"""
import logging
import socket
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from order_service.models.scheduler_lock import SchedulerLock
from order_service.utils.timestamps import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaseLock:
    name: str
    locked_by: str
    locked_at: datetime
    lock_until: datetime
    lock_at_least_for: timedelta


class LeaseLockProvider:
    def __init__(
        self,
        engine,
        locked_by: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.engine = engine
        self.locked_by = locked_by or socket.gethostname()
        self.clock = clock

    def acquire(
        self,
        name: str,
        lock_at_most_for: timedelta,
        lock_at_least_for: timedelta = timedelta(0),
    ) -> Optional[LeaseLock]:
        """Take the lease on ``name`` or return None if someone holds it."""
        now = self.clock()
        lock_until = now + lock_at_most_for

        with Session(self.engine) as session:
            result = session.exec(
                update(SchedulerLock)
                .where(SchedulerLock.name == name)
                .where(SchedulerLock.lock_until <= now)
                .values(lock_until=lock_until, locked_at=now, locked_by=self.locked_by)
            )
            session.commit()
            taken = result.rowcount == 1

            if not taken and session.get(SchedulerLock, name) is None:
                session.add(
                    SchedulerLock(
                        name=name,
                        lock_until=lock_until,
                        locked_at=now,
                        locked_by=self.locked_by,
                    )
                )
                try:
                    session.commit()
                    taken = True
                except IntegrityError:
                    # another instance inserted the row first
                    session.rollback()

        if not taken:
            logger.debug(f"Lock {name} is held elsewhere")
            return None

        logger.debug(f"Lock {name} acquired by {self.locked_by} until {lock_until.isoformat()}")
        return LeaseLock(name, self.locked_by, now, lock_until, lock_at_least_for)

    def release(self, lock: LeaseLock) -> None:
        """End the lease, but not before ``locked_at + lock_at_least_for``."""
        unlock_at = max(self.clock(), lock.locked_at + lock.lock_at_least_for)

        with Session(self.engine) as session:
            session.exec(
                update(SchedulerLock)
                .where(SchedulerLock.name == lock.name)
                .where(SchedulerLock.locked_by == lock.locked_by)
                .where(SchedulerLock.locked_at == lock.locked_at)
                .values(lock_until=unlock_at)
            )
            session.commit()

        logger.debug(f"Lock {lock.name} released, free from {unlock_at.isoformat()}")

    @contextmanager
    def locked(
        self,
        name: str,
        lock_at_most_for: timedelta,
        lock_at_least_for: timedelta = timedelta(0),
    ) -> Iterator[Optional[LeaseLock]]:
        lock = self.acquire(name, lock_at_most_for, lock_at_least_for)
        try:
            yield lock
        finally:
            if lock is not None:
                self.release(lock)
