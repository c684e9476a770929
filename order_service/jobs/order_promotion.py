import logging
from datetime import timedelta
from typing import Optional

from sqlmodel import Session

from order_service import database
from order_service.config import settings
from order_service.jobs.scheduler import FixedRateScheduler
from order_service.services.order_service import promote_pending_orders
from order_service.services.scheduler_lock import LeaseLockProvider

logger = logging.getLogger(__name__)

PROMOTION_LOCK_NAME = "PendingPromotionJob.promote"


def promote_pending_orders_job(engine=None, lock_provider: Optional[LeaseLockProvider] = None) -> Optional[int]:
    """One promotion run; None when another instance holds the lock."""
    engine = engine or database.engine
    lock_provider = lock_provider or LeaseLockProvider(engine)

    with lock_provider.locked(
        PROMOTION_LOCK_NAME,
        lock_at_most_for=timedelta(seconds=settings.promotion_lock_at_most_for_seconds),
        lock_at_least_for=timedelta(seconds=settings.promotion_lock_at_least_for_seconds),
    ) as lock:
        if lock is None:
            logger.debug(f"Skipping promotion run, {PROMOTION_LOCK_NAME} is held elsewhere")
            return None

        with Session(engine) as session:
            count = promote_pending_orders(session)

        if count > 0:
            logger.info(f"Promoted {count} orders PENDING -> PROCESSING")
        return count


def create_promotion_scheduler() -> FixedRateScheduler:
    return FixedRateScheduler(
        name="pending-promotion",
        task=promote_pending_orders_job,
        interval=settings.promotion_fixed_rate_seconds,
        initial_delay=settings.promotion_initial_delay_seconds,
    )
