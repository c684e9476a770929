import logging
from contextlib import asynccontextmanager
from functools import partial

from anyio import to_thread
from fastapi import FastAPI

from order_service.config import settings
from order_service.database import create_db_and_tables
from order_service.jobs.order_promotion import create_promotion_scheduler
from order_service.middleware.correlation_id import CorrelationIdMiddleware
from order_service.middleware.error_handlers import register_exception_handlers
from order_service.routes import health, orders
from order_service.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    logger.info(f"Starting order service env={settings.env}")

    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()

    scheduler = None
    if settings.promotion_job_enabled:
        scheduler = create_promotion_scheduler()
        scheduler.start()
    app.state.promotion_scheduler = scheduler

    yield

    if scheduler is not None:
        # join off the event loop
        await to_thread.run_sync(
            partial(scheduler.stop, timeout=settings.promotion_lock_at_most_for_seconds)
        )


app = FastAPI(title="Order Service API", lifespan=lifespan)
app.add_middleware(CorrelationIdMiddleware, header_name=settings.correlation_id_header)
register_exception_handlers(app)

app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "order_endpoints": [
            "POST /api/orders",
            "GET /api/orders?customerId=&status=&page=&size=&sort=",
            "GET /api/orders/{id}",
            "PATCH /api/orders/{id}/cancel",
        ],
        "health_endpoints": [
            "/health/check"
        ],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("order_service.main:app", host="0.0.0.0", port=8000)
