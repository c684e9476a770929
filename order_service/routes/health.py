from fastapi import APIRouter, Depends, Request
from sqlmodel import Session, text

from order_service.database import get_session
from order_service.utils.timestamps import utcnow

router = APIRouter()


@router.get("/check")
def health_check(request: Request, session: Session = Depends(get_session)):
    db_status = "ok"

    try:
        # simple DB ping
        session.exec(text("SELECT 1"))
    except Exception:
        db_status = "failed"

    scheduler = getattr(request.app.state, "promotion_scheduler", None)
    if scheduler is None:
        job_status = "disabled"
    else:
        job_status = "running" if scheduler.is_running() else "stopped"

    return {
        "status": "ok",
        "database": db_status,
        "promotion_job": job_status,
        "timestamp": utcnow().isoformat(),
    }
