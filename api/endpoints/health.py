from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from api.deps import get_services
from api.endpoints.queue import worker_alive
from app.container import Services
from domain.schemas import JobStatus

router = APIRouter()


@router.get("/health")
def health(request: Request, services: Services = Depends(get_services)):
    database = "connected"
    in_progress = None
    try:
        with services.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        in_progress = services.jobs_repo.count_by_status([JobStatus.PROCESSING])
    except Exception as exc:
        database = f"unavailable: {exc}"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "context_source": services.retriever.mode,
        "llm_provider": getattr(services.model_client, "provider", None),
        "worker": "active" if worker_alive(request) else "inactive",
        "jobs_processing": in_progress,
    }
