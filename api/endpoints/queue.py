from fastapi import APIRouter, Depends, HTTPException, Request
from api.deps import get_services
from app.container import Services
from domain.errors import QueueError
from domain.schemas import QueueStatusResponse

router = APIRouter()


def worker_alive(request: Request) -> bool:
    task = getattr(request.app.state, "worker_task", None)
    return task is not None and not task.done()


@router.get("/queue/status", response_model=QueueStatusResponse)
async def queue_status(request: Request, services: Services = Depends(get_services)) -> QueueStatusResponse:
    try:
        length = services.evaluation_service.queue_length()
    except QueueError:
        raise HTTPException(status_code=500, detail="Failed to get queue status")
    return QueueStatusResponse(
        queue_length=length,
        status="active" if worker_alive(request) else "inactive",
    )
