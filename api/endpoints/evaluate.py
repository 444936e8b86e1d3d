from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from api.deps import get_services
from app.container import Services
from domain.errors import DocumentNotFoundError, QueueError
from domain.schemas import EvaluateRequest, EvaluateResponse, JobStatus

router = APIRouter()


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(body: EvaluateRequest, services: Services = Depends(get_services)) -> EvaluateResponse:
    try:
        job_id = services.evaluation_service.start_evaluation(
            body.cv_id, body.report_id, body.job_title)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (QueueError, SQLAlchemyError) as exc:
        raise HTTPException(
            status_code=503, detail=f"Failed to start evaluation: {exc}")
    return EvaluateResponse(id=job_id, status=JobStatus.QUEUED)
