from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from api.deps import get_services
from app.container import Services
from domain.schemas import JobStatusResponse

router = APIRouter()


@router.get("/result", response_model=JobStatusResponse)
async def get_result(id: Optional[str] = Query(default=None),
                     services: Services = Depends(get_services)) -> JobStatusResponse:
    if not id:
        raise HTTPException(
            status_code=400, detail="Job ID is required as query parameter: ?id=your-job-id")
    job = services.evaluation_service.get_job(id)
    if not job:
        raise HTTPException(status_code=404, detail="job not found")
    return JobStatusResponse(
        id=job.id,
        status=job.status,
        result=job.result,
        error_message=job.error_message,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )
