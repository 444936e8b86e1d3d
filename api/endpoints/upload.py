import os
import uuid
import logging
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from typing import Optional
from api.deps import get_services
from app.container import Services
from domain.schemas import DocType, UploadResponse
from domain.validation import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload(cv: Optional[UploadFile] = File(default=None),
                 project_report: Optional[UploadFile] = File(default=None),
                 services: Services = Depends(get_services)) -> UploadResponse:
    if not cv:
        raise HTTPException(status_code=400, detail="CV file is required")
    if not project_report:
        raise HTTPException(
            status_code=400, detail="Project report file is required")

    settings = services.settings
    files = []
    for label, f in (("CV", cv), ("Project report", project_report)):
        try:
            if f.size is not None:
                validate_upload(f.filename, f.size, f.content_type,
                                settings.MAX_UPLOAD_BYTES)
            # reads stop one byte past the limit
            content = await f.read(settings.MAX_UPLOAD_BYTES + 1)
            validate_upload(f.filename, len(content), f.content_type,
                            settings.MAX_UPLOAD_BYTES)
        except ValueError as exc:
            raise HTTPException(
                status_code=400, detail=f"{label} validation failed: {exc}")
        files.append((f.filename, content))

    os.makedirs(settings.STORAGE_DIR, exist_ok=True)
    saved_paths = []
    saved_ids = []
    try:
        for (name, content), ftype in zip(files, (DocType.CV, DocType.PROJECT_REPORT)):
            path = os.path.join(settings.STORAGE_DIR, f"{uuid.uuid4()}.pdf")
            with open(path, "wb") as out:
                out.write(content)
            saved_paths.append(path)
            saved_ids.append(services.files_repo.save(
                ftype=ftype.value, path=path, name=name, size=len(content)))
    except Exception as exc:
        logger.exception("Failed to store upload")
        for fid in saved_ids:
            services.files_repo.delete(fid)
        for path in saved_paths:
            if os.path.exists(path):
                os.remove(path)
        raise HTTPException(status_code=500, detail=f"Failed to save files: {exc}")

    return UploadResponse(cv_id=saved_ids[0], report_id=saved_ids[1])
