from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from domain.validation import validate_job_title


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocType(str, Enum):
    CV = "cv"
    PROJECT_REPORT = "project_report"


class Document(BaseModel):
    id: int
    filename: str
    file_path: str
    doc_type: DocType
    file_size: int
    uploaded_at: Optional[datetime] = None


class EvaluationResult(BaseModel):
    cv_match_rate: float = Field(..., ge=0.0, le=1.0)
    cv_feedback: str
    project_score: float = Field(..., ge=1.0, le=5.0)
    project_feedback: str
    overall_summary: str


class EvaluationJob(BaseModel):
    id: str
    cv_id: int
    report_id: int
    job_title: str
    status: JobStatus
    result: Optional[EvaluationResult] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UploadResponse(BaseModel):
    cv_id: int
    report_id: int
    message: str = "Files uploaded successfully"


class EvaluateRequest(BaseModel):
    job_title: str = Field(...)
    cv_id: int = Field(..., gt=0)
    report_id: int = Field(..., gt=0)

    @field_validator("job_title")
    @classmethod
    def _check_job_title(cls, value: str) -> str:
        return validate_job_title(value)


class EvaluateResponse(BaseModel):
    id: str
    status: JobStatus


class JobStatusResponse(BaseModel):
    id: str
    status: JobStatus
    result: Optional[EvaluationResult] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QueueStatusResponse(BaseModel):
    queue_length: int
    status: str
