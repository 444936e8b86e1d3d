import uuid
from typing import Iterable, Optional
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func
from domain.errors import InvalidTransitionError, JobNotFoundError
from domain.schemas import EvaluationJob, EvaluationResult, JobStatus
from infra.db.models import JobRecord, JobResultRecord

# queued -> failed only happens when the job never made it onto the queue
_ALLOWED_SOURCES = {
    JobStatus.PROCESSING: (JobStatus.QUEUED,),
    JobStatus.COMPLETED: (JobStatus.PROCESSING,),
    JobStatus.FAILED: (JobStatus.QUEUED, JobStatus.PROCESSING),
}


def _to_job(job: JobRecord, jr: Optional[JobResultRecord]) -> EvaluationJob:
    status = JobStatus(job.status)
    result = None
    if jr and status == JobStatus.COMPLETED:
        result = EvaluationResult(
            cv_match_rate=jr.cv_match_rate,
            cv_feedback=jr.cv_feedback,
            project_score=jr.project_score,
            project_feedback=jr.project_feedback,
            overall_summary=jr.overall_summary,
        )
    return EvaluationJob(
        id=job.id,
        cv_id=job.cv_file_id,
        report_id=job.report_file_id,
        job_title=job.job_title,
        status=status,
        result=result,
        error_message=job.error_message if status == JobStatus.FAILED else None,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


class JobsRepository:
    """Single source of truth for job status; every write is a guarded transition."""

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def create_job(self, job_title: str, cv_id: int, report_id: int) -> str:
        jid = f"job_{uuid.uuid4().hex}"
        with self._sessions() as s:
            s.add(JobRecord(id=jid, status=JobStatus.QUEUED.value, job_title=job_title,
                            cv_file_id=cv_id, report_file_id=report_id))
            s.commit()
        return jid

    def get(self, job_id: str) -> Optional[EvaluationJob]:
        with self._sessions() as s:
            job = s.get(JobRecord, job_id)
            if not job:
                return None
            return _to_job(job, job.result)

    def mark_processing(self, job_id: str) -> None:
        with self._sessions() as s:
            self._transition(s, job_id, JobStatus.PROCESSING)
            s.commit()

    def complete(self, job_id: str, result: EvaluationResult) -> None:
        with self._sessions() as s:
            self._transition(s, job_id, JobStatus.COMPLETED)
            s.add(JobResultRecord(job_id=job_id, **result.model_dump()))
            s.commit()

    def fail(self, job_id: str, error: str) -> None:
        with self._sessions() as s:
            self._transition(s, job_id, JobStatus.FAILED,
                             error_message=error or "unknown error")
            s.commit()

    def count_by_status(self, statuses: Iterable[JobStatus]) -> int:
        wanted = [st.value for st in statuses]
        with self._sessions() as s:
            return s.query(JobRecord).filter(JobRecord.status.in_(wanted)).count()

    def _transition(self, s, job_id: str, target: JobStatus, **values) -> None:
        sources = [st.value for st in _ALLOWED_SOURCES[target]]
        res = s.execute(
            update(JobRecord)
            .where(JobRecord.id == job_id, JobRecord.status.in_(sources))
            .values(status=target.value, updated_at=func.now(), **values)
        )
        if res.rowcount == 1:
            return
        s.rollback()
        job = s.get(JobRecord, job_id)
        if not job:
            raise JobNotFoundError(f"job {job_id} not found")
        raise InvalidTransitionError(
            f"job {job_id} cannot move from {job.status} to {target.value}")
