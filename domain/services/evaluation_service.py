import logging
from typing import Optional

from domain.errors import DocumentNotFoundError, QueueError
from domain.schemas import EvaluationJob
from infra.queue.job_queue import JobQueue
from infra.repositories.files_repository import FilesRepository
from infra.repositories.jobs_repository import JobsRepository

logger = logging.getLogger(__name__)


class EvaluationService:
    """Producer side: creates jobs and hands their ids to the worker queue."""

    def __init__(self, jobs_repo: JobsRepository, files_repo: FilesRepository, queue: JobQueue):
        self._jobs = jobs_repo
        self._files = files_repo
        self._queue = queue

    def start_evaluation(self, cv_id: int, report_id: int, job_title: str) -> str:
        if not self._files.exists(cv_id):
            raise DocumentNotFoundError(f"CV document {cv_id} not found")
        if not self._files.exists(report_id):
            raise DocumentNotFoundError(f"report document {report_id} not found")

        job_id = self._jobs.create_job(job_title, cv_id, report_id)
        try:
            self._queue.enqueue(job_id)
        except QueueError as exc:
            logger.error(f"Failed to queue job {job_id}: {exc}")
            # never leave a queued job that nothing will pick up
            self._jobs.fail(job_id, f"failed to queue job: {exc}")
            raise
        logger.info(f"Queued job {job_id} for '{job_title}'")
        return job_id

    def get_job(self, job_id: str) -> Optional[EvaluationJob]:
        return self._jobs.get(job_id)

    def queue_length(self) -> int:
        return self._queue.length()
