import asyncio
import logging
from typing import Optional

from domain.errors import InvalidTransitionError, JobNotFoundError
from domain.services.evaluation_pipeline import EvaluationPipeline
from infra.queue.job_queue import JobQueue
from infra.repositories.jobs_repository import JobsRepository

logger = logging.getLogger(__name__)


class EvaluationWorker:
    """Single consumer of the evaluation queue.

    Each job goes Idle -> Claimed (id popped) -> Processing (status persisted)
    -> completed | failed, then the loop waits on the queue again. Errors stay
    local to the job that raised them.
    """

    def __init__(
        self,
        queue: JobQueue,
        jobs_repo: JobsRepository,
        pipeline: EvaluationPipeline,
        *,
        dequeue_timeout: float = 1.0,
        job_timeout: float = 300.0,
    ):
        self._queue = queue
        self._jobs = jobs_repo
        self._pipeline = pipeline
        self._dequeue_timeout = dequeue_timeout
        self._job_timeout = job_timeout

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("Worker started, waiting for jobs on '%s'", self._queue.name)
        while not stop.is_set():
            try:
                await self.process_next()
            except Exception as exc:
                logger.warning(f"Failed to pop from queue: {exc}")
                await asyncio.sleep(self._dequeue_timeout)
        logger.info("Worker shutting down")

    async def process_next(self) -> Optional[str]:
        """Wait up to the dequeue timeout for one job and process it."""
        job_id = await self._queue.dequeue_blocking(self._dequeue_timeout)
        if job_id is None:
            return None
        await self.handle(job_id)
        return job_id

    async def handle(self, job_id: str) -> None:
        logger.info(f"Processing job: {job_id}")
        try:
            self._jobs.mark_processing(job_id)
        except JobNotFoundError:
            logger.error(f"Job {job_id} was dequeued but has no record, dropping it")
            return
        except InvalidTransitionError as exc:
            logger.warning(f"Skipping job {job_id}: {exc}")
            return
        except Exception as exc:
            self._record_failure(job_id, f"failed to update status: {exc}")
            return

        try:
            result = await asyncio.wait_for(self._pipeline.run(job_id), timeout=self._job_timeout)
        except asyncio.TimeoutError:
            self._record_failure(
                job_id, f"evaluation timed out after {self._job_timeout:g}s")
            return
        except Exception as exc:
            self._record_failure(job_id, str(exc) or exc.__class__.__name__)
            return

        try:
            self._jobs.complete(job_id, result)
        except Exception as exc:
            self._record_failure(job_id, f"failed to save results: {exc}")
            return
        logger.info(f"Job {job_id} completed successfully")

    def _record_failure(self, job_id: str, message: str) -> None:
        logger.error(f"Job {job_id} failed: {message}")
        try:
            self._jobs.fail(job_id, message)
        except Exception:
            logger.exception(f"Could not persist failure for job {job_id}")
