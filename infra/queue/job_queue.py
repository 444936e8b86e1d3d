import asyncio
import time
from typing import Optional
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from domain.errors import QueueError
from infra.db.models import QueueEntryRecord

DEFAULT_QUEUE_NAME = "evaluation_queue"


class JobQueue:
    """Durable FIFO of job ids kept in the application database.

    Entries carry nothing but the job id; consumers re-read job state from
    the job store. Ordering follows the auto-increment sequence number, so
    ``enqueue`` appends to the tail and ``pop`` removes from the head.
    """

    def __init__(self, session_factory: sessionmaker, name: str = DEFAULT_QUEUE_NAME,
                 poll_interval: float = 0.2):
        self._sessions = session_factory
        self.name = name
        self._poll_interval = poll_interval

    def enqueue(self, job_id: str) -> None:
        try:
            with self._sessions() as s:
                s.add(QueueEntryRecord(queue_name=self.name, job_id=job_id))
                s.commit()
        except SQLAlchemyError as exc:
            raise QueueError(f"could not enqueue {job_id}: {exc}") from exc

    def pop(self) -> Optional[str]:
        """Remove and return the oldest job id, or None when the queue is empty."""
        try:
            with self._sessions() as s:
                while True:
                    head = s.execute(
                        select(QueueEntryRecord.seq, QueueEntryRecord.job_id)
                        .where(QueueEntryRecord.queue_name == self.name)
                        .order_by(QueueEntryRecord.seq)
                        .limit(1)
                    ).first()
                    if head is None:
                        return None
                    res = s.execute(delete(QueueEntryRecord).where(
                        QueueEntryRecord.seq == head.seq))
                    s.commit()
                    if res.rowcount == 1:
                        return head.job_id
                    # another popper removed this entry first
        except SQLAlchemyError as exc:
            raise QueueError(f"could not pop from {self.name}: {exc}") from exc

    async def dequeue_blocking(self, timeout: float) -> Optional[str]:
        deadline = time.monotonic() + timeout
        while True:
            job_id = self.pop()
            if job_id is not None:
                return job_id
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(self._poll_interval, remaining))

    def length(self) -> int:
        try:
            with self._sessions() as s:
                return s.execute(
                    select(func.count()).select_from(QueueEntryRecord)
                    .where(QueueEntryRecord.queue_name == self.name)
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise QueueError(f"could not read length of {self.name}: {exc}") from exc
