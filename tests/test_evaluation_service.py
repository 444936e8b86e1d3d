from __future__ import annotations

import pytest

from domain.errors import DocumentNotFoundError, QueueError
from domain.schemas import JobStatus
from domain.services.evaluation_service import EvaluationService


class DownQueue:
    name = "evaluation_queue"

    def enqueue(self, job_id):
        raise QueueError("connection refused")

    def length(self):
        raise QueueError("connection refused")


def test_start_evaluation_queues_job(services, make_documents):
    cv_id, report_id = make_documents()
    job_id = services.evaluation_service.start_evaluation(cv_id, report_id, "Backend Engineer")

    assert services.evaluation_service.get_job(job_id).status == JobStatus.QUEUED
    assert services.evaluation_service.queue_length() == 1
    assert services.queue.pop() == job_id


@pytest.mark.parametrize("which", ["cv", "report"])
def test_unknown_document_never_creates_a_job(services, make_documents, which):
    cv_id, report_id = make_documents()
    if which == "cv":
        cv_id = 404
    else:
        report_id = 404

    with pytest.raises(DocumentNotFoundError):
        services.evaluation_service.start_evaluation(cv_id, report_id, "Backend Engineer")

    assert services.jobs_repo.count_by_status(list(JobStatus)) == 0
    assert services.queue.length() == 0


def test_enqueue_failure_marks_job_failed(services, make_documents):
    service = EvaluationService(services.jobs_repo, services.files_repo, DownQueue())
    cv_id, report_id = make_documents()

    with pytest.raises(QueueError):
        service.start_evaluation(cv_id, report_id, "Backend Engineer")

    assert services.jobs_repo.count_by_status([JobStatus.QUEUED]) == 0
    assert services.jobs_repo.count_by_status([JobStatus.FAILED]) == 1
