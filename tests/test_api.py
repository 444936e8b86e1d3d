from __future__ import annotations

import asyncio
import os
import time

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from api.endpoints.upload import upload
from app.main import create_app
from domain.errors import QueueError
from domain.schemas import JobStatus

PDF_BYTES = b"%PDF-1.4\n% test document\n"


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as c:
        yield c


def _upload(client, cv=("cv.pdf", PDF_BYTES, "application/pdf"),
            report=("report.pdf", PDF_BYTES, "application/pdf")):
    files = {}
    if cv is not None:
        files["cv"] = cv
    if report is not None:
        files["project_report"] = report
    return client.post("/upload", files=files)


def test_upload_stores_both_documents(client, services):
    resp = _upload(client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["cv_id"] == 1 and body["report_id"] == 2
    cv_doc = services.files_repo.get(body["cv_id"])
    report_doc = services.files_repo.get(body["report_id"])
    assert cv_doc.doc_type.value == "cv"
    assert report_doc.doc_type.value == "project_report"
    assert report_doc.file_size == len(PDF_BYTES)
    assert os.path.isfile(cv_doc.file_path)


@pytest.mark.parametrize("kwargs, message", [
    ({"report": None}, "Project report file is required"),
    ({"cv": None}, "CV file is required"),
    ({"cv": ("cv.txt", b"hello", "text/plain")}, "only PDF files are allowed"),
    ({"report": ("report.pdf", b"", "application/pdf")}, "file is empty"),
    ({"cv": ("cv.pdf", PDF_BYTES, "image/png")}, "unsupported content type"),
])
def test_upload_validation(client, services, kwargs, message):
    resp = _upload(client, **kwargs)

    assert resp.status_code == 400
    assert message in resp.json()["detail"]
    assert not services.files_repo.exists(1)


def test_upload_rejects_oversized_files(services):
    small = services.settings.model_copy(update={"MAX_UPLOAD_BYTES": 8})
    services.settings = small
    with TestClient(create_app(services=services)) as c:
        resp = _upload(c)
    assert resp.status_code == 400
    assert "exceeds" in resp.json()["detail"]


class RecordingUpload:
    def __init__(self, filename, data, size):
        self.filename = filename
        self.content_type = "application/pdf"
        self.data = data
        self.size = size
        self.reads = []

    async def read(self, size=-1):
        self.reads.append(size)
        return self.data if size < 0 else self.data[:size]


@pytest.mark.parametrize("declared_size, expected_reads", [(4096, []), (None, [9])])
def test_oversized_upload_is_not_read_in_full(services, declared_size, expected_reads):
    services.settings = services.settings.model_copy(update={"MAX_UPLOAD_BYTES": 8})
    cv = RecordingUpload("cv.pdf", b"%" * 4096, declared_size)
    report = RecordingUpload("report.pdf", PDF_BYTES, len(PDF_BYTES))

    with pytest.raises(HTTPException) as err:
        asyncio.run(upload(cv=cv, project_report=report, services=services))

    assert err.value.status_code == 400
    assert "exceeds" in err.value.detail
    assert cv.reads == expected_reads
    assert report.reads == []


def test_evaluate_queues_job(client, services):
    ids = _upload(client).json()
    resp = client.post("/evaluate", json={
        "cv_id": ids["cv_id"], "report_id": ids["report_id"], "job_title": "Backend Engineer"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "queued"
    assert body["id"].startswith("job_")
    status = client.get("/queue/status").json()
    assert status == {"queue_length": 1, "status": "inactive"}


@pytest.mark.parametrize("payload", [
    {"cv_id": 0, "report_id": 2, "job_title": "Backend Engineer"},
    {"cv_id": -1, "report_id": 2, "job_title": "Backend Engineer"},
    {"cv_id": 1, "report_id": 2, "job_title": "   "},
    {"cv_id": 1, "report_id": 2, "job_title": "Backend <Engineer>"},
    {"cv_id": 1, "report_id": 2, "job_title": "x" * 101},
    {"cv_id": 1, "report_id": 2},
])
def test_evaluate_rejects_malformed_requests(client, services, payload):
    _upload(client)
    resp = client.post("/evaluate", json=payload)

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid request")
    assert services.queue.length() == 0


def test_evaluate_unknown_document_is_404(client, services):
    resp = client.post("/evaluate", json={"cv_id": 7, "report_id": 8, "job_title": "Backend Engineer"})
    assert resp.status_code == 404
    assert "CV document 7" in resp.json()["detail"]


def test_evaluate_reports_queue_outage(client, services):
    class DownQueue:
        def enqueue(self, job_id):
            raise QueueError("queue unavailable")

    ids = _upload(client).json()
    services.evaluation_service._queue = DownQueue()
    resp = client.post("/evaluate", json={
        "cv_id": ids["cv_id"], "report_id": ids["report_id"], "job_title": "Backend Engineer"})

    assert resp.status_code == 503
    assert services.jobs_repo.count_by_status([JobStatus.FAILED]) == 1


def test_result_requires_known_id(client):
    assert client.get("/result").status_code == 400
    assert client.get("/result", params={"id": "job_unknown"}).status_code == 404


def test_completed_result_is_stable_across_reads(client, services, make_documents):
    cv_id, report_id = make_documents()
    job_id = client.post("/evaluate", json={
        "cv_id": cv_id, "report_id": report_id, "job_title": "Backend Engineer"}).json()["id"]

    queued = client.get("/result", params={"id": job_id}).json()
    assert queued["status"] == "queued"
    assert queued["result"] is None

    asyncio.run(services.worker.process_next())

    first = client.get("/result", params={"id": job_id})
    second = client.get("/result", params={"id": job_id})
    body = first.json()
    assert body["status"] == "completed"
    assert body["result"]["cv_match_rate"] == 0.82
    assert body["result"]["project_score"] == 4.5
    assert body["error_message"] is None
    assert body["created_at"] and body["updated_at"]
    assert first.content == second.content


def test_failed_result_exposes_error_message(client, services, make_documents):
    _, report_id = make_documents()
    job_id = services.jobs_repo.create_job("Backend Engineer", 99, report_id)
    services.queue.enqueue(job_id)
    asyncio.run(services.worker.process_next())

    body = client.get("/result", params={"id": job_id}).json()
    assert body["status"] == "failed"
    assert body["result"] is None
    assert "CV document" in body["error_message"]


def test_health_reports_fixed_context(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["context_source"] == "fixed"
    assert body["worker"] == "inactive"


def test_background_worker_completes_submitted_job(services, make_documents):
    running = services.settings.model_copy(update={"WORKER_ENABLED": True})
    with TestClient(create_app(settings=running, services=services)) as c:
        assert c.get("/queue/status").json()["status"] == "active"
        cv_id, report_id = make_documents()
        job_id = c.post("/evaluate", json={
            "cv_id": cv_id, "report_id": report_id, "job_title": "Backend Engineer"}).json()["id"]

        deadline = time.monotonic() + 5
        body = c.get("/result", params={"id": job_id}).json()
        while body["status"] in ("queued", "processing") and time.monotonic() < deadline:
            time.sleep(0.05)
            body = c.get("/result", params={"id": job_id}).json()

        assert body["status"] == "completed"
        assert body["result"]["cv_match_rate"] == 0.82
        assert c.get("/queue/status").json()["queue_length"] == 0
