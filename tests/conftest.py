from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from app.container import Services, build_services
from app.settings import Settings
from domain.errors import ExtractionError
from infra.llm.client import CVEvaluation, ProjectEvaluation
from infra.rag.retriever import ContextRetriever, FixedContextSource


class FakeExtractor:
    """Maps file paths to text; unknown paths fail like an unreadable PDF."""

    def __init__(self) -> None:
        self.texts: dict[str, str] = {}
        self.calls: list[str] = []

    def extract(self, path: str) -> str:
        self.calls.append(path)
        if path not in self.texts:
            raise ExtractionError(f"file not found: {path}")
        return self.texts[path]


class FakeModelClient:
    provider = "fake"

    def __init__(self, match_rate: float = 0.82, project_score: float = 4.5) -> None:
        self.match_rate = match_rate
        self.project_score = project_score
        self.calls: list[tuple] = []
        self.fail_on: dict[str, Exception] = {}
        self.delay: float = 0.0

    async def _maybe_fail(self, name: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if name in self.fail_on:
            raise self.fail_on[name]

    async def evaluate_cv(self, cv_text: str, context: str) -> CVEvaluation:
        self.calls.append(("evaluate_cv", cv_text, context))
        await self._maybe_fail("evaluate_cv")
        return CVEvaluation(cv_match_rate=self.match_rate, cv_feedback="Strong Python and API background.")

    async def evaluate_project(self, report_text: str, context: str) -> ProjectEvaluation:
        self.calls.append(("evaluate_project", report_text, context))
        await self._maybe_fail("evaluate_project")
        return ProjectEvaluation(project_score=self.project_score, project_feedback="Solid async pipeline and docs.")

    async def generate_summary(self, cv_feedback, project_feedback, cv_match_rate, project_score) -> str:
        self.calls.append(("generate_summary", cv_feedback, project_feedback, cv_match_rate, project_score))
        await self._maybe_fail("generate_summary")
        return "Recommended for interview."


class UnreachableSource:
    mode = "vector"

    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self, kind: str, query: str) -> str:
        self.calls += 1
        raise ConnectionError("qdrant unreachable")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        SQLITE_PATH=str(tmp_path / "test.sqlite3"),
        STORAGE_DIR=str(tmp_path / "storage"),
        EVAL_LOG_FILE=None,
        QDRANT_URL=None,
        OPENAI_API_KEY=None,
        OPENROUTER_API_KEY=None,
        WORKER_ENABLED=False,
        WORKER_DEQUEUE_TIMEOUT=0.05,
        QUEUE_POLL_INTERVAL=0.01,
        JOB_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def retriever() -> ContextRetriever:
    return ContextRetriever(FixedContextSource())


@pytest.fixture
def services(settings, extractor, model_client, retriever) -> Services:
    svc = build_services(settings, retriever=retriever, model_client=model_client, extractor=extractor)
    yield svc
    svc.engine.dispose()


@pytest.fixture
def make_documents(services: Services, extractor: FakeExtractor, tmp_path: Path):
    """Register a CV and a report whose text the fake extractor knows."""

    def _make(cv_text: str = "Jane Doe\nPython, FastAPI, PostgreSQL",
              report_text: str = "Project report\nAsync worker with RAG") -> tuple[int, int]:
        cv_path = str(tmp_path / f"cv_{len(extractor.texts)}.pdf")
        report_path = str(tmp_path / f"report_{len(extractor.texts)}.pdf")
        extractor.texts[cv_path] = cv_text
        extractor.texts[report_path] = report_text
        cv_id = services.files_repo.save(ftype="cv", path=cv_path, name="cv.pdf", size=100)
        report_id = services.files_repo.save(
            ftype="project_report", path=report_path, name="report.pdf", size=200)
        return cv_id, report_id

    return _make

