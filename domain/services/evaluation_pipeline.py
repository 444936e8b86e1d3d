import asyncio
import logging
from typing import Protocol

from app.logging import PIPELINE_LOGGER
from domain.errors import EvaluatorError
from domain.schemas import EvaluationResult
from infra.llm.client import EvaluationModelClient
from infra.rag.retriever import ContextRetriever, with_rubric
from infra.repositories.files_repository import FilesRepository
from infra.repositories.jobs_repository import JobsRepository

logger = logging.getLogger(PIPELINE_LOGGER)


class TextExtractor(Protocol):
    def extract(self, path: str) -> str:
        ...


class PipelineStepError(EvaluatorError):
    """A pipeline step failed; the message names the step and the cause."""


class EvaluationPipeline:
    def __init__(
        self,
        jobs_repo: JobsRepository,
        files_repo: FilesRepository,
        extractor: TextExtractor,
        retriever: ContextRetriever,
        model_client: EvaluationModelClient,
    ):
        self._jobs = jobs_repo
        self._files = files_repo
        self._extractor = extractor
        self._retriever = retriever
        self._llm = model_client

    async def run(self, job_id: str) -> EvaluationResult:
        job = _step("failed to get job", self._jobs.get, job_id)
        if job is None:
            raise PipelineStepError(f"failed to get job: job {job_id} not found")
        cv_doc = _step("failed to get CV document", self._files.get, job.cv_id)
        report_doc = _step("failed to get report document", self._files.get, job.report_id)
        logger.info(f"Job {job_id}: '{job.job_title}' cv={cv_doc.id} report={report_doc.id}")

        logger.info("[1/7] Extracting text from CV")
        cv_text = await _offload("failed to extract CV text", self._extractor.extract, cv_doc.file_path)
        logger.info(f"Extracted {len(cv_text)} characters from CV")

        logger.info(f"[2/7] Retrieving job requirements context ({self._retriever.mode})")
        job_context = with_rubric(
            await self._retriever.job_requirements(job.job_title),
            await self._retriever.cv_rubric(),
        )

        logger.info("[3/7] Evaluating CV")
        try:
            cv_eval = await self._llm.evaluate_cv(cv_text, job_context)
        except Exception as exc:
            raise PipelineStepError(f"failed to evaluate CV: {exc}") from exc
        logger.info(f"CV match rate: {cv_eval.cv_match_rate:.2f}")

        logger.info("[4/7] Extracting text from project report")
        report_text = await _offload("failed to extract report text",
                                    self._extractor.extract, report_doc.file_path)
        logger.info(f"Extracted {len(report_text)} characters from report")

        logger.info(f"[5/7] Retrieving case study context ({self._retriever.mode})")
        case_context = with_rubric(
            await self._retriever.case_study(),
            await self._retriever.project_rubric(),
        )

        logger.info("[6/7] Evaluating project")
        try:
            project_eval = await self._llm.evaluate_project(report_text, case_context)
        except Exception as exc:
            raise PipelineStepError(f"failed to evaluate project: {exc}") from exc
        logger.info(f"Project score: {project_eval.project_score:.1f}/5.0")

        logger.info("[7/7] Generating final summary")
        try:
            summary = await self._llm.generate_summary(
                cv_eval.cv_feedback,
                project_eval.project_feedback,
                cv_eval.cv_match_rate,
                project_eval.project_score,
            )
        except Exception as exc:
            raise PipelineStepError(f"failed to generate summary: {exc}") from exc

        return EvaluationResult(
            cv_match_rate=cv_eval.cv_match_rate,
            cv_feedback=cv_eval.cv_feedback,
            project_score=project_eval.project_score,
            project_feedback=project_eval.project_feedback,
            overall_summary=summary,
        )


def _step(label: str, fn, *args):
    try:
        return fn(*args)
    except Exception as exc:
        raise PipelineStepError(f"{label}: {exc}") from exc


async def _offload(label: str, fn, *args):
    """Like _step, but runs the blocking call in a worker thread."""
    try:
        return await asyncio.to_thread(fn, *args)
    except Exception as exc:
        raise PipelineStepError(f"{label}: {exc}") from exc
