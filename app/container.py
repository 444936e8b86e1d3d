from dataclasses import dataclass

from sqlalchemy.engine import Engine

from app.settings import Settings
from domain.services.evaluation_pipeline import EvaluationPipeline, TextExtractor
from domain.services.evaluation_service import EvaluationService
from domain.services.evaluation_worker import EvaluationWorker
from infra.db.session import init_db, make_engine, make_session_factory
from infra.llm.client import EvaluationModelClient
from infra.pdf.parser import PdfTextExtractor
from infra.queue.job_queue import JobQueue
from infra.rag.embeddings import OpenAIEmbedder
from infra.rag.retriever import ContextRetriever, build_context_retriever
from infra.repositories.files_repository import FilesRepository
from infra.repositories.jobs_repository import JobsRepository


@dataclass
class Services:
    settings: Settings
    engine: Engine
    files_repo: FilesRepository
    jobs_repo: JobsRepository
    queue: JobQueue
    retriever: ContextRetriever
    model_client: EvaluationModelClient
    evaluation_service: EvaluationService
    worker: EvaluationWorker


def build_services(
    settings: Settings,
    *,
    retriever: ContextRetriever | None = None,
    model_client: EvaluationModelClient | None = None,
    extractor: TextExtractor | None = None,
) -> Services:
    """Construct every collaborator once; overrides replace the external-facing ones."""
    engine = make_engine(settings)
    init_db(engine)
    sessions = make_session_factory(engine)

    files_repo = FilesRepository(sessions)
    jobs_repo = JobsRepository(sessions)
    queue = JobQueue(sessions, name=settings.QUEUE_NAME,
                     poll_interval=settings.QUEUE_POLL_INTERVAL)

    if retriever is None:
        embedder = OpenAIEmbedder(settings.OPENAI_API_KEY, settings.OPENAI_EMBEDDING_MODEL)
        retriever = build_context_retriever(settings, embedder)
    model_client = model_client or EvaluationModelClient(settings)
    extractor = extractor or PdfTextExtractor()

    pipeline = EvaluationPipeline(jobs_repo, files_repo, extractor, retriever, model_client)
    worker = EvaluationWorker(
        queue, jobs_repo, pipeline,
        dequeue_timeout=settings.WORKER_DEQUEUE_TIMEOUT,
        job_timeout=settings.JOB_TIMEOUT_SECONDS,
    )
    return Services(
        settings=settings,
        engine=engine,
        files_repo=files_repo,
        jobs_repo=jobs_repo,
        queue=queue,
        retriever=retriever,
        model_client=model_client,
        evaluation_service=EvaluationService(jobs_repo, files_repo, queue),
        worker=worker,
    )
