import asyncio
import logging
from typing import Protocol

from app.settings import Settings
from infra.rag.embeddings import OpenAIEmbedder
from infra.rag.fallback import (
    CASE_STUDY,
    CV_RUBRIC,
    FALLBACK_TEXTS,
    JOB_DESCRIPTION,
    PROJECT_RUBRIC,
)
from infra.rag.qdrant_client import get_client, search_top_k

logger = logging.getLogger(__name__)

_QUERIES = {
    CASE_STUDY: "case study brief requirements and deliverables",
    CV_RUBRIC: "CV scoring rubric for candidate evaluation",
    PROJECT_RUBRIC: "project deliverable scoring rubric",
}


class ContextSource(Protocol):
    mode: str

    async def fetch(self, kind: str, query: str) -> str:
        ...


class FixedContextSource:
    mode = "fixed"

    async def fetch(self, kind: str, query: str) -> str:
        return FALLBACK_TEXTS[kind]


class VectorContextSource:
    """Nearest-neighbour lookup over the reference-document collection."""

    mode = "vector"

    def __init__(self, client, embedder: OpenAIEmbedder, collection: str, k: int = 5):
        self._client = client
        self._embedder = embedder
        self._collection = collection
        self._k = k

    async def fetch(self, kind: str, query: str) -> str:
        [qvec] = await self._embedder.embed([query])
        hits = await asyncio.to_thread(
            search_top_k, self._client, self._collection, qvec,
            k=self._k, doc_types=[kind])
        blocks = [h["payload"].get("text", "") for h in hits]
        text = "\n\n".join(b.strip() for b in blocks if b and b.strip())
        if not text:
            raise LookupError(f"no {kind} context found in {self._collection}")
        return text


class ContextRetriever:
    """Reference context for the evaluation prompts.

    The four operations never raise: whatever the primary source does, the
    caller gets text back. Failures and empty results are swapped for the
    fixed reference text of the same kind and logged.
    """

    def __init__(self, primary: ContextSource, fallback: FixedContextSource | None = None):
        self._primary = primary
        self._fallback = fallback or FixedContextSource()

    @property
    def mode(self) -> str:
        return self._primary.mode

    async def job_requirements(self, job_title: str) -> str:
        query = f"job requirements and evaluation criteria for {job_title}"
        return await self._resolve(JOB_DESCRIPTION, query)

    async def case_study(self) -> str:
        return await self._resolve(CASE_STUDY, _QUERIES[CASE_STUDY])

    async def cv_rubric(self) -> str:
        return await self._resolve(CV_RUBRIC, _QUERIES[CV_RUBRIC])

    async def project_rubric(self) -> str:
        return await self._resolve(PROJECT_RUBRIC, _QUERIES[PROJECT_RUBRIC])

    async def _resolve(self, kind: str, query: str) -> str:
        try:
            text = await self._primary.fetch(kind, query)
            if text and text.strip():
                return text
            logger.warning(f"Empty {kind} context from {self.mode} source, using fallback")
        except Exception as exc:
            logger.warning(f"{kind} retrieval failed ({exc}), using fallback")
        return await self._fallback.fetch(kind, query)


def build_context_retriever(settings: Settings, embedder: OpenAIEmbedder) -> ContextRetriever:
    if not settings.QDRANT_URL:
        logger.info("QDRANT_URL not set, using fixed reference context")
        return ContextRetriever(FixedContextSource())
    if not embedder.configured:
        logger.warning("No embedding key configured, using fixed reference context")
        return ContextRetriever(FixedContextSource())
    try:
        client = get_client(settings)
        client.get_collections()
    except Exception as exc:
        logger.warning(f"Qdrant not available: {exc} (will use fallback context)")
        return ContextRetriever(FixedContextSource())
    logger.info(f"Using Qdrant collection '{settings.QDRANT_COLLECTION}' for context")
    return ContextRetriever(
        VectorContextSource(client, embedder, settings.QDRANT_COLLECTION, k=settings.CONTEXT_TOP_K))


def with_rubric(primary: str, rubric: str) -> str:
    return f"{primary}\n\n{rubric}"
