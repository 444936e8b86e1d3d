import os
import re
import asyncio
import logging
from typing import Dict, List, Optional

import pdfplumber

from app.settings import get_settings
from infra.rag.embeddings import OpenAIEmbedder
from infra.rag.fallback import (
    CASE_STUDY, CV_RUBRIC, FALLBACK_TEXTS, JOB_DESCRIPTION, PROJECT_RUBRIC,
)
from infra.rag.qdrant_client import ensure_collection, get_client, upsert_texts_with_ids

log = logging.getLogger("ingest_all")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
for noisy_logger in ("httpx", "httpcore", "qdrant_client"):
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def read_pdf_text(path: str, max_pages: int | None = None) -> str:
    parts: List[str] = []
    with pdfplumber.open(path) as pdf:
        pages = pdf.pages if max_pages is None else pdf.pages[:max_pages]
        for p in pages:
            parts.append(p.extract_text() or "")
    text = "\n".join(parts)
    return re.sub(r"\s+\n", "\n", text)


def chunk_text(text: str, size=1000, overlap=150) -> List[str]:
    out, i = [], 0
    n = len(text)
    while i < n:
        piece = text[i:i+size].strip()
        if piece:
            out.append(piece)
        i += max(1, size - overlap)
    return out


def load_source(doc_type: str, pdf_path: Optional[str]) -> tuple[str, str]:
    """Return (text, source name) for a doc type, falling back to the built-in text."""
    if pdf_path and os.path.isfile(pdf_path):
        return read_pdf_text(pdf_path), os.path.basename(pdf_path)
    if pdf_path:
        log.warning(f"{pdf_path} not found, ingesting built-in {doc_type} text")
    return FALLBACK_TEXTS[doc_type], f"builtin:{doc_type}"


def build_payloads(doc_type: str, text: str, source: str) -> List[Dict]:
    return [{
        "text": t,
        "doc_type": doc_type,
        "source": source,
        "chunk_index": i,
    } for i, t in enumerate(chunk_text(text, size=1000, overlap=150))]


async def main(paths: Dict[str, Optional[str]]):
    settings = get_settings()
    client = get_client(settings)
    if client is None:
        raise SystemExit("QDRANT_URL is not set")
    embedder = OpenAIEmbedder(settings.OPENAI_API_KEY, settings.OPENAI_EMBEDDING_MODEL)
    collection = settings.QDRANT_COLLECTION
    ensure_collection(client, collection, vector_size=settings.EMBEDDING_DIM)

    for doc_type, pdf_path in paths.items():
        text, source = load_source(doc_type, pdf_path)
        payloads = build_payloads(doc_type, text, source)
        if not payloads:
            log.warning(f"No text for {doc_type}, skipping")
            continue
        vecs = await embedder.embed([p["text"] for p in payloads])
        upsert_texts_with_ids(client, collection, vecs, payloads)
        log.info(f"Ingested {len(payloads)} {doc_type} chunk(s) from {source}")

    log.info(f"Ingestion into '{collection}' completed.")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(
        description="Ingest job description, case brief and rubrics into the context collection")
    parser.add_argument("--jd", default="data/job_description.pdf",
                        help="Path to Job Description PDF")
    parser.add_argument("--brief", default="data/case_study.pdf",
                        help="Path to Case Study Brief PDF")
    parser.add_argument("--cv-rubric", default="data/cv_rubric.pdf",
                        help="Path to CV Scoring Rubric PDF")
    parser.add_argument("--project-rubric", default="data/project_rubric.pdf",
                        help="Path to Project Scoring Rubric PDF")
    args = parser.parse_args()
    asyncio.run(main({
        JOB_DESCRIPTION: args.jd,
        CASE_STUDY: args.brief,
        CV_RUBRIC: args.cv_rubric,
        PROJECT_RUBRIC: args.project_rubric,
    }))
