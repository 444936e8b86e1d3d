from typing import Iterable, Optional
from qdrant_client import QdrantClient
from qdrant_client.models import Distance, VectorParams, PointStruct, Filter, FieldCondition, MatchAny
from app.settings import Settings
import hashlib


def get_client(settings: Settings) -> Optional[QdrantClient]:
    if not settings.QDRANT_URL:
        return None
    return QdrantClient(url=settings.QDRANT_URL, api_key=settings.QDRANT_API_KEY or None)


def _ensure_payload_indexes(client: QdrantClient, collection: str):
    existing = client.get_collection(collection).payload_schema or {}
    for field, schema in [
        ("doc_type", "keyword"),
        ("source", "keyword"),
        ("chunk_index", "integer"),
    ]:
        if field in existing:
            continue
        client.create_payload_index(
            collection_name=collection,
            field_name=field,
            field_schema=schema
        )


def ensure_collection(client: QdrantClient, name: str, vector_size: int = 1536):
    names = {x.name for x in client.get_collections().collections}
    if name not in names:
        client.create_collection(collection_name=name, vectors_config=VectorParams(
            size=vector_size, distance=Distance.COSINE))
    _ensure_payload_indexes(client, name)


def stable_id(doc_type: str, text: str, source: str = "", chunk_index: int = -1) -> str:
    raw = f"{doc_type}|{source}|{chunk_index}|{text}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


def upsert_texts_with_ids(client: QdrantClient, collection: str, vectors: list[list[float]], payloads: list[dict]):
    points = [
        PointStruct(
            id=stable_id(
                p["doc_type"], p["text"], p.get("source", ""), p.get("chunk_index", -1)
            ),
            vector=v,
            payload=p
        )
        for v, p in zip(vectors, payloads)
    ]
    client.upsert(collection_name=collection, points=points)


def search_top_k(
    client: QdrantClient,
    collection: str,
    query_vector: list[float],
    k: int,
    doc_types: Optional[Iterable[str]] = None,
):
    q_filter = None
    if doc_types:
        q_filter = Filter(must=[FieldCondition(
            key="doc_type", match=MatchAny(any=list(doc_types)))])

    hits = client.query_points(
        collection_name=collection,
        query=query_vector,
        limit=k,
        query_filter=q_filter,
        with_payload=True,
    ).points
    return [{"payload": h.payload or {}, "score": float(h.score)} for h in hits]
