from sqlalchemy.orm import sessionmaker
from domain.errors import DocumentNotFoundError
from domain.schemas import Document, DocType
from infra.db.models import FileRecord


def _to_document(rec: FileRecord) -> Document:
    return Document(id=rec.id, filename=rec.name, file_path=rec.path,
                    doc_type=DocType(rec.type), file_size=rec.size or 0,
                    uploaded_at=rec.created_at)


class FilesRepository:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def save(self, ftype: str, path: str, name: str, size: int) -> int:
        rec = FileRecord(type=DocType(ftype).value, path=path, name=name, size=size)
        with self._sessions() as s:
            s.add(rec)
            s.commit()
            return rec.id

    def exists(self, file_id: int) -> bool:
        with self._sessions() as s:
            return s.get(FileRecord, file_id) is not None

    def get(self, file_id: int) -> Document:
        with self._sessions() as s:
            rec = s.get(FileRecord, file_id)
            if not rec:
                raise DocumentNotFoundError(f"document {file_id} not found")
            return _to_document(rec)

    def delete(self, file_id: int) -> None:
        with self._sessions() as s:
            rec = s.get(FileRecord, file_id)
            if rec:
                s.delete(rec)
                s.commit()
