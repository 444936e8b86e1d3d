import re
import pdfplumber
from domain.errors import ExtractionError

_INLINE_WS = re.compile(r"[ \t\f\v\u00a0]+")


def parse_pdf_text(path: str) -> str:
    text_parts = []
    try:
        with pdfplumber.open(path) as pdf:
            for page in pdf.pages:
                t = page.extract_text() or ""
                text_parts.append(t)
    except FileNotFoundError as exc:
        raise ExtractionError(f"file not found: {path}") from exc
    except Exception as exc:
        raise ExtractionError(f"failed to open PDF: {exc}") from exc
    return "\n".join(text_parts)


def clean_text(text: str) -> str:
    """Collapse runs of inline whitespace and drop blank lines."""
    lines = (_INLINE_WS.sub(" ", line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


class PdfTextExtractor:
    def extract(self, path: str) -> str:
        text = clean_text(parse_pdf_text(path))
        if not text:
            raise ExtractionError("no text content found in PDF")
        return text
