"""PDF to plain text via pypdf."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader

from app.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


def extract_pdf_text(buffer: bytes) -> str:
    """Return the concatenated text of every page in ``buffer``.

    Raises ``ExtractionError`` when the buffer is not a readable PDF. Pages
    that yield no text contribute an empty string.
    """
    if not buffer:
        raise ExtractionError("empty PDF upload")
    try:
        reader = PdfReader(io.BytesIO(buffer))
        pages = [(page.extract_text() or "") for page in reader.pages]
    except Exception as exc:
        # pypdf raises well beyond PdfReadError on damaged files.
        raise ExtractionError(f"unreadable PDF: {type(exc).__name__}: {exc}") from exc

    logger.debug("pdf.text_extracted", extra={"event": "pdf.text_extracted", "pages": len(pages)})
    return "\n".join(pages)
