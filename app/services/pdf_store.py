"""Filesystem storage for uploaded invoice PDFs.

Stored files are addressed by a public path of the form ``/pdfs/<name>``,
which is what the API serves them under. Deleting an invoice moves its PDF to
the deleted folder rather than removing it.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from app.core.config import Config, get_config

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/pdfs/"


def _millis() -> int:
    return int(time.time() * 1000)


class PdfStore:
    def __init__(self, config: Config | None = None) -> None:
        cfg = config or get_config()
        self.pdf_dir = Path(cfg.PDF_DIR)
        self.deleted_dir = Path(cfg.DELETED_PDF_DIR)

    def ensure_dirs(self) -> None:
        self.pdf_dir.mkdir(parents=True, exist_ok=True)
        self.deleted_dir.mkdir(parents=True, exist_ok=True)

    def save(self, buffer: bytes, original_name: str) -> str:
        """Write ``buffer`` under a timestamped name and return its public path."""
        self.ensure_dirs()
        safe_name = Path(original_name or "invoice.pdf").name
        filename = f"{_millis()}-{safe_name}"
        (self.pdf_dir / filename).write_bytes(buffer)
        return f"{PUBLIC_PREFIX}{filename}"

    def resolve(self, public_path: str | None) -> Path | None:
        if not public_path:
            return None
        name = Path(public_path).name
        if not name:
            return None
        return self.pdf_dir / name

    def move_to_deleted(self, public_path: str | None, always_suffix: bool = False) -> Path | None:
        """Move a stored PDF into the deleted folder.

        A ``_<millis>`` suffix is added when the target name is taken (or always,
        for bulk deletes). Returns the new location, or ``None`` when there was
        no file to move.
        """
        source = self.resolve(public_path)
        if source is None or not source.exists():
            return None
        self.ensure_dirs()
        target = self.deleted_dir / source.name
        if always_suffix or target.exists():
            target = self.deleted_dir / f"{source.stem}_{_millis()}{source.suffix}"
        source.replace(target)
        logger.info(
            "pdf.moved_to_deleted",
            extra={"event": "pdf.moved_to_deleted", "source": str(source), "target": str(target)},
        )
        return target

    def remove(self, public_path: str | None) -> bool:
        source = self.resolve(public_path)
        if source is None or not source.exists():
            return False
        source.unlink()
        return True
