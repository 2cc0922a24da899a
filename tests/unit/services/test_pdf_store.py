from __future__ import annotations

import io

import pytest
from pypdf import PdfWriter
from pypdf.errors import LimitReachedError

import app.parsing.pdf_text as pdf_text_module
from app.core.exceptions import ExtractionError
from app.parsing.pdf_text import extract_pdf_text


def test_save_returns_public_path_and_strips_directories(pdf_store):
    public_path = pdf_store.save(b"%PDF", "../../etc/acme.pdf")

    assert public_path.startswith("/pdfs/")
    assert public_path.endswith("-acme.pdf")
    assert pdf_store.resolve(public_path).parent == pdf_store.pdf_dir
    assert pdf_store.resolve(public_path).read_bytes() == b"%PDF"


def test_move_to_deleted_suffixes_on_collision(pdf_store):
    first = pdf_store.save(b"one", "same.pdf")
    name = pdf_store.resolve(first).name
    (pdf_store.deleted_dir / name).write_bytes(b"already here")

    target = pdf_store.move_to_deleted(first)

    assert target.parent == pdf_store.deleted_dir
    assert target.name != name
    assert target.read_bytes() == b"one"
    assert (pdf_store.deleted_dir / name).read_bytes() == b"already here"


def test_move_and_remove_missing_files_are_noops(pdf_store):
    assert pdf_store.move_to_deleted(None) is None
    assert pdf_store.move_to_deleted("/pdfs/missing.pdf") is None
    assert pdf_store.remove("/pdfs/missing.pdf") is False


def test_extract_pdf_text_reads_blank_pdf():
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)

    assert extract_pdf_text(buffer.getvalue()) == ""


@pytest.mark.parametrize("payload", [b"", b"this is not a pdf"])
def test_extract_pdf_text_rejects_unreadable_input(payload):
    with pytest.raises(ExtractionError):
        extract_pdf_text(payload)


def test_extract_pdf_text_rejects_truncated_pdf():
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    data = buffer.getvalue()

    with pytest.raises(ExtractionError, match="unreadable PDF"):
        extract_pdf_text(data[: len(data) // 2])


@pytest.mark.parametrize(
    "error",
    [
        AttributeError("'NullObject' object has no attribute 'get_object'"),
        LimitReachedError("Detected loop with self reference for IndirectObject(2, 0)"),
    ],
)
def test_extract_pdf_text_wraps_reader_failures(monkeypatch, error):
    def _broken_reader(stream):
        raise error

    monkeypatch.setattr(pdf_text_module, "PdfReader", _broken_reader)

    with pytest.raises(ExtractionError, match=type(error).__name__):
        extract_pdf_text(b"%PDF-1.7 damaged")
