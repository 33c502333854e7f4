"""Plain-text extraction for uploaded PDF and DOCX documents."""

from __future__ import annotations

import io
import logging
from typing import Callable, Iterator

from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph
from pypdf import PdfReader

from .service_errors import ExtractionError, UnsupportedFormatError

LOGGER = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SUPPORTED_MIME_TYPES: tuple[str, ...] = (PDF_MIME_TYPE, DOCX_MIME_TYPE)


def canonical_mime_type(mime_type: str | None) -> str:
    """Drop MIME parameters and case so ``Application/PDF; x=y`` matches."""

    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the text layer of every page in document order."""

    reader = PdfReader(io.BytesIO(data))
    if reader.is_encrypted and not reader.decrypt(""):
        raise ExtractionError("PDF is encrypted and cannot be opened.")
    # Scanned pages have no text layer; extract_text may return None or "".
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _iter_block_text(container) -> Iterator[str]:
    for block in container.iter_inner_content():
        if isinstance(block, Paragraph):
            yield block.text
        elif isinstance(block, Table):
            for row in block.rows:
                seen: set[int] = set()
                for cell in row.cells:
                    # Merged cells are repeated once per spanned grid column.
                    key = id(cell._tc)
                    if key in seen:
                        continue
                    seen.add(key)
                    yield from _iter_block_text(cell)


def extract_docx_text(data: bytes) -> str:
    """Return paragraph text of a DOCX body, tables included, without formatting."""

    document = Document(io.BytesIO(data))
    return "\n".join(_iter_block_text(document))


class TextExtractor:
    """Dispatch raw document bytes to the parser for their declared type."""

    def __init__(self) -> None:
        self._parsers: dict[str, Callable[[bytes], str]] = {
            PDF_MIME_TYPE: extract_pdf_text,
            DOCX_MIME_TYPE: extract_docx_text,
        }

    def supports(self, mime_type: str | None) -> bool:
        return canonical_mime_type(mime_type) in self._parsers

    def extract(self, data: bytes, mime_type: str | None) -> str:
        """Return the plain text of ``data``.

        Raises :class:`UnsupportedFormatError` for anything other than PDF or
        DOCX without touching the bytes, and :class:`ExtractionError` when the
        parser rejects the document. A valid document without text yields ``""``.
        """

        canonical = canonical_mime_type(mime_type)
        parser = self._parsers.get(canonical)
        if parser is None:
            raise UnsupportedFormatError(
                f"Unsupported file type: {mime_type or 'unknown'}. Only PDF and DOCX are supported.",
                details={"mime_type": mime_type, "supported": list(SUPPORTED_MIME_TYPES)},
            )

        try:
            text = parser(data)
        except ExtractionError:
            raise
        except Exception as exc:  # noqa: BLE001 - parsers raise a wide range of errors
            LOGGER.warning(
                "extraction.failed",
                extra={"extra_payload": {"mime_type": canonical, "size": len(data), "error": str(exc)}},
            )
            raise ExtractionError(
                f"Failed to extract text from file: {exc}",
                details={"mime_type": canonical, "error_type": type(exc).__name__},
            ) from exc

        LOGGER.debug(
            "extraction.completed",
            extra={"extra_payload": {"mime_type": canonical, "size": len(data), "characters": len(text)}},
        )
        return text


__all__ = [
    "DOCX_MIME_TYPE",
    "PDF_MIME_TYPE",
    "SUPPORTED_MIME_TYPES",
    "TextExtractor",
    "canonical_mime_type",
    "extract_docx_text",
    "extract_pdf_text",
]
