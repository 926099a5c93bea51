"""PDF text extraction using PyMuPDF (fitz).

Opens the uploaded bytes as an in-memory stream, pulls plain text from each
page in reading order, and joins pages with a blank line.  Scanned résumés
without a text layer come back as empty text; the pipeline turns that into
an ExtractionTextError rather than sending an empty prompt to the LLM.
"""

from __future__ import annotations

import asyncio

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from src.interfaces.document_provider import IDocumentTextProvider
from src.models.ingestion import DocumentText
from src.utils.errors import ExtractionTextError

logger = structlog.get_logger(logger_name=__name__)


class PyMuPDFTextProvider(IDocumentTextProvider):
    """Extracts text from PDF bytes with PyMuPDF."""

    async def extract(self, data: bytes) -> DocumentText:
        """Extract the text of every page.

        PyMuPDF is synchronous and CPU-bound, so the parse runs in a worker
        thread to keep the event loop free.
        """
        if not data:
            raise ExtractionTextError(
                message="Document is empty (0 bytes)",
                provider_name=self.get_provider_name(),
            )
        return await asyncio.to_thread(self._extract_sync, data)

    def get_provider_name(self) -> str:
        return "pymupdf"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _extract_sync(self, data: bytes) -> DocumentText:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.error("pdf_open_failed", size_bytes=len(data), error=str(exc))
            raise ExtractionTextError(
                message=f"Could not open document as PDF: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            page_texts = [page.get_text("text").strip() for page in doc]
            page_count = len(page_texts)
        finally:
            doc.close()

        text = "\n\n".join(t for t in page_texts if t)
        if not text:
            logger.warning("pdf_no_text_extracted", pages=page_count)

        logger.info("pdf_text_extracted", pages=page_count, chars=len(text))
        return DocumentText(text=text, page_count=page_count)
