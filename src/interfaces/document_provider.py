"""Abstract base class for document text-extraction providers.

Defines the contract for turning uploaded document bytes (a PDF résumé)
into plain text.  Swapping PyMuPDF for another parser requires only a new
concrete class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.ingestion import DocumentText


# Concrete implementation: PyMuPDFTextProvider (src/providers/document/)
class IDocumentTextProvider(ABC):
    """Contract for extracting plain text from an in-memory document."""

    @abstractmethod
    async def extract(self, data: bytes) -> DocumentText:
        """Extract the document's text.

        Parameters
        ----------
        data:
            The raw document bytes, exactly as uploaded.

        Returns
        -------
        DocumentText
            The concatenated page text.  May be empty or whitespace-only for
            image-only documents; the caller decides what that means.

        Raises
        ------
        src.utils.errors.ExtractionTextError
            If the bytes cannot be opened as a document at all.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pymupdf"``."""
