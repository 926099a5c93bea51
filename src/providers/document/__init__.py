"""Document text-extraction providers.

PyMuPDFTextProvider is the sole implementation of IDocumentTextProvider; it
reads PDF bytes in memory and never touches the filesystem.
"""

from src.providers.document.pymupdf_provider import PyMuPDFTextProvider

__all__ = ["PyMuPDFTextProvider"]
