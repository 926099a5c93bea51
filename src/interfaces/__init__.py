"""Public interface definitions for all external service providers.

Every external service the ingestion pipeline touches is accessed through
one of the abstract base classes below.  Concrete adapters live in
``src/providers/`` and are chosen in ``src/main.py``; tests inject fakes.

CONCRETE PROVIDER MAP:
    Interface               ->  Concrete implementations (in src/providers/)
    ---------------------------------------------------------------------
    IDocumentTextProvider   ->  PyMuPDFTextProvider
    ILLMProvider            ->  OpenAILLMProvider, AnthropicLLMProvider,
                                OllamaLLMProvider
    IEmbeddingProvider      ->  OpenAIEmbeddingProvider, NomicEmbeddingProvider
    IRecordStoreProvider    ->  ChromaDBRecordStore
"""

from src.interfaces.document_provider import IDocumentTextProvider
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.record_store_provider import IRecordStoreProvider

__all__ = [
    "IDocumentTextProvider",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IRecordStoreProvider",
]
