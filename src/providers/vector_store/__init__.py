"""Record store implementations.

ChromaDB is the sole record store implementation.  It keeps each employee
record with its summary and summary embedding, on disk (persistent) or on a
Chroma server, and answers cosine-similarity queries over the summaries.

To swap ChromaDB for another vector database (Qdrant, MongoDB Atlas Vector
Search, Pinecone), create a new class implementing IRecordStoreProvider and
register it in main.py.
"""

from src.providers.vector_store.chromadb_provider import ChromaDBRecordStore

__all__ = ["ChromaDBRecordStore"]
