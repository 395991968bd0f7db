"""
Vector Index
ChromaDB-backed nearest-neighbour index over embedded publication chunks.
Vectors are computed by EmbeddingClient and stored as-is; the index never
embeds text itself.
"""

import logging
from typing import Optional, Sequence

from langchain_chroma import Chroma

from bioexplorer.config import Settings, settings as default_settings
from bioexplorer.errors import VectorSearchError
from bioexplorer.models import EmbeddedChunk, RetrievedChunk

logger = logging.getLogger(__name__)


class VectorIndex:
    """Stores chunk text, vector and metadata; searches by vector."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        vector_store: Optional[Chroma] = None,
    ):
        """
        Initialize the vector index.

        Args:
            settings: Application settings (defaults to the module singleton).
            vector_store: Pre-built Chroma store (auto-created if None).
        """
        self.settings = settings or default_settings
        self.collection_name = self.settings.chroma_collection_name
        self._vector_store = vector_store

    @property
    def vector_store(self) -> Chroma:
        """Lazy-initialize and return the ChromaDB vector store."""
        if self._vector_store is None:
            self._vector_store = Chroma(
                collection_name=self.collection_name,
                persist_directory=self.settings.chroma_persist_dir,
                collection_metadata={"hnsw:space": "cosine"},
            )
            logger.info(
                f"Initialized ChromaDB: collection='{self.collection_name}', "
                f"persist_dir='{self.settings.chroma_persist_dir}'"
            )
        return self._vector_store

    def upsert(self, chunk: EmbeddedChunk) -> None:
        """Insert a chunk, replacing any existing chunk with the same id."""
        try:
            self.vector_store._collection.upsert(
                ids=[chunk.id],
                embeddings=[chunk.embedding],
                documents=[chunk.text],
                metadatas=[chunk.metadata.model_dump()],
            )
        except Exception as e:
            raise VectorSearchError(f"Failed to store chunk '{chunk.id}': {e}") from e

    def search(self, vector: list[float], limit: int) -> list[RetrievedChunk]:
        """
        Find the chunks closest to a query vector.

        Args:
            vector: Query embedding.
            limit: Maximum number of hits.

        Returns:
            Hits ordered by descending similarity (1 - cosine distance).

        Raises:
            VectorSearchError: If the index cannot be queried.
        """
        try:
            results = self.vector_store.similarity_search_by_vector_with_relevance_scores(
                embedding=vector, k=limit
            )
        except Exception as e:
            raise VectorSearchError(f"Vector search failed: {e}") from e

        hits = [
            RetrievedChunk(
                text=doc.page_content,
                metadata=dict(doc.metadata or {}),
                score=1.0 - float(distance),
            )
            for doc, distance in results
        ]
        logger.info(f"Vector search returned {len(hits)} hits (limit={limit})")
        return hits

    def delete_publication(self, publication_id: str, keep_ids: Sequence[str] = ()) -> None:
        """
        Remove the chunks that belong to one publication.

        Args:
            publication_id: Publication whose chunks are removed.
            keep_ids: Chunk ids to leave in place, e.g. the ones just upserted.
        """
        where = {"publication_id": publication_id}
        try:
            if not keep_ids:
                self.vector_store.delete(where=where)
                return
            keep = set(keep_ids)
            existing = self.vector_store._collection.get(where=where, include=[])["ids"]
            stale = [chunk_id for chunk_id in existing if chunk_id not in keep]
            if stale:
                self.vector_store._collection.delete(ids=stale)
                logger.info(f"Removed {len(stale)} stale chunks for publication '{publication_id}'")
        except Exception as e:
            raise VectorSearchError(
                f"Failed to delete chunks for publication '{publication_id}': {e}"
            ) from e

    def count(self) -> int:
        return self.vector_store._collection.count()

    def get_collection_stats(self) -> dict:
        """
        Get statistics about the current collection.

        Returns:
            Dictionary with collection name and chunk count.
        """
        return {
            "collection_name": self.collection_name,
            "chunk_count": self.count(),
        }
