"""
Publication Retriever
=====================
Pipeline:
    Embed question (QUERY) → Vector Search → Dedup by publication → Hydrate sources

Hits are never re-ranked; the index order is kept.
"""

import logging
from typing import Optional

from bioexplorer.embedding.embedder import EmbeddingClient, TaskType
from bioexplorer.embedding.vector_store import VectorIndex
from bioexplorer.errors import PublicationStoreError
from bioexplorer.ingestion.publication_store import PublicationStore
from bioexplorer.models import RetrievedChunk, Source

logger = logging.getLogger(__name__)

ANSWER_SNIPPET_LENGTH = 200
SEARCH_SNIPPET_LENGTH = 300


class PublicationRetriever:
    """Finds publications relevant to a question via vector similarity."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        index: VectorIndex,
        store: PublicationStore,
    ):
        self.embedder = embedder
        self.index = index
        self.store = store

    def search_chunks(self, question: str, limit: int) -> list[RetrievedChunk]:
        """
        Embed the question and return the raw ranked hits.

        Raises:
            EmbeddingServiceError: If the question cannot be embedded.
            VectorSearchError: If the index cannot be searched.
        """
        vector = self.embedder.embed(question, TaskType.QUERY)
        chunks = self.index.search(vector, limit)
        logger.info(f"Retrieved {len(chunks)} chunks for: '{question[:50]}...'")
        return chunks

    def to_sources(
        self,
        chunks: list[RetrievedChunk],
        snippet_length: int = ANSWER_SNIPPET_LENGTH,
        max_sources: int = 5,
    ) -> list[Source]:
        """
        Turn ranked hits into at most max_sources unique publications.

        The first hit for each publication wins. The full record is looked up
        in the store; when it is gone or the store cannot be read, the title
        and URL stored with the chunk are used instead.
        """
        sources: list[Source] = []
        seen: set[str] = set()

        for chunk in chunks:
            if len(sources) >= max_sources:
                break
            publication_id = chunk.publication_id
            if not publication_id or publication_id in seen:
                continue
            seen.add(publication_id)

            try:
                publication = self.store.get_by_id(publication_id)
            except PublicationStoreError as e:
                logger.warning(f"Store lookup failed for '{publication_id}': {e}")
                publication = None

            if publication is not None:
                title, url = publication.title, publication.url
            else:
                logger.warning(f"Publication '{publication_id}' not in store, using chunk metadata")
                title = chunk.metadata.get("title") or "Unknown"
                url = chunk.metadata.get("url") or ""

            sources.append(
                Source(
                    publication_id=publication_id,
                    title=title,
                    url=url,
                    snippet=chunk.text[:snippet_length],
                    score=chunk.score,
                )
            )
        return sources

    def retrieve(self, question: str, limit: int = 5) -> list[Source]:
        """Sources for question answering: 200-character snippets, at most 5."""
        chunks = self.search_chunks(question, limit)
        if not chunks:
            return []
        return self.to_sources(chunks, ANSWER_SNIPPET_LENGTH, max_sources=5)

    def search(self, query: str, limit: Optional[int] = None) -> list[Source]:
        """General semantic search: 300-character snippets, at most 10."""
        limit = limit or 10
        chunks = self.search_chunks(query, limit)
        if not chunks:
            return []
        return self.to_sources(chunks, SEARCH_SNIPPET_LENGTH, max_sources=10)
