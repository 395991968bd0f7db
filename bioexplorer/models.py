"""
Data Models
Pydantic models shared by the store, retrieval, generation, and analytics layers.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Publication(BaseModel):
    """Canonical publication record."""

    id: str
    title: str
    abstract: str = ""
    authors: str = ""
    summary: str = ""
    url: str = ""

    def combined_text(self) -> str:
        """Text that gets chunked and embedded."""
        return f"Title: {self.title}\n\nAbstract: {self.abstract}\n\nSummary: {self.summary}"

    def search_text(self) -> str:
        """Title, abstract and summary joined for keyword matching."""
        return f"{self.title} {self.abstract} {self.summary}"

    def is_admissible(self) -> bool:
        """Bulk loads only admit records with a title, URL, and abstract."""
        return bool(self.title.strip() and self.url.strip() and self.abstract.strip())


class ChunkMetadata(BaseModel):
    """Snapshot of the source publication stored next to each vector."""

    publication_id: str
    title: str = ""
    url: str = ""
    chunk_index: int = 0


class EmbeddedChunk(BaseModel):
    """A chunk of publication text together with its embedding."""

    id: str
    text: str
    embedding: list[float]
    metadata: ChunkMetadata


class RetrievedChunk(BaseModel):
    """One nearest-neighbour hit from the vector index."""

    text: str
    metadata: dict
    score: float

    @property
    def publication_id(self) -> Optional[str]:
        return self.metadata.get("publication_id") or None


class Source(BaseModel):
    """A publication shown to the user as supporting material."""

    publication_id: Optional[str] = None
    title: str
    url: str = ""
    snippet: str = ""
    score: Optional[float] = None


class AnswerResult(BaseModel):
    """Outcome of a question-answering call. Never raised, always returned."""

    question: str
    answer: str
    sources: list[Source] = Field(default_factory=list)
    model_used: Optional[str] = None
    error: Optional[str] = None


class EmbeddingJobReport(BaseModel):
    success_count: int = 0
    error_count: int = 0
    total: int = 0


class KeywordCount(BaseModel):
    term: str
    count: int


class GraphNode(BaseModel):
    id: str
    name: str
    kind: Literal["query", "publication", "keyword", "context"]
    val: float = 1.0


class GraphLink(BaseModel):
    source: str
    target: str


class KnowledgeGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)
