"""
Embedding Client
Wraps the Gemini embedding API behind a single embed(text, task_type) call.
"""

import logging
from enum import Enum
from typing import Optional

from langchain_google_genai import GoogleGenerativeAIEmbeddings

from bioexplorer.config import Settings, settings as default_settings
from bioexplorer.errors import EmbeddingServiceError

logger = logging.getLogger(__name__)


class TaskType(str, Enum):
    """
    Embedding task type.

    Document and query vectors are produced differently by the provider,
    so stored chunks always use DOCUMENT and questions always use QUERY.
    """

    DOCUMENT = "retrieval_document"
    QUERY = "retrieval_query"


class EmbeddingClient:
    """Produces fixed-dimension vectors for chunks and queries."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        embeddings: Optional[GoogleGenerativeAIEmbeddings] = None,
    ):
        """
        Initialize the embedding client.

        Args:
            settings: Application settings (defaults to the module singleton).
            embeddings: Pre-built LangChain embeddings instance.

        Raises:
            MissingCredentialError: If no Gemini API key is configured and
                no embeddings instance was given.
        """
        self.settings = settings or default_settings
        self.dimensions = self.settings.embedding_dimensions

        if embeddings is None:
            logger.info(
                f"Initializing embedding model: {self.settings.embedding_model} "
                f"(dims={self.dimensions})"
            )
            embeddings = GoogleGenerativeAIEmbeddings(
                model=self.settings.embedding_model,
                google_api_key=self.settings.require_api_key(),
                request_options={"timeout": self.settings.request_timeout_seconds},
            )
        self._embeddings = embeddings

    def embed(self, text: str, task_type: TaskType) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Chunk or query text.
            task_type: DOCUMENT for indexed chunks, QUERY for search input.

        Returns:
            Vector of length settings.embedding_dimensions.

        Raises:
            EmbeddingServiceError: On upstream failure or a malformed vector.
        """
        try:
            vector = self._embeddings.embed_query(text, task_type=task_type.value)
        except Exception as e:
            raise EmbeddingServiceError(f"Embedding request failed: {e}") from e

        if not isinstance(vector, (list, tuple)) or len(vector) != self.dimensions:
            size = len(vector) if isinstance(vector, (list, tuple)) else type(vector).__name__
            raise EmbeddingServiceError(
                f"Malformed embedding: expected {self.dimensions} values, got {size}"
            )
        return [float(v) for v in vector]
