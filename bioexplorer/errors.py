"""
Error Types
Exceptions raised by the retrieval, generation, and storage layers.
"""


class BioExplorerError(Exception):
    """Base class for all application errors."""


class MissingCredentialError(BioExplorerError):
    """The Gemini API key is not configured. Fatal at startup."""


class EmbeddingServiceError(BioExplorerError):
    """The embedding API was unreachable or returned malformed output."""


class GenerationServiceError(BioExplorerError):
    """A single generation attempt against one model failed."""

    def __init__(self, message: str, model: str | None = None):
        super().__init__(message)
        self.model = model


class VectorSearchError(BioExplorerError):
    """The vector index could not be written to or searched."""


class InvalidRequestError(BioExplorerError):
    """A required request field is missing or empty."""


class PublicationSchemaError(BioExplorerError):
    """A publication record does not match the canonical schema."""


class PublicationStoreError(BioExplorerError):
    """The publication database could not be read."""
