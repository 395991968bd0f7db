"""
Shared fixtures for the test suite
"""
import pytest

from bioexplorer.config import Settings
from bioexplorer.ingestion.publication_store import PublicationStore
from bioexplorer.models import Publication, RetrievedChunk


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment and any .env file"""
    return Settings(
        _env_file=None,
        google_gemini_ai_api_key="test-key",
        google_api_key="",
        database_url=f"sqlite:///{tmp_path / 'publications.db'}",
        chroma_persist_dir=str(tmp_path / "chroma"),
        embedding_dimensions=4,
        embed_delay_seconds=0.5,
        generation_models=["model-a", "model-b", "model-c"],
    )


@pytest.fixture
def store(test_settings):
    return PublicationStore(test_settings.database_url)


def make_publication(pub_id="p1", title="A title", abstract="", summary="", url=None, authors=""):
    return Publication(
        id=pub_id,
        title=title,
        abstract=abstract,
        summary=summary,
        url=url if url is not None else f"https://example.org/{pub_id}",
        authors=authors,
    )


def make_chunk(pub_id, text="chunk text", title=None, url=None, score=0.9):
    metadata = {"title": title or f"Title {pub_id}", "url": url or f"https://example.org/{pub_id}"}
    if pub_id is not None:
        metadata["publication_id"] = pub_id
    return RetrievedChunk(text=text, metadata=metadata, score=score)
