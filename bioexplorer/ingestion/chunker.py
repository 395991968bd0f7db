"""
Fixed-Length Chunker
Splits publication text into bounded-length segments for embedding.
Boundaries are purely length-based, no overlap and no semantic splitting.
"""

from bioexplorer.config import settings
from bioexplorer.models import Publication


def split_text_into_chunks(text: str, max_length: int | None = None) -> list[str]:
    """
    Split text into consecutive, non-overlapping slices of at most max_length.

    Joining the result in order gives back the original text exactly.
    Empty input yields no chunks.

    Args:
        text: Text to split.
        max_length: Maximum characters per chunk (defaults to settings.chunk_max_length).

    Returns:
        List of chunk strings in original order.

    Raises:
        ValueError: If max_length is smaller than 1.
    """
    max_length = max_length if max_length is not None else settings.chunk_max_length
    if max_length < 1:
        raise ValueError(f"max_length must be at least 1, got {max_length}")

    return [text[i:i + max_length] for i in range(0, len(text), max_length)]


def chunk_publication(
    publication: Publication,
    max_length: int | None = None,
) -> list[tuple[int, str]]:
    """Chunk a publication's combined title/abstract/summary text as (index, text) pairs."""
    return list(enumerate(split_text_into_chunks(publication.combined_text(), max_length)))
