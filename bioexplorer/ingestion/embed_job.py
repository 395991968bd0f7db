"""
Bulk Embedding Job
Chunks, embeds, and indexes every stored publication, one at a time.

Run with:
    python -m bioexplorer.ingestion.embed_job [--append]
"""

import argparse
import logging
import time
import uuid
from typing import Callable, Optional

from bioexplorer.config import Settings, settings as default_settings
from bioexplorer.embedding.embedder import EmbeddingClient, TaskType
from bioexplorer.embedding.vector_store import VectorIndex
from bioexplorer.ingestion.chunker import chunk_publication
from bioexplorer.ingestion.publication_store import PublicationStore
from bioexplorer.models import ChunkMetadata, EmbeddedChunk, EmbeddingJobReport, Publication

logger = logging.getLogger(__name__)


class EmbeddingJob:
    """
    Sequential embed-and-index pass over the publication store.

    Publications are processed strictly in order with a fixed pause after
    each one to stay under the embedding API rate limit. A failing
    publication is logged and counted; the job always runs to the end.
    """

    def __init__(
        self,
        store: PublicationStore,
        embedder: EmbeddingClient,
        index: VectorIndex,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.embedder = embedder
        self.index = index
        self.settings = settings or default_settings
        self.sleep = sleep

    def run(self, replace_existing: bool = True) -> EmbeddingJobReport:
        """
        Embed all publications.

        Args:
            replace_existing: When True, chunk ids are derived from the
                publication id and chunk index, and any other chunks of the
                publication are removed after the new ones are stored, so
                reruns reindex in place. When False, chunks get random ids
                and reruns append duplicates.

        Returns:
            Success and error counts over all publications.
        """
        publications = self.store.get_all()
        report = EmbeddingJobReport(total=len(publications))
        logger.info(f"🚀 Embedding {len(publications)} publications (replace_existing={replace_existing})")

        for i, publication in enumerate(publications, 1):
            try:
                self.embed_publication(publication, replace_existing)
                report.success_count += 1
            except Exception as e:
                report.error_count += 1
                logger.error(f"Error embedding publication {i} ('{publication.id}'): {e}")

            if i % 10 == 0:
                logger.info(f"Progress: {i}/{len(publications)} embedded")

            self.sleep(self.settings.embed_delay_seconds)

        logger.info(
            f"Embedding complete: {report.success_count} succeeded, "
            f"{report.error_count} failed, {report.total} total"
        )
        return report

    def embed_publication(self, publication: Publication, replace_existing: bool = True) -> int:
        """
        Embed and store every chunk of one publication. Returns the chunk count.

        All chunks are embedded before the index is touched, so a failed
        embedding leaves the publication's previously indexed chunks intact.
        Old chunks are removed only after the new ones are stored.
        """
        chunks = chunk_publication(publication, self.settings.chunk_max_length)
        vectors = [self.embedder.embed(text, TaskType.DOCUMENT) for _, text in chunks]

        stored_ids = []
        for (chunk_index, text), vector in zip(chunks, vectors):
            chunk_id = (
                f"{publication.id}:{chunk_index}" if replace_existing else uuid.uuid4().hex
            )
            stored_ids.append(chunk_id)
            self.index.upsert(
                EmbeddedChunk(
                    id=chunk_id,
                    text=text,
                    embedding=vector,
                    metadata=ChunkMetadata(
                        publication_id=publication.id,
                        title=publication.title,
                        url=publication.url,
                        chunk_index=chunk_index,
                    ),
                )
            )

        if replace_existing and stored_ids:
            self.index.delete_publication(publication.id, keep_ids=stored_ids)
        return len(chunks)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Embed all stored publications into the vector index.")
    parser.add_argument(
        "--append",
        action="store_true",
        help="Append new chunks instead of replacing each publication's existing chunks.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    )
    default_settings.ensure_directories()

    job = EmbeddingJob(
        store=PublicationStore(),
        embedder=EmbeddingClient(),
        index=VectorIndex(),
    )
    report = job.run(replace_existing=not args.append)
    print(f"Success: {report.success_count}  Errors: {report.error_count}  Total: {report.total}")
    return 0 if report.error_count == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
