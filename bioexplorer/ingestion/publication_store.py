"""
Publication Store
SQL-backed store for the canonical publication records.
All records are normalized into one schema at this boundary.
"""

import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from bioexplorer.config import settings
from bioexplorer.errors import PublicationSchemaError, PublicationStoreError
from bioexplorer.models import Publication

logger = logging.getLogger(__name__)

PUBLICATION_FIELDS = ("title", "abstract", "authors", "summary", "url")

metadata = MetaData()

publications_table = Table(
    "publications",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("title", Text, nullable=False, index=True),
    Column("abstract", Text, nullable=False, default=""),
    Column("authors", Text, nullable=False, default=""),
    Column("summary", Text, nullable=False, default=""),
    Column("url", Text, nullable=False, default=""),
)


def normalize_record(record: dict) -> dict:
    """
    Validate a raw record against the canonical publication schema.

    Only the lowercase fields title, abstract, authors, summary and url
    (plus an optional id) are accepted. Anything else is rejected rather
    than guessed at.

    Args:
        record: Raw mapping, e.g. a parsed JSON body.

    Returns:
        Dict with every canonical field present as a string.

    Raises:
        PublicationSchemaError: On unknown keys, a missing title, or
            non-string values.
    """
    unknown = sorted(set(record) - set(PUBLICATION_FIELDS) - {"id"})
    if unknown:
        raise PublicationSchemaError(
            f"Unrecognized publication fields: {unknown}. "
            f"Expected: {list(PUBLICATION_FIELDS)}"
        )
    if "title" not in record:
        raise PublicationSchemaError("Publication record has no 'title' field")

    normalized = {}
    for field in PUBLICATION_FIELDS:
        value = record.get(field)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise PublicationSchemaError(
                f"Field '{field}' must be a string, got {type(value).__name__}"
            )
        normalized[field] = value
    return normalized


class PublicationStore:
    """CRUD access to the publications table."""

    def __init__(self, db_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Args:
            db_url: SQLAlchemy URL (defaults to settings.database_url).
            engine: Pre-built engine, takes precedence over db_url.
        """
        self.engine = engine or create_engine(db_url or settings.database_url)
        metadata.create_all(self.engine)

    def add(self, record: dict) -> str:
        """Insert one publication and return its newly assigned id."""
        values = normalize_record(record)
        publication_id = uuid.uuid4().hex
        with self.engine.begin() as conn:
            conn.execute(publications_table.insert().values(id=publication_id, **values))
        return publication_id

    def bulk_add(self, records: Iterable[dict]) -> tuple[list[str], int]:
        """
        Insert many publications, skipping ones without a title, URL or abstract.

        Returns:
            (ids of inserted publications, number of rejected records)
        """
        rows = []
        rejected = 0
        for record in records:
            values = normalize_record(record)
            if not Publication(id="", **values).is_admissible():
                rejected += 1
                continue
            rows.append({"id": uuid.uuid4().hex, **values})

        if rows:
            with self.engine.begin() as conn:
                conn.execute(publications_table.insert(), rows)

        logger.info(f"Bulk load: {len(rows)} added, {rejected} rejected")
        return [row["id"] for row in rows], rejected

    def get_all(self) -> list[Publication]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(select(publications_table)).mappings().all()
        except SQLAlchemyError as e:
            raise PublicationStoreError(f"Failed to load publications: {e}") from e
        return [Publication(**row) for row in rows]

    def get_by_id(self, publication_id: str) -> Optional[Publication]:
        """
        Look up one publication. Returns None when the id is unknown.

        Raises:
            PublicationStoreError: If the database cannot be read.
        """
        query = select(publications_table).where(publications_table.c.id == publication_id)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as e:
            raise PublicationStoreError(f"Failed to load publication '{publication_id}': {e}") from e
        return Publication(**row) if row else None

    def search_by_title(self, term: str, limit: int = 20) -> list[Publication]:
        return self._search("title", term, limit)

    def search_by_abstract(self, term: str, limit: int = 20) -> list[Publication]:
        return self._search("abstract", term, limit)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(publications_table)).scalar_one()

    def _search(self, field: str, term: str, limit: int) -> list[Publication]:
        """Case-insensitive substring match on a single column."""
        term = term.strip().lower()
        if not term:
            return []
        column = publications_table.c[field]
        query = select(publications_table).where(func.lower(column).contains(term)).limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [Publication(**row) for row in rows]
