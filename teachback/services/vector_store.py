"""Similarity search against the pgvector document table."""

from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teachback.core.config import Settings
from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

SNIPPET_SEPARATOR = "\n\n"

# The vector is bound as text and cast server side, no client-side codec needed
SIMILARITY_QUERY = """
    SELECT contents, 1 - (vector <=> CAST(CAST(:embedding AS text) AS vector)) AS similarity
    FROM {table}
    WHERE 1 - (vector <=> CAST(CAST(:embedding AS text) AS vector)) > :threshold
    ORDER BY similarity DESC
    LIMIT :limit
"""


@dataclass
class RetrievedSnippet:
    """A document snippet and its cosine similarity to the query."""

    text: str
    similarity: float


class SimilarityStoreService:
    """Service for nearest-neighbour lookups over the document collection."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> None:
        """
        Initialize the similarity store.

        Args:
            session_factory: Factory for database sessions, owned by the application
            settings: Application settings (table name, threshold, limit)
        """
        self._session_factory = session_factory
        self.table = settings.DOCUMENTS_TABLE
        self.threshold = settings.SIMILARITY_THRESHOLD
        self.limit = settings.SIMILARITY_TOP_K

    async def search(self, embedding: Sequence[float]) -> List[RetrievedSnippet]:
        """
        Return up to ``limit`` snippets above the similarity threshold, most similar first.

        Raises:
            UpstreamError: If the query fails
        """
        params = {
            "embedding": to_vector_literal(embedding),
            "threshold": self.threshold,
            "limit": self.limit,
        }

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(SIMILARITY_QUERY.format(table=self.table)), params
                )
                rows = result.all()
        except Exception as e:
            logger.error(f"Similarity search failed: table={self.table}, error={str(e)}")
            raise UpstreamError(f"Vector search failed: {str(e)}")

        snippets = [
            RetrievedSnippet(text=row[0], similarity=float(row[1]))
            for row in rows
            if row[1] is not None and float(row[1]) > self.threshold
        ]
        snippets.sort(key=lambda snippet: snippet.similarity, reverse=True)
        snippets = snippets[: self.limit]

        logger.info(
            f"Similarity search completed: table={self.table}, rows={len(rows)}, "
            f"snippets={len(snippets)}, threshold={self.threshold}"
        )
        for i, snippet in enumerate(snippets, 1):
            logger.debug(
                f"Snippet {i}: similarity={snippet.similarity:.4f}, "
                f"preview={snippet.text[:120]!r}"
            )

        return snippets

    async def find_similar_content(self, embedding: Sequence[float]) -> str:
        """
        Return matching snippet texts joined by blank lines.

        An empty string means nothing cleared the threshold; it is not an error.
        """
        snippets = await self.search(embedding)
        return SNIPPET_SEPARATOR.join(snippet.text for snippet in snippets)


def to_vector_literal(embedding: Sequence[float]) -> str:
    """Format an embedding as a pgvector literal, e.g. ``[0.1,0.2]``."""
    return "[" + ",".join(str(float(value)) for value in embedding) + "]"
