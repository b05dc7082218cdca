"""Shared fixtures and in-memory fakes."""

from typing import List, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from teachback.core.config import Settings
from teachback.db.database import Base
from teachback.schemas.chat import ChatMessage
from teachback.schemas.settings import PromptConfiguration

import teachback.models  # noqa: F401

SQLITE_URL = "sqlite+aiosqlite://"


def make_database():
    """In-memory SQLite shared by every session of the factory."""
    engine = create_async_engine(
        SQLITE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    return engine, session_factory


@pytest.fixture
def settings() -> Settings:
    return Settings(
        POSTGRES_URL=SQLITE_URL,
        OPENAI_API_KEY="test-key",
        MEM0_API_KEY=None,
        ELEVENLABS_API_KEY=None,
        ADMIN_TOKEN="",
        ENVIRONMENT="test",
        LOG_LEVEL="INFO",
    )


@pytest.fixture
async def session_factory():
    engine, factory = make_database()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


class FakeEmbeddingService:
    def __init__(self, vector: Optional[List[float]] = None, error: Optional[Exception] = None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.calls: List[str] = []

    async def embed_query(self, query: str) -> List[float]:
        self.calls.append(query)
        if self.error:
            raise self.error
        return self.vector


class FakeVectorStore:
    def __init__(self, context: str = "", error: Optional[Exception] = None):
        self.context = context
        self.error = error
        self.calls: List[Sequence[float]] = []

    async def find_similar_content(self, embedding: Sequence[float]) -> str:
        self.calls.append(embedding)
        if self.error:
            raise self.error
        return self.context


class FakeCompletionStreamer:
    """Replays fixed chunks; can fail before the first token or after the last."""

    def __init__(
        self,
        chunks: Sequence[str] = ("Hello", " world"),
        error_before: Optional[Exception] = None,
        error_after: Optional[Exception] = None,
    ):
        self.chunks = list(chunks)
        self.error_before = error_before
        self.error_after = error_after
        self.calls: List[dict] = []

    async def open_stream(self, messages: Sequence[ChatMessage], *, user_id: str):
        self.calls.append({"messages": list(messages), "user_id": user_id})
        if self.error_before:
            raise self.error_before
        return self._stream()

    async def _stream(self):
        for chunk in self.chunks:
            yield chunk
        if self.error_after:
            raise self.error_after


class FakeMemoryService:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[dict] = []

    async def add_memories(self, messages, *, user_id, metadata=None) -> bool:
        self.calls.append({"messages": list(messages), "user_id": user_id, "metadata": metadata})
        if self.error:
            raise self.error
        return True


class FakePromptConfigService:
    def __init__(self, prompt: str = ""):
        self.configuration = PromptConfiguration(prompt=prompt)

    async def get_configuration(self):
        return self.configuration


@pytest.fixture
def embedding_service():
    return FakeEmbeddingService()


@pytest.fixture
def vector_store():
    return FakeVectorStore(context="Snippet one\n\nSnippet two")


@pytest.fixture
def completion_streamer():
    return FakeCompletionStreamer()


@pytest.fixture
def memory_service():
    return FakeMemoryService()
