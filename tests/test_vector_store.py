import pytest

from teachback.core.exceptions import UpstreamError
from teachback.services.vector_store import SimilarityStoreService, to_vector_literal


class FakeResult:
    def __init__(self, rows):
        self.rows = rows

    def all(self):
        return self.rows


class FakeSession:
    def __init__(self, rows, error=None):
        self.rows = rows
        self.error = error
        self.executed = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, statement, params=None):
        self.executed.append((str(statement), params))
        if self.error:
            raise self.error
        return FakeResult(self.rows)


def make_store(settings, rows, error=None):
    session = FakeSession(rows, error)
    return SimilarityStoreService(lambda: session, settings), session


async def test_search_binds_query_parameters(settings):
    store, session = make_store(settings, [("Alpha", 0.9)])

    await store.search([0.5, 0.25])

    statement, params = session.executed[0]
    assert "documents_2" in statement
    assert params == {"embedding": "[0.5,0.25]", "threshold": 0.7, "limit": 5}


async def test_search_returns_at_most_five_above_threshold(settings):
    rows = [
        ("a", 0.91),
        ("b", 0.95),
        ("c", 0.7),
        ("d", 0.72),
        ("e", 0.88),
        ("f", 0.81),
        ("g", 0.99),
        ("h", 0.65),
    ]
    store, _ = make_store(settings, rows)

    snippets = await store.search([0.1])

    assert len(snippets) == 5
    assert all(snippet.similarity > 0.7 for snippet in snippets)
    assert [snippet.text for snippet in snippets] == ["g", "b", "a", "e", "f"]


async def test_find_similar_content_joins_with_blank_lines(settings):
    store, _ = make_store(settings, [("first", 0.9), ("second", 0.8)])

    assert await store.find_similar_content([0.1]) == "first\n\nsecond"


async def test_find_similar_content_is_empty_when_nothing_matches(settings):
    store, _ = make_store(settings, [])

    assert await store.find_similar_content([0.1]) == ""


async def test_search_failure_raises_upstream_error(settings):
    store, _ = make_store(settings, [], error=RuntimeError("connection refused"))

    with pytest.raises(UpstreamError):
        await store.search([0.1])


def test_to_vector_literal():
    assert to_vector_literal([1, 0.5, -2]) == "[1.0,0.5,-2.0]"
