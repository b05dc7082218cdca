from teachback.schemas.chat import ChatMessage
from teachback.services.memory import MemoryService


class FakeMemoryClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def add(self, messages, user_id=None, metadata=None):
        self.calls.append({"messages": messages, "user_id": user_id, "metadata": metadata})
        if self.error:
            raise self.error
        return {"results": []}


MESSAGES = [
    ChatMessage(role="user", content="What is X?"),
    ChatMessage(role="assistant", content="X is Y."),
]


def make_service(settings, client):
    settings.MEM0_API_KEY = "mem0-key"
    service = MemoryService(settings)
    service._client = client
    return service


async def test_add_memories_sends_turns_for_user(settings):
    client = FakeMemoryClient()
    service = make_service(settings, client)

    assert await service.add_memories(MESSAGES, user_id="u1", metadata={"persona": "general"})

    assert client.calls[0] == {
        "messages": [
            {"role": "user", "content": "What is X?"},
            {"role": "assistant", "content": "X is Y."},
        ],
        "user_id": "u1",
        "metadata": {"persona": "general"},
    }


async def test_add_memories_swallows_failures(settings):
    service = make_service(settings, FakeMemoryClient(error=RuntimeError("mem0 unavailable")))

    assert await service.add_memories(MESSAGES, user_id="u1") is False


async def test_add_memories_skipped_without_api_key(settings):
    service = MemoryService(settings)

    assert not service.enabled
    assert await service.add_memories(MESSAGES, user_id="u1") is False
