import asyncio

import pytest
from conftest import (
    FakeCompletionStreamer,
    FakeEmbeddingService,
    FakeMemoryService,
    FakePromptConfigService,
    FakeVectorStore,
)

from teachback.core.exceptions import PersistenceError, UpstreamError, ValidationError
from teachback.prompts.chat import DEFAULT_SYSTEM_PROMPT, GREETING_RESPONSES
from teachback.repositories import PromptConfigRepository
from teachback.schemas.chat import ChatMessage
from teachback.services.chat import ChatService, format_stream_part
from teachback.services.prompt_config import PromptConfigService


def make_service(
    embedding_service=None,
    vector_store=None,
    completion_streamer=None,
    memory_service=None,
    prompt_config_service=None,
):
    return ChatService(
        embedding_service=embedding_service or FakeEmbeddingService(),
        vector_store=vector_store or FakeVectorStore(context="Alpha\n\nBeta"),
        completion_streamer=completion_streamer or FakeCompletionStreamer(),
        memory_service=memory_service or FakeMemoryService(),
        prompt_config_service=prompt_config_service,
    )


def user(content):
    return ChatMessage(role="user", content=content)


async def drain(service, chat_stream):
    return [event async for event in service.stream_events(chat_stream)]


async def test_regular_query_retrieves_context_and_streams():
    embedding = FakeEmbeddingService()
    store = FakeVectorStore(context="Alpha\n\nBeta")
    streamer = FakeCompletionStreamer(chunks=["X ", "is ", "Y."])
    service = make_service(embedding, store, streamer)

    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")
    events = await drain(service, chat_stream)

    assert embedding.calls == ["What is X?"]
    assert len(store.calls) == 1
    sent = streamer.calls[0]["messages"]
    assert sent[0].role == "system"
    assert sent[0].content.endswith("Documentation Context: Alpha\n\nBeta")
    assert sent[-1].content == "What is X?"
    assert [data["content"] for event, data in events if event == "chat.chunk"] == ["X ", "is ", "Y."]
    assert events[-1] == ("chat.complete", {"finish_reason": "stop"})
    assert chat_stream.turn.response == "X is Y."
    assert chat_stream.turn.completed


async def test_greeting_skips_retrieval_and_model():
    embedding = FakeEmbeddingService()
    store = FakeVectorStore()
    streamer = FakeCompletionStreamer()
    service = make_service(embedding, store, streamer)

    chat_stream = await service.start_chat(messages=[user("hello")], user_id="u1")
    events = await drain(service, chat_stream)

    assert embedding.calls == []
    assert store.calls == []
    assert streamer.calls == []
    chunks = [data["content"] for event, data in events if event == "chat.chunk"]
    assert len(chunks) == 1
    assert chunks[0] in GREETING_RESPONSES
    assert chat_stream.turn.greeting


async def test_empty_context_still_streams():
    streamer = FakeCompletionStreamer(chunks=["I wish I could help with that"])
    service = make_service(vector_store=FakeVectorStore(context=""), completion_streamer=streamer)

    chat_stream = await service.start_chat(messages=[user("Unknown topic?")], user_id="u1")
    await drain(service, chat_stream)

    assert streamer.calls[0]["messages"][0].content.endswith("Documentation Context: ")


async def test_history_is_preserved_in_order():
    streamer = FakeCompletionStreamer()
    service = make_service(completion_streamer=streamer)
    messages = [
        user("First question"),
        ChatMessage(role="assistant", content="First answer"),
        user("Second question"),
    ]

    await service.start_chat(messages=messages, user_id="u1")

    sent = streamer.calls[0]["messages"]
    assert [(m.role, m.content) for m in sent[1:]] == [
        ("user", "First question"),
        ("assistant", "First answer"),
        ("user", "Second question"),
    ]


@pytest.mark.parametrize(
    "messages",
    [
        [],
        [ChatMessage(role="assistant", content="Hi")],
        [user("   ")],
    ],
)
async def test_invalid_messages_raise_validation_error(messages):
    with pytest.raises(ValidationError):
        await make_service().start_chat(messages=messages, user_id="u1")


async def test_missing_user_id_raises_validation_error():
    with pytest.raises(ValidationError):
        await make_service().start_chat(messages=[user("What is X?")], user_id=" ")


async def test_upstream_failure_before_stream_propagates():
    service = make_service(embedding_service=FakeEmbeddingService(error=UpstreamError("down")))

    with pytest.raises(UpstreamError):
        await service.start_chat(messages=[user("What is X?")], user_id="u1")


async def test_mid_stream_failure_yields_error_event():
    streamer = FakeCompletionStreamer(chunks=["partial"], error_after=UpstreamError("reset"))
    service = make_service(completion_streamer=streamer)

    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")
    events = await drain(service, chat_stream)

    assert events[0] == ("chat.chunk", {"content": "partial"})
    assert events[-1][0] == "chat.error"
    assert not chat_stream.turn.completed


async def test_system_prompt_override_wins_over_stored_configuration():
    streamer = FakeCompletionStreamer()
    service = make_service(
        completion_streamer=streamer,
        prompt_config_service=FakePromptConfigService(prompt="Stored prompt"),
    )

    await service.start_chat(messages=[user("What is X?")], user_id="u1", system_prompt="Override")

    assert streamer.calls[0]["messages"][0].content.startswith("Override")


async def test_stored_prompt_used_when_no_override():
    streamer = FakeCompletionStreamer()
    service = make_service(
        completion_streamer=streamer,
        prompt_config_service=FakePromptConfigService(prompt="Stored prompt"),
    )

    await service.start_chat(messages=[user("What is X?")], user_id="u1")

    assert streamer.calls[0]["messages"][0].content.startswith("Stored prompt")


async def test_default_prompt_used_when_settings_unavailable():
    class BrokenPromptConfigService:
        async def get_configuration(self):
            raise PersistenceError("Failed to fetch prompt")

    streamer = FakeCompletionStreamer()
    service = make_service(
        completion_streamer=streamer, prompt_config_service=BrokenPromptConfigService()
    )

    await service.start_chat(messages=[user("What is X?")], user_id="u1")

    assert streamer.calls[0]["messages"][0].content.startswith(DEFAULT_SYSTEM_PROMPT)


async def test_remember_writes_completed_exchange():
    memory = FakeMemoryService()
    service = make_service(memory_service=memory)
    messages = [
        ChatMessage(role="system", content="client system"),
        user("First"),
        ChatMessage(role="assistant", content="Answer"),
        user("What is X?"),
    ]

    chat_stream = await service.start_chat(messages=messages, user_id="u1", persona="roleplay")
    await drain(service, chat_stream)
    await service.remember(chat_stream.turn)

    call = memory.calls[0]
    assert call["user_id"] == "u1"
    assert call["metadata"] == {"persona": "roleplay"}
    assert [(m.role, m.content) for m in call["messages"]] == [
        ("user", "First"),
        ("assistant", "Answer"),
        ("user", "What is X?"),
        ("assistant", "Hello world"),
    ]


async def test_remember_skips_incomplete_exchange():
    memory = FakeMemoryService()
    streamer = FakeCompletionStreamer(chunks=["partial"], error_after=UpstreamError("reset"))
    service = make_service(completion_streamer=streamer, memory_service=memory)

    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")
    await drain(service, chat_stream)

    assert await service.remember(chat_stream.turn) is False
    assert memory.calls == []


async def test_client_disconnect_propagates_cancellation():
    async def cancelled_stream():
        yield "first"
        raise asyncio.CancelledError()

    service = make_service()
    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")
    chat_stream.chunks = cancelled_stream()

    with pytest.raises(asyncio.CancelledError):
        await drain(service, chat_stream)
    assert not chat_stream.turn.completed


def test_format_stream_part():
    assert format_stream_part("chat.chunk", {"content": 'say "hi"\n'}) == '0:"say \\"hi\\"\\n"\n'
    assert format_stream_part("chat.error", {"error": "boom"}) == '3:"boom"\n'
    assert format_stream_part("chat.complete", {"finish_reason": "stop"}) == 'd:{"finishReason":"stop"}\n'


async def test_remember_swallows_memory_failure():
    memory = FakeMemoryService(error=RuntimeError("mem0 unavailable"))
    service = make_service(memory_service=memory)

    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")
    await drain(service, chat_stream)

    assert await service.remember(chat_stream.turn) is False
    assert len(memory.calls) == 1


async def test_greeting_reply_is_the_synthesized_assistant_turn(monkeypatch):
    monkeypatch.setattr(
        "teachback.services.chat.pick_greeting_response", lambda: "Hi from the test!"
    )
    service = make_service()

    chat_stream = await service.start_chat(messages=[user("hey there")], user_id="u1")
    events = await drain(service, chat_stream)

    assert events[0] == ("chat.chunk", {"content": "Hi from the test!"})
    assert chat_stream.turn.response == "Hi from the test!"


async def test_stored_prompt_read_does_not_hold_a_transaction(db_session):
    streamer = FakeCompletionStreamer(chunks=["one", "two"])
    service = make_service(
        completion_streamer=streamer,
        prompt_config_service=PromptConfigService(PromptConfigRepository(db_session)),
    )

    chat_stream = await service.start_chat(messages=[user("What is X?")], user_id="u1")

    assert not db_session.in_transaction()
    async for _ in service.stream_events(chat_stream):
        assert not db_session.in_transaction()
