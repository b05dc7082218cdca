import pytest

from teachback.prompts.chat import GREETING_RESPONSES
from teachback.services.greeting import is_greeting, pick_greeting_response


@pytest.mark.parametrize(
    "query",
    ["hi", "Hello there", "  hey  ", "Good morning everyone", "how are you?", "sup", "Bonjour", "GREETINGS"],
)
def test_greetings_are_detected(query):
    assert is_greeting(query)


@pytest.mark.parametrize(
    "query",
    [
        "history of the product",
        "which greeting should I use?",
        "hiking safety tips",
        "What is the refund policy?",
        "",
    ],
)
def test_non_greetings_are_not_detected(query):
    assert not is_greeting(query)


def test_pick_greeting_response_returns_canned_reply():
    for _ in range(20):
        assert pick_greeting_response() in GREETING_RESPONSES
