"""Greeting detection for short-circuiting the retrieval path."""

import random
import re

from teachback.prompts.chat import GREETING_RESPONSES

GREETING_PATTERNS = (
    re.compile(
        r"^(hi|hello|hey|good morning|good afternoon|good evening|greetings)(\s|$)",
        re.IGNORECASE,
    ),
    re.compile(r"^(how are you|what's up|wassup|sup)(\?|\s|$)", re.IGNORECASE),
    re.compile(r"^(hola|bonjour|hallo|ciao)(\s|$)", re.IGNORECASE),
)


def is_greeting(query: str) -> bool:
    """Return True when the utterance opens with a known greeting."""
    normalized = query.strip().lower()
    return any(pattern.search(normalized) for pattern in GREETING_PATTERNS)


def pick_greeting_response() -> str:
    """Pick one of the canned greeting replies uniformly at random."""
    return random.choice(GREETING_RESPONSES)
