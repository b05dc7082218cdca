"""Prompts and message assembly for teach-back conversations."""

from typing import List, Optional, Sequence

from teachback.schemas.chat import ChatMessage

# Default system prompt, used when neither the request nor the admin settings provide one
DEFAULT_SYSTEM_PROMPT = (
    "You are a specialized assistant with the following guidelines:\n\n"
    "1. Conversational Approach:\n"
    "   - Maintain a friendly and natural dialog flow\n"
    "   - Use a warm, approachable tone\n"
    "   - Show genuine interest in user questions\n"
    "   - Engage in a way that encourages continued conversation\n\n"
    "2. Content Restrictions:\n"
    "   - Base all responses strictly on the provided context and conversation history\n"
    "   - Do not use any external knowledge\n"
    "   - Avoid making assumptions beyond what is explicitly stated\n"
    "   - Format numerical data and statistics exactly as they appear in the context\n\n"
    "3. Response Guidelines:\n"
    "   - When information is available: Provide accurate answers while maintaining a conversational tone\n"
    "   - When information is missing: Say \"I wish I could help with that, but I don't have enough "
    "information in the provided documentation to answer your question. Is there something else "
    "you'd like to know about?\"\n"
    "   - For follow-up questions: Verify that previous responses were based on documented content\n\n"
    "4. Quality Standards:\n"
    "   - Ensure accuracy while remaining approachable\n"
    "   - Balance professionalism with conversational friendliness\n"
    "   - Maintain consistency in information provided\n"
    "   - Keep responses clear and engaging"
)

DOCUMENTATION_CONTEXT_SECTION = "\n\nDocumentation Context: {context}"

GREETING_RESPONSES = (
    "👋 Hello! How can I assist you today?",
    "Hi there! 😊 What can I help you with?",
    "👋 Hey! Ready to help you with any questions!",
    "Hello! 🌟 How may I be of assistance?",
    "Hi! 😃 Looking forward to helping you today!",
)


def resolve_base_prompt(custom_prompt: Optional[str] = None) -> str:
    """Return the custom prompt, or the built-in default when it is blank."""
    if custom_prompt and custom_prompt.strip():
        return custom_prompt
    return DEFAULT_SYSTEM_PROMPT


def build_system_prompt(base_prompt: str, context: str) -> str:
    """
    Append the retrieved documentation to the system prompt.

    The block is appended even when ``context`` is empty: the base prompt's
    "not enough information" instruction then lets the model report it.

    Args:
        base_prompt: Resolved system prompt text
        context: Retrieved snippets joined by blank lines, possibly empty

    Returns:
        Complete system prompt string.
    """
    return base_prompt + DOCUMENTATION_CONTEXT_SECTION.format(context=context)


def build_messages(
    system_prompt: str,
    prior_turns: Sequence[ChatMessage],
    query: str,
) -> List[ChatMessage]:
    """
    Build the message list sent to the chat model.

    Order is [system, *prior turns, user]. System-role entries in the prior
    turns are dropped so the list holds exactly one system message.
    """
    messages = [ChatMessage(role="system", content=system_prompt)]
    messages.extend(
        ChatMessage(role=turn.role, content=turn.content)
        for turn in prior_turns
        if turn.role != "system"
    )
    messages.append(ChatMessage(role="user", content=query))
    return messages


def build_greeting_messages(
    base_prompt: str,
    prior_turns: Sequence[ChatMessage],
    query: str,
    greeting: str,
) -> List[ChatMessage]:
    """Greeting path: no documentation context, plus the canned assistant reply."""
    messages = build_messages(base_prompt, prior_turns, query)
    messages.append(ChatMessage(role="assistant", content=greeting))
    return messages
