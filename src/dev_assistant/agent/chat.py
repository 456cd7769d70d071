"""Conversational fallback for messages that match no command."""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from dev_assistant.services.llm import message_text
from dev_assistant.types import Reply

logger = structlog.get_logger(__name__)

_SYSTEM_PROMPT = """
You are a developer assistant in a team chat.

Rules:
1) Answer concisely and accurately.
2) Prefer concrete, runnable examples when the question is about code.
3) If you are unsure, say so instead of guessing.
4) Mention the `help` command when the user seems to be looking for a feature.
""".strip()

UNAVAILABLE_REPLY = (
    "The language model is not configured, so I can only run commands. "
    "Type `help` to see what I can do."
)
FAILURE_REPLY = "Sorry, I couldn't reach the language model right now. Please try again later."


class ChatResponder(Protocol):
    async def respond(self, text: str, *, chat_history: list[Any] | None = None) -> Reply: ...


class LlmChatResponder:
    """Default chat handler backed by the hosted model."""

    def __init__(self, llm: Any) -> None:
        self.llm = llm
        prompt = ChatPromptTemplate.from_messages(
            [
                ("system", _SYSTEM_PROMPT),
                MessagesPlaceholder(variable_name="chat_history", optional=True),
                ("human", "{input}"),
            ]
        )
        self.chain = prompt | llm

    async def respond(self, text: str, *, chat_history: list[Any] | None = None) -> Reply:
        try:
            result = await self.chain.ainvoke({"input": text, "chat_history": chat_history or []})
        except Exception as exc:
            logger.error("chat_completion_failed", error=str(exc))
            return Reply(text=FAILURE_REPLY)
        return Reply(text=message_text(result).strip())


class StaticChatResponder:
    """Chat handler used when no model credential is configured."""

    async def respond(self, text: str, *, chat_history: list[Any] | None = None) -> Reply:
        del text, chat_history  # nothing to generate without a model.
        return Reply(text=UNAVAILABLE_REPLY)


def create_chat_responder(llm: Any) -> ChatResponder:
    return LlmChatResponder(llm) if llm is not None else StaticChatResponder()
