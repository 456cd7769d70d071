"""Hosted chat-model construction and completion helpers."""

from __future__ import annotations

from typing import Any

import structlog

from dev_assistant.config import Settings
from dev_assistant.errors import ExternalServiceError

logger = structlog.get_logger(__name__)


def create_llm(settings: Settings, *, temperature: float = 0.3) -> Any:
    """Build the Azure-hosted chat model, or return None without credentials."""
    if not settings.azure_openai_api_key:
        return None

    from langchain_openai import AzureChatOpenAI

    return AzureChatOpenAI(
        api_key=settings.azure_openai_api_key,
        azure_endpoint=settings.azure_openai_endpoint,
        azure_deployment=settings.azure_openai_deployment_name,
        api_version=settings.azure_openai_api_version,
        temperature=temperature,
    )


async def complete(llm: Any, prompt: str) -> str:
    """Send a single user prompt and return the completion text."""
    try:
        response = await llm.ainvoke([{"role": "user", "content": prompt}])
    except Exception as exc:
        raise ExternalServiceError(f"chat completion failed: {exc}") from exc
    return message_text(response)


async def summarize_text(llm: Any, content: str) -> str:
    if llm is None:
        return "Summarization unavailable - missing API key"
    try:
        return (await complete(llm, f"Summarize this:\n{content}")).strip()
    except ExternalServiceError as exc:
        logger.error("summarization_failed", error=str(exc))
        return "Summarization failed"


def message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)
