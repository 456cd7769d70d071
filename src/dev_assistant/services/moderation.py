"""Pre-dispatch moderation gate."""

from __future__ import annotations

import httpx
import structlog

from dev_assistant.config import Settings
from dev_assistant.services.http import client_scope
from dev_assistant.types import ModerationResult

logger = structlog.get_logger(__name__)

BANNED_KEYWORDS = ("hate", "terror", "bomb")
MODERATION_MODEL = "omni-moderation-latest"


async def moderate(
    text: str,
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> ModerationResult:
    """Classify `text` as flagged or not.

    Keyword hits short-circuit the hosted check. A failing hosted call is
    logged and treated as unflagged.
    """
    if not settings.enable_moderation:
        return ModerationResult(flagged=False, reasons=[])

    lowered = text.lower()
    if any(word in lowered for word in BANNED_KEYWORDS):
        return ModerationResult(flagged=True, reasons=["keyword"])

    if not settings.openai_moderation_key:
        return ModerationResult(flagged=False, reasons=[])

    try:
        async with client_scope(client) as http:
            response = await http.post(
                settings.moderation_endpoint,
                json={"input": text, "model": MODERATION_MODEL},
                headers={"Authorization": f"Bearer {settings.openai_moderation_key}"},
            )
            response.raise_for_status()
            return _parse_moderation(response.json())
    except (httpx.HTTPError, ValueError, AttributeError, TypeError) as exc:
        logger.warning("moderation_api_failed", error=str(exc))
        return ModerationResult(flagged=False, reasons=[])


def _parse_moderation(payload: dict) -> ModerationResult:
    first = (payload.get("results") or [{}])[0]
    if first.get("flagged"):
        categories = first.get("categories") or {}
        reasons = [name for name, hit in categories.items() if hit]
        return ModerationResult(flagged=True, reasons=reasons)
    return ModerationResult(flagged=False, reasons=[])


def blocked_message(result: ModerationResult) -> str:
    text = "⚠️ Your message was blocked by safety guardrails."
    if result.reasons:
        text += f" Reasons: {', '.join(result.reasons)}"
    return text
