"""Message dispatcher: moderation -> attachments | intent -> capability -> reply."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import httpx
import structlog

from dev_assistant.agent.chat import ChatResponder, StaticChatResponder
from dev_assistant.agent.intent import Intent, classify
from dev_assistant.agent.registry import CapabilityRegistry
from dev_assistant.config import Settings
from dev_assistant.ingest.attachments import AttachmentProcessor, format_attachment_reply
from dev_assistant.obs.tracing import Timer, TraceStore
from dev_assistant.services.moderation import blocked_message, moderate
from dev_assistant.types import CapabilityTrace, IncomingMessage, Reply

logger = structlog.get_logger(__name__)

# Labels recorded for messages that never reach classification.
BLOCKED_LABEL = "blocked"
ATTACHMENTS_LABEL = "attachments"


@dataclass(slots=True)
class DispatchOutcome:
    reply: Reply
    intent: str
    trace_id: str


class MessageDispatcher:
    """Handles one inbound message to completion and produces one reply.

    Order is fixed: the moderation gate runs first and can end the turn;
    attachments, when present, are summarized instead of classifying the
    text; otherwise the classified intent selects a registered capability,
    with `CHAT` going to the conversational responder.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        registry: CapabilityRegistry,
        trace_store: TraceStore,
        chat: ChatResponder | None = None,
        attachments: AttachmentProcessor | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.trace_store = trace_store
        self.chat = chat or StaticChatResponder()
        self.attachments = attachments or AttachmentProcessor(settings, client=client)
        self.client = client

    async def handle(self, message: IncomingMessage) -> DispatchOutcome:
        text = message.command_text
        observed: list[CapabilityTrace] = []
        flagged = False

        with Timer() as timer:
            moderation = await moderate(text, self.settings, client=self.client)
            if moderation.flagged:
                flagged = True
                label = BLOCKED_LABEL
                reply = Reply(text=blocked_message(moderation))
            elif message.attachments:
                label = ATTACHMENTS_LABEL
                extracted = await self.attachments.process(message.attachments)
                reply = Reply(text=format_attachment_reply(extracted))
            else:
                intent = classify(text)
                label = intent.value
                reply = await self._dispatch(intent, text, observed.append)

        record = self.trace_store.create_record(
            text=text,
            intent=label,
            flagged=flagged,
            attachment_count=len(message.attachments),
            capability_traces=observed,
            reply_preview=reply.text or "",
            latency_ms=timer.elapsed_ms,
        )
        logger.info(
            "message_handled",
            intent=label,
            trace_id=record.trace_id,
            latency_ms=round(record.latency_ms, 2),
        )
        return DispatchOutcome(reply=reply, intent=label, trace_id=record.trace_id)

    async def _dispatch(
        self,
        intent: Intent,
        text: str,
        observer: Callable[[CapabilityTrace], None],
    ) -> Reply:
        if intent is Intent.CHAT or self.registry.get(intent) is None:
            return await self.chat.respond(text)
        return await self.registry.execute(intent, text, observer=observer)
