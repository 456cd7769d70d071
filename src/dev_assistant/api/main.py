"""FastAPI entrypoint for message, trace and metrics endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

import httpx
import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from dev_assistant.agent.capabilities import register_builtin_capabilities
from dev_assistant.agent.chat import create_chat_responder
from dev_assistant.agent.dispatcher import MessageDispatcher
from dev_assistant.agent.registry import CapabilityRegistry
from dev_assistant.config import Settings
from dev_assistant.obs.logging import configure_logging
from dev_assistant.obs.tracing import TraceStore
from dev_assistant.services.git import GitClient
from dev_assistant.services.llm import create_llm
from dev_assistant.types import Attachment, IncomingMessage
from dev_assistant.ui.cards import CARD_CONTENT_TYPE

logger = structlog.get_logger(__name__)


class AttachmentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = "file"
    content_url: str | None = Field(default=None, alias="contentUrl")
    content_type: str | None = Field(default=None, alias="contentType")


class MessageRequest(BaseModel):
    text: str = ""
    attachments: list[AttachmentPayload] = Field(default_factory=list)
    value: dict[str, Any] | None = None

    def to_message(self) -> IncomingMessage:
        return IncomingMessage(
            text=self.text,
            attachments=[
                Attachment(name=item.name, content_url=item.content_url, content_type=item.content_type)
                for item in self.attachments
            ],
            value=self.value,
        )


def create_app(
    settings: Settings | None = None,
    *,
    llm: Any | None = None,
    git: GitClient | None = None,
    client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the app from one explicit settings object.

    `llm`, `git` and `client` replace the hosted model, the git wrapper and
    the outbound HTTP client; tests pass fakes here.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)
    llm = llm if llm is not None else create_llm(settings)

    registry = CapabilityRegistry()
    register_builtin_capabilities(registry, settings, llm=llm, git=git, client=client)
    trace_store = TraceStore()
    dispatcher = MessageDispatcher(
        settings=settings,
        registry=registry,
        trace_store=trace_store,
        chat=create_chat_responder(llm),
        client=client,
    )

    app = FastAPI(title="Dev Assistant", version="0.1.0")
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.state.trace_store = trace_store

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "llm_configured": llm is not None,
            "search_configured": bool(settings.bing_search_api_key),
            "moderation_enabled": settings.enable_moderation,
            "code_review_enabled": settings.enable_code_review,
            "capabilities": [spec.name.value for spec in registry.specs()],
        }

    @app.post("/api/messages")
    async def messages(request: MessageRequest) -> dict[str, Any]:
        try:
            outcome = await dispatcher.handle(request.to_message())
        except Exception as exc:
            logger.exception("message_dispatch_failed")
            raise HTTPException(status_code=500, detail="Message handling failed.") from exc

        reply = outcome.reply
        attachments = (
            [{"contentType": CARD_CONTENT_TYPE, "content": reply.card}] if reply.card else []
        )
        return {
            "type": "message",
            "text": reply.text,
            "attachments": attachments,
            "intent": outcome.intent,
            "trace_id": outcome.trace_id,
        }

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in trace_store.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return trace_store.summary()

    return app


app = create_app()
