"""Capability registry built on Pydantic v2 models."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from dev_assistant.agent.intent import Intent
from dev_assistant.obs.tracing import Timer
from dev_assistant.types import CapabilityTrace, Reply


class CommandInput(BaseModel):
    """Validated command passed to a capability handler.

    `argument` is the message text with the command keyword removed.
    """

    text: str
    argument: str = ""


class CapabilitySpec(BaseModel):
    """Declarative capability specification for registration and dispatch."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: Intent
    description: str
    handler: Callable[[CommandInput], Awaitable[Reply]]
    command_prefix: str | None = None
    tags: list[str] = Field(default_factory=list)

    def parse(self, text: str) -> CommandInput:
        argument = text.strip()
        if self.command_prefix:
            argument = re.sub(self.command_prefix, "", argument, count=1, flags=re.IGNORECASE).strip()
        return CommandInput(text=text, argument=argument)

    async def invoke(self, text: str) -> Reply:
        return await self.handler(self.parse(text))


class CapabilityRegistry:
    """Stores capability specs keyed by the intent they serve."""

    def __init__(self) -> None:
        self._capabilities: dict[Intent, CapabilitySpec] = {}
        self._observer: Callable[[CapabilityTrace], None] | None = None

    def register(self, spec: CapabilitySpec) -> None:
        if spec.name in self._capabilities:
            raise ValueError(f"Capability already registered: {spec.name.value}")
        self._capabilities[spec.name] = spec

    def set_observer(self, observer: Callable[[CapabilityTrace], None] | None) -> None:
        """Set an optional callback invoked after each capability execution."""
        self._observer = observer

    def get(self, name: Intent) -> CapabilitySpec | None:
        return self._capabilities.get(name)

    def specs(self) -> list[CapabilitySpec]:
        return list(self._capabilities.values())

    async def execute(
        self,
        name: Intent,
        text: str,
        *,
        observer: Callable[[CapabilityTrace], None] | None = None,
    ) -> Reply:
        """Run a capability; `observer` overrides the registry-wide observer."""
        spec = self._capabilities.get(name)
        if spec is None:
            raise KeyError(f"Unknown capability: {name.value}")

        with Timer() as timer:
            reply = await spec.invoke(text)

        notify = observer or self._observer
        if notify is not None:
            notify(
                CapabilityTrace(
                    name=spec.name.value,
                    command=text,
                    output_preview=(reply.text or _card_title(reply))[:320],
                    latency_ms=timer.elapsed_ms,
                )
            )
        return reply


def _card_title(reply: Reply) -> str:
    if not reply.card:
        return ""
    for block in reply.card.get("body", []):
        if block.get("type") == "TextBlock":
            return str(block.get("text", ""))
    return ""
