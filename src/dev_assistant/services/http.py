"""Shared httpx client scoping for outbound service calls."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

USER_AGENT = "dev-assistant/0.1"


@asynccontextmanager
async def client_scope(client: httpx.AsyncClient | None = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(headers={"User-Agent": USER_AGENT}) as owned:
        yield owned
