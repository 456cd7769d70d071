"""Attachment pipeline: download -> temp file -> extract -> truncate."""

from __future__ import annotations

import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path

import httpx
import structlog

from dev_assistant.config import Settings
from dev_assistant.errors import AttachmentError
from dev_assistant.ingest.extractor import UNSUPPORTED_MARKER, ExtractorRegistry
from dev_assistant.services.http import client_scope
from dev_assistant.types import Attachment, AttachmentExtractionResult

logger = structlog.get_logger(__name__)

MAX_ATTACHMENT_CHARS = 4000
ERROR_MARKER = "[Error processing attachment]"
ATTACHMENT_SEPARATOR = "\n---\n"


@contextmanager
def temporary_file(data: bytes, name: str) -> Iterator[Path]:
    """Write `data` to a uniquely named temp file, removed on every exit path."""
    safe_name = Path(name).name or "file"
    path = Path(tempfile.gettempdir()) / f"{uuid.uuid4()}-{safe_name}"
    try:
        path.write_bytes(data)
        yield path
    finally:
        with suppress(OSError):
            path.unlink()


class AttachmentProcessor:
    """Turns message attachments into bounded text snippets.

    Each attachment is handled in isolation: a failure produces
    `ERROR_MARKER` for that attachment only.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        registry: ExtractorRegistry | None = None,
        client: httpx.AsyncClient | None = None,
        max_chars: int = MAX_ATTACHMENT_CHARS,
    ) -> None:
        self.settings = settings
        self.registry = registry or ExtractorRegistry()
        self.client = client
        self.max_chars = max_chars

    async def process(self, attachments: list[Attachment]) -> list[AttachmentExtractionResult]:
        results: list[AttachmentExtractionResult] = []
        for attachment in attachments:
            try:
                text = await self.extract(attachment)
            except Exception as exc:
                logger.warning("attachment_failed", attachment=attachment.name, error=str(exc))
                text = ERROR_MARKER
            results.append(
                AttachmentExtractionResult(
                    source_name=attachment.name,
                    extracted_text=text[: self.max_chars],
                )
            )
        return results

    async def extract(self, attachment: Attachment) -> str:
        if not attachment.content_url:
            return ""
        if not self.registry.supports(attachment.name):
            return f"File: {attachment.name}\n{UNSUPPORTED_MARKER}"

        data = await self._download(attachment.content_url)
        with temporary_file(data, attachment.name) as path:
            content = self.registry.extract(path, name=attachment.name)
        return f"File: {attachment.name}\n{content}"

    async def _download(self, url: str) -> bytes:
        limit = self.settings.max_attachment_bytes
        body = bytearray()
        async with client_scope(self.client) as http:
            async with http.stream("GET", url, follow_redirects=True) as response:
                response.raise_for_status()
                declared = response.headers.get("Content-Length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise self._too_large()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise self._too_large()
        return bytes(body)

    def _too_large(self) -> AttachmentError:
        return AttachmentError(f"attachment exceeds {self.settings.file_max_size_mb} MB limit")


def format_attachment_reply(results: list[AttachmentExtractionResult]) -> str:
    snippets = ATTACHMENT_SEPARATOR.join(result.extracted_text for result in results)
    return f"Processed {len(results)} file(s). Content snippet(s):\n\n{snippets}"
