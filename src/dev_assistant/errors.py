"""Exception types raised inside services and caught at capability boundaries."""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for assistant errors."""


class ExternalServiceError(AssistantError):
    """A hosted service call (model, search, moderation) failed."""


class SourceControlError(AssistantError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.command = args
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git {' '.join(args)} failed ({returncode}): {stderr.strip()}")


class AttachmentError(AssistantError):
    """An attachment could not be downloaded or exceeded the size cap."""
