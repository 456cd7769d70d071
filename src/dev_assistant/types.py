"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Attachment:
    """A file attached to an inbound chat message."""

    name: str
    content_url: str | None = None
    content_type: str | None = None


@dataclass(slots=True)
class IncomingMessage:
    """An inbound chat message as delivered by the transport.

    `value` carries the payload of a card button submission; its `command`
    key is used when the message has no text.
    """

    text: str = ""
    attachments: list[Attachment] = field(default_factory=list)
    value: dict[str, Any] | None = None

    @property
    def command_text(self) -> str:
        if self.text.strip():
            return self.text
        if self.value and isinstance(self.value.get("command"), str):
            return self.value["command"]
        return self.text


@dataclass(slots=True)
class ModerationResult:
    flagged: bool
    reasons: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AttachmentExtractionResult:
    source_name: str
    extracted_text: str


@dataclass(slots=True)
class SearchResult:
    """One web search hit, in the order returned by the search API."""

    title: str
    url: str
    snippet: str


@dataclass(slots=True)
class CodeReviewResult:
    summary: str
    suggestions: list[str]
    score: int
    issues: list[str]


@dataclass(slots=True)
class LintIssue:
    line: int
    column: int
    severity: str
    message: str
    rule: str | None = None


@dataclass(slots=True)
class CodeMetrics:
    lines: int
    functions: int
    complexity: int


@dataclass(slots=True)
class CodeAnalysisResult:
    file_path: str
    issues: list[LintIssue]
    metrics: CodeMetrics


@dataclass(slots=True)
class FileStatus:
    path: str
    status: str
    staged: bool


@dataclass(slots=True)
class SourceControlStatus:
    current_branch: str
    files: list[FileStatus]
    ahead: int
    behind: int


@dataclass(slots=True)
class CommitInfo:
    hash: str
    message: str
    author: str
    date: str


@dataclass(slots=True)
class ProjectMetrics:
    total_files: int = 0
    total_lines: int = 0
    language_counts: dict[str, int] = field(default_factory=dict)
    last_commit_summary: str = ""
    contributors: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class Environment:
    name: str
    variables: dict[str, str]
    is_active: bool


@dataclass(slots=True)
class Reply:
    """One outbound reply: plain text, an adaptive card, or both."""

    text: str | None = None
    card: dict[str, Any] | None = None


@dataclass(slots=True)
class CapabilityTrace:
    """Trace record for an executed capability call."""

    name: str
    command: str
    output_preview: str
    latency_ms: float
