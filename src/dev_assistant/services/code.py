"""Code review, generation and static analysis services."""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Any

import structlog
from pyflakes.api import check as pyflakes_check
from pyflakes.reporter import Reporter

from dev_assistant.errors import ExternalServiceError
from dev_assistant.services.llm import complete
from dev_assistant.types import CodeAnalysisResult, CodeMetrics, CodeReviewResult, LintIssue

logger = structlog.get_logger(__name__)

DEFAULT_LANGUAGE = "python"
DEFAULT_SCORE = 5
MAX_ANALYZED_FILES = 3
EXCLUDED_DIRS = frozenset({".git", "node_modules", "__pycache__", ".venv", "venv"})

COMPLEXITY_KEYWORDS = ("if", "else", "for", "while", "switch", "catch", "&&", "||")
_FUNCTION_PATTERN = re.compile(r"\bdef\b|\blambda\b|\bfunction\b|=>")
_SCORE_PATTERN = re.compile(r"(?:score|rating):\s*(\d+)", flags=re.IGNORECASE)
_BULLET_PATTERN = re.compile(r"^[-*]\s")
_ISSUE_WORDS = ("bug", "error", "issue")

_REVIEW_PROMPT = """Review this {language} code for:
- Code quality and best practices
- Potential bugs and security issues
- Performance optimizations
- Maintainability improvements

Rate 1-10 and provide specific suggestions:

```{language}
{code}
```"""

_GENERATE_PROMPT = """Generate clean, well-documented {language} code for the following requirements:

{requirements}

Requirements:
- Use idiomatic {language}
- Include type annotations and docstrings
- Follow best practices
- Include error handling where appropriate
- Make it production-ready"""


async def review_code(code: str, llm: Any, *, language: str = DEFAULT_LANGUAGE) -> CodeReviewResult:
    """Ask the hosted model for a review and parse its prose reply."""
    if llm is None:
        return CodeReviewResult(
            summary="AI code review unavailable - missing API key",
            suggestions=[],
            score=DEFAULT_SCORE,
            issues=[],
        )

    prompt = _REVIEW_PROMPT.format(language=language, code=code)
    try:
        content = await complete(llm, prompt)
    except ExternalServiceError as exc:
        logger.error("code_review_failed", error=str(exc))
        return CodeReviewResult(
            summary="Code review failed",
            suggestions=[],
            score=DEFAULT_SCORE,
            issues=[],
        )
    return parse_review(content)


def parse_review(content: str) -> CodeReviewResult:
    """Split a free-text review into summary, suggestions, issues and score.

    The score is taken verbatim from the first `score:` / `rating:` token and
    is not clamped to 1-10.
    """
    match = _SCORE_PATTERN.search(content)
    score = int(match.group(1)) if match else DEFAULT_SCORE

    suggestions: list[str] = []
    issues: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not _BULLET_PATTERN.match(line):
            continue
        item = line[2:].strip()
        if any(word in line.lower() for word in _ISSUE_WORDS):
            issues.append(item)
        else:
            suggestions.append(item)

    summary = next((line.strip() for line in content.splitlines() if line.strip()), "")
    return CodeReviewResult(
        summary=summary or "Code reviewed successfully",
        suggestions=suggestions,
        score=score,
        issues=issues,
    )


async def generate_code(requirements: str, llm: Any, *, language: str = DEFAULT_LANGUAGE) -> str:
    if llm is None:
        return "# Code generation unavailable - missing API key"

    prompt = _GENERATE_PROMPT.format(language=language, requirements=requirements)
    try:
        return await complete(llm, prompt)
    except ExternalServiceError as exc:
        logger.error("code_generation_failed", error=str(exc))
        return "# Code generation failed"


async def analyze_code(file_path: str | Path) -> CodeAnalysisResult:
    """Lint one file and compute line/function/complexity heuristics."""
    path = Path(file_path)
    content = path.read_text(encoding="utf-8", errors="replace")
    issues = lint_source(content, str(path)) if path.suffix == ".py" else []
    return CodeAnalysisResult(
        file_path=str(path),
        issues=issues,
        metrics=CodeMetrics(
            lines=content.count("\n") + 1,
            functions=len(_FUNCTION_PATTERN.findall(content)),
            complexity=calculate_complexity(content),
        ),
    )


def calculate_complexity(code: str) -> int:
    return 1 + sum(code.count(keyword) for keyword in COMPLEXITY_KEYWORDS)


def lint_source(source: str, filename: str) -> list[LintIssue]:
    reporter = _CollectingReporter()
    pyflakes_check(source, filename, reporter)
    return reporter.issues


async def find_project_files(pattern: str, root: str | Path) -> list[str]:
    """Resolve a glob against the project root; `[]` on any error."""
    base = Path(root)
    try:
        matches = [
            path.relative_to(base).as_posix()
            for path in base.glob(pattern)
            if path.is_file() and not EXCLUDED_DIRS.intersection(path.relative_to(base).parts)
        ]
    except (ValueError, NotImplementedError, OSError) as exc:
        logger.error("file_search_failed", pattern=pattern, error=str(exc))
        return []
    return sorted(matches)


class _CollectingReporter(Reporter):
    """pyflakes reporter that keeps findings instead of printing them."""

    def __init__(self) -> None:
        super().__init__(io.StringIO(), io.StringIO())
        self.issues: list[LintIssue] = []

    def unexpectedError(self, filename: str, msg: str) -> None:
        self.issues.append(LintIssue(line=1, column=1, severity="error", message=str(msg)))

    def syntaxError(self, filename: str, msg: str, lineno: int, offset: int | None, text: str | None) -> None:
        self.issues.append(
            LintIssue(
                line=lineno or 1,
                column=offset or 1,
                severity="error",
                message=msg,
                rule="SyntaxError",
            )
        )

    def flake(self, message: Any) -> None:
        self.issues.append(
            LintIssue(
                line=message.lineno,
                column=message.col + 1,
                severity="warning",
                message=message.message % message.message_args,
                rule=type(message).__name__,
            )
        )
