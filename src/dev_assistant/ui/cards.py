"""Adaptive Card payload builders.

Cards are pure functions of a result object. Their buttons are
`Action.Submit` actions whose `command` is fed back into the dispatcher as
if the user had typed it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from dev_assistant.types import (
    CodeAnalysisResult,
    CodeReviewResult,
    CommitInfo,
    Environment,
    ProjectMetrics,
    SourceControlStatus,
)

CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"
CARD_VERSION = "1.5"
MAX_LISTED_ITEMS = 10

HELP_ACTIONS = [("Help", "help"), ("Search docs", "search Teams AI library")]
CODE_ACTIONS = [("Analyze code", "analyze **/*.py"), ("Git status", "git status"), ("Help", "help")]
REPO_ACTIONS = [("Commit all", "commit Update from assistant"), ("Project dashboard", "project"), ("Help", "help")]
PROJECT_ACTIONS = [("Git status", "git status"), ("Analyze code", "analyze **/*.py"), ("Environments", "env")]
DEPLOY_ACTIONS = [("Environments", "env"), ("Project dashboard", "project"), ("Git status", "git status")]


def text_block(text: str, **style: Any) -> dict[str, Any]:
    return {"type": "TextBlock", "text": text, "wrap": True, **style}


def fact_set(facts: list[tuple[str, str]]) -> dict[str, Any]:
    return {"type": "FactSet", "facts": [{"title": title, "value": value} for title, value in facts]}


def column_set(columns: list[tuple[str, str]]) -> dict[str, Any]:
    """One column per (label, value) pair, label on top."""
    return {
        "type": "ColumnSet",
        "columns": [
            {
                "type": "Column",
                "width": "stretch",
                "items": [
                    text_block(label, isSubtle=True, size="Small"),
                    text_block(value, weight="Bolder", size="Large"),
                ],
            }
            for label, value in columns
        ],
    }


def submit_action(title: str, command: str) -> dict[str, Any]:
    return {"type": "Action.Submit", "title": title, "data": {"command": command}}


def build_card(
    title: str,
    body: list[dict[str, Any]],
    actions: list[tuple[str, str]],
) -> dict[str, Any]:
    return {
        "type": "AdaptiveCard",
        "version": CARD_VERSION,
        "body": [{"type": "TextBlock", "text": title, "weight": "Bolder", "size": "Medium"}, *body],
        "actions": [submit_action(label, command) for label, command in actions],
        "$schema": CARD_SCHEMA,
    }


def topic_card(topic: str) -> dict[str, Any]:
    return build_card("Generated Card", [text_block(f"Topic: {topic}")], HELP_ACTIONS)


def code_review_card(result: CodeReviewResult) -> dict[str, Any]:
    body = [
        column_set([("Score", f"{result.score}/10"), ("Issues", str(len(result.issues)))]),
        text_block(result.summary),
    ]
    if result.issues:
        body.append(text_block("Issues", weight="Bolder"))
        body.append(text_block(_bullets(result.issues)))
    if result.suggestions:
        body.append(text_block("Suggestions", weight="Bolder"))
        body.append(text_block(_bullets(result.suggestions)))
    return build_card("Code Review", body, CODE_ACTIONS)


def code_analysis_card(pattern: str, results: list[CodeAnalysisResult], matched: int) -> dict[str, Any]:
    body = [text_block(f"Pattern `{pattern}` matched {matched} file(s); analyzed {len(results)}.")]
    for result in results:
        metrics = result.metrics
        body.append(text_block(result.file_path, weight="Bolder"))
        body.append(
            fact_set(
                [
                    ("Lines", str(metrics.lines)),
                    ("Functions", str(metrics.functions)),
                    ("Complexity", str(metrics.complexity)),
                    ("Issues", str(len(result.issues))),
                ]
            )
        )
        if result.issues:
            body.append(
                text_block(
                    _bullets(
                        f"L{issue.line}:{issue.column} [{issue.severity}] {issue.message}"
                        for issue in result.issues[:MAX_LISTED_ITEMS]
                    )
                )
            )
    return build_card("Code Analysis", body, CODE_ACTIONS)


def git_status_card(status: SourceControlStatus) -> dict[str, Any]:
    body = [
        column_set(
            [
                ("Branch", status.current_branch),
                ("Ahead", str(status.ahead)),
                ("Behind", str(status.behind)),
            ]
        )
    ]
    if status.files:
        body.append(
            text_block(
                _bullets(
                    f"{file.status.strip() or '?'} {file.path}{' (staged)' if file.staged else ''}"
                    for file in status.files[:MAX_LISTED_ITEMS]
                )
            )
        )
        if len(status.files) > MAX_LISTED_ITEMS:
            body.append(text_block(f"...and {len(status.files) - MAX_LISTED_ITEMS} more", isSubtle=True))
    else:
        body.append(text_block("Working tree clean."))
    return build_card("Git Status", body, REPO_ACTIONS)


def project_dashboard_card(metrics: ProjectMetrics) -> dict[str, Any]:
    languages = ", ".join(
        f"{ext} ({count})"
        for ext, count in sorted(metrics.language_counts.items(), key=lambda item: -item[1])
    )
    body = [
        column_set(
            [
                ("Files", str(metrics.total_files)),
                ("Lines", str(metrics.total_lines)),
                ("Contributors", str(len(metrics.contributors))),
            ]
        ),
        fact_set(
            [
                ("Languages", languages or "none"),
                ("Last commit", metrics.last_commit_summary or "n/a"),
                ("Dependencies", str(len(metrics.dependencies))),
                ("Dev dependencies", str(len(metrics.dev_dependencies))),
            ]
        ),
    ]
    return build_card("Project Dashboard", body, PROJECT_ACTIONS)


def environments_card(environments: list[Environment]) -> dict[str, Any]:
    return build_card("Environments", _environment_blocks(environments), DEPLOY_ACTIONS)


def deployment_card(environments: list[Environment], commits: list[CommitInfo]) -> dict[str, Any]:
    body = _environment_blocks(environments)
    body.append(text_block("Recent commits", weight="Bolder"))
    if commits:
        body.append(
            text_block(_bullets(f"{commit.hash} {commit.message} ({commit.author})" for commit in commits))
        )
    else:
        body.append(text_block("No commit history available."))
    return build_card("Deployment Overview", body, DEPLOY_ACTIONS)


def _environment_blocks(environments: list[Environment]) -> list[dict[str, Any]]:
    if not environments:
        return [text_block("No environments found under env/.")]
    return [
        fact_set(
            [
                (
                    f"{env.name}{' (active)' if env.is_active else ''}",
                    f"{len(env.variables)} variable(s)",
                )
                for env in environments
            ]
        )
    ]


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)
