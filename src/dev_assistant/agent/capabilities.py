"""Built-in capability handlers for the dispatcher."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import httpx
import structlog

from dev_assistant.agent.intent import Intent
from dev_assistant.agent.registry import CapabilityRegistry, CapabilitySpec, CommandInput
from dev_assistant.config import Settings
from dev_assistant.services import code, git as git_ops, project, search
from dev_assistant.services.git import GitClient
from dev_assistant.services.llm import summarize_text
from dev_assistant.types import CodeAnalysisResult, Reply
from dev_assistant.ui import cards

logger = structlog.get_logger(__name__)

HELP_TEXT = "\n".join(
    [
        "Commands:",
        "- search <query>: web search with cited summary",
        "- generate card <topic>: build an adaptive card",
        "- summarize <text>: summarize a passage",
        "- review code <code>: AI code review with a 1-10 score",
        "- analyze <glob>: lint and measure up to 3 matching files",
        "- generate code <requirements>: draft code from a description",
        "- git status | commit <message> [-- files] | branch <name>",
        "- project: project dashboard",
        "- deploy: environments and recent commits",
        "- env: list environments",
        "- upload a PDF, CSV, TXT or MD file to extract its text",
    ]
)
NO_SEARCH_RESULTS = "No web results or search API key missing."
CODE_REVIEW_DISABLED = "Code review is disabled. Set ENABLE_CODE_REVIEW=true to enable it."
DEFAULT_ANALYSIS_PATTERN = "**/*.py"
RECENT_COMMITS = 5

_FENCED_CODE = re.compile(r"```[\w+-]*\n?(.*?)```", flags=re.DOTALL)
_GLOB_HINT = re.compile(r"[*?/\\]|\.\w+$")


def register_builtin_capabilities(
    registry: CapabilityRegistry,
    settings: Settings,
    *,
    llm: Any | None = None,
    git: GitClient | None = None,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Register the default capability set used by the dispatcher.

    Capabilities:
    - `search`: web search summarized with `[n]` citations.
    - `card`: topic card with quick actions.
    - `summarize`: free-text summary by the hosted model.
    - `help`: static command list.
    - `code_review` / `code_generate`: hosted-model code assistance.
    - `code_analysis`: pyflakes lint + heuristics over matched files.
    - `git_status` / `git_commit` / `git_branch`: working-tree operations.
    - `project_info` / `deployment` / `environment`: project dashboards.
    """

    repo = git or GitClient.from_settings(settings)
    root = Path(settings.project_root)

    async def _search(command: CommandInput) -> Reply:
        if not command.argument:
            return Reply(text="Usage: search <query>")
        results = await search.web_search(command.argument, settings, client=client)
        if not results:
            return Reply(text=NO_SEARCH_RESULTS)
        return Reply(text=await search.summarize_results(llm, results))

    async def _card(command: CommandInput) -> Reply:
        return Reply(card=cards.topic_card(command.argument or "Info"))

    async def _summarize(command: CommandInput) -> Reply:
        if not command.argument:
            return Reply(text="Usage: summarize <text>")
        return Reply(text=await summarize_text(llm, command.argument))

    async def _help(command: CommandInput) -> Reply:
        return Reply(text=HELP_TEXT)

    async def _code_review(command: CommandInput) -> Reply:
        if not settings.enable_code_review:
            return Reply(text=CODE_REVIEW_DISABLED)
        source = _unwrap_code(command.argument)
        if not source:
            return Reply(text="Usage: review code <code or fenced code block>")
        result = await code.review_code(source, llm)
        return Reply(text=result.summary, card=cards.code_review_card(result))

    async def _code_analysis(command: CommandInput) -> Reply:
        pattern = _pick_pattern(command.argument)
        files = await code.find_project_files(pattern, root)
        if not files:
            return Reply(text=f"No files matched `{pattern}`.")

        results: list[CodeAnalysisResult] = []
        for relative in files[: code.MAX_ANALYZED_FILES]:
            try:
                result = await code.analyze_code(root / relative)
            except OSError as exc:
                logger.warning("code_analysis_skipped", file=relative, error=str(exc))
                continue
            result.file_path = relative
            results.append(result)
        return Reply(card=cards.code_analysis_card(pattern, results, matched=len(files)))

    async def _code_generate(command: CommandInput) -> Reply:
        if not command.argument:
            return Reply(text="Usage: generate code <requirements>")
        return Reply(text=await code.generate_code(command.argument, llm))

    async def _git_status(command: CommandInput) -> Reply:
        status = await git_ops.get_git_status(repo)
        return Reply(card=cards.git_status_card(status))

    async def _git_commit(command: CommandInput) -> Reply:
        message, files = _split_commit_args(command.argument)
        if not message:
            return Reply(text="Usage: commit <message> [-- file1 file2]")
        if await git_ops.commit_changes(repo, message, files or None):
            return Reply(text=f"✅ Committed changes: {message}")
        return Reply(text="❌ Commit failed. Check the repository state and server logs.")

    async def _git_branch(command: CommandInput) -> Reply:
        parts = command.argument.split()
        if not parts:
            return Reply(text="Usage: branch <name>")
        name = parts[0]
        if await git_ops.create_branch(repo, name):
            return Reply(text=f"✅ Created and switched to branch `{name}`.")
        return Reply(text=f"❌ Could not create branch `{name}`.")

    async def _project_info(command: CommandInput) -> Reply:
        metrics = await project.analyze_project(settings, repo)
        return Reply(card=cards.project_dashboard_card(metrics))

    async def _deployment(command: CommandInput) -> Reply:
        environments = project.get_environments(settings)
        commits = await git_ops.get_commit_history(repo, RECENT_COMMITS)
        return Reply(card=cards.deployment_card(environments, commits))

    async def _environment(command: CommandInput) -> Reply:
        return Reply(card=cards.environments_card(project.get_environments(settings)))

    specs = [
        (Intent.SEARCH, "Search the web and summarize with citations.", _search, r"^search\b", ["web"]),
        (Intent.CARD, "Generate an adaptive card for a topic.", _card, r"generate card", ["ui"]),
        (Intent.SUMMARIZE, "Summarize a passage of text.", _summarize, r"summarize", ["llm"]),
        (Intent.HELP, "List available commands.", _help, None, ["static"]),
        (Intent.CODE_REVIEW, "Review code with the hosted model.", _code_review, r"^review code|code review", ["llm", "code"]),
        (Intent.CODE_ANALYSIS, "Lint and measure project files.", _code_analysis, r"^analyze\b", ["code"]),
        (Intent.CODE_GENERATE, "Generate code from requirements.", _code_generate, r"^(?:generate|create) code", ["llm", "code"]),
        (Intent.GIT_STATUS, "Show working tree status.", _git_status, None, ["git"]),
        (Intent.GIT_COMMIT, "Stage and commit changes.", _git_commit, r"^commit\b", ["git"]),
        (Intent.GIT_BRANCH, "Create and check out a branch.", _git_branch, r"^branch\b", ["git"]),
        (Intent.PROJECT_INFO, "Show the project dashboard.", _project_info, None, ["project"]),
        (Intent.DEPLOYMENT, "Show environments and recent commits.", _deployment, None, ["project", "git"]),
        (Intent.ENVIRONMENT, "List configured environments.", _environment, None, ["project"]),
    ]
    for name, description, handler, prefix, tags in specs:
        registry.register(
            CapabilitySpec(
                name=name,
                description=description,
                handler=handler,
                command_prefix=prefix,
                tags=tags,
            )
        )


def _unwrap_code(argument: str) -> str:
    match = _FENCED_CODE.search(argument)
    if match:
        return match.group(1).strip()
    return argument.strip()


def _pick_pattern(argument: str) -> str:
    for token in argument.split():
        if _GLOB_HINT.search(token):
            return token
    return DEFAULT_ANALYSIS_PATTERN


def _split_commit_args(argument: str) -> tuple[str, list[str]]:
    message, _, file_part = argument.partition(" -- ")
    message = message.strip().strip("\"'")
    return message, file_part.split()
