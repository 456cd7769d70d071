"""Source-control operations over the `git` binary.

Every public coroutine fails soft: errors are logged and converted into the
documented default (`unknown` status, `False`, or an empty history).
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path

import structlog

from dev_assistant.config import Settings
from dev_assistant.errors import SourceControlError
from dev_assistant.types import CommitInfo, FileStatus, SourceControlStatus

logger = structlog.get_logger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_AHEAD_PATTERN = re.compile(r"ahead (\d+)")
_BEHIND_PATTERN = re.compile(r"behind (\d+)")


class GitClient:
    """Thin async wrapper that runs git commands in the project working tree."""

    def __init__(self, repo_path: str | Path, *, token: str | None = None) -> None:
        self.repo_path = Path(repo_path)
        self.token = token

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitClient":
        return cls(settings.project_root, token=settings.github_token)

    async def run(self, *args: str) -> str:
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        if self.token:
            env["GITHUB_TOKEN"] = self.token

        try:
            process = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=str(self.repo_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            raise SourceControlError(list(args), -1, str(exc)) from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise SourceControlError(list(args), process.returncode, stderr.decode(errors="replace"))
        return stdout.decode(errors="replace")

    async def status(self) -> SourceControlStatus:
        output = await self.run("status", "--porcelain=v1", "--branch")
        return parse_status(output)

    async def add(self, files: list[str] | None = None) -> None:
        if files:
            await self.run("add", "--", *files)
        else:
            await self.run("add", ".")

    async def commit(self, message: str) -> None:
        await self.run("commit", "-m", message)

    async def checkout_new_branch(self, name: str) -> None:
        await self.run("checkout", "-b", name)

    async def log(self, max_count: int | None = None) -> list[CommitInfo]:
        args = ["log", f"--pretty=format:%H{_FIELD_SEP}%s{_FIELD_SEP}%an{_FIELD_SEP}%aI{_RECORD_SEP}"]
        if max_count is not None:
            args.insert(1, f"--max-count={max_count}")
        output = await self.run(*args)
        return parse_log(output)


def parse_status(output: str) -> SourceControlStatus:
    """Parse `git status --porcelain=v1 --branch` output."""
    current = "unknown"
    ahead = behind = 0
    files: list[FileStatus] = []

    for line in output.splitlines():
        if line.startswith("## "):
            header = line[3:]
            tracking = ""
            if " [" in header:
                header, tracking = header.split(" [", 1)
            if header.startswith("No commits yet on "):
                header = header[len("No commits yet on "):]
            current = header.split("...", 1)[0].strip() or "unknown"
            ahead_match = _AHEAD_PATTERN.search(tracking)
            behind_match = _BEHIND_PATTERN.search(tracking)
            ahead = int(ahead_match.group(1)) if ahead_match else 0
            behind = int(behind_match.group(1)) if behind_match else 0
            continue
        if len(line) < 4:
            continue

        index_code, worktree_code = line[0], line[1]
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        files.append(
            FileStatus(
                path=path.strip('"'),
                status=worktree_code + index_code,
                staged=index_code not in (" ", "?"),
            )
        )

    return SourceControlStatus(current_branch=current, files=files, ahead=ahead, behind=behind)


def parse_log(output: str) -> list[CommitInfo]:
    commits: list[CommitInfo] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP)
        if len(fields) != 4:
            continue
        full_hash, message, author, date = fields
        commits.append(CommitInfo(hash=full_hash[:8], message=message, author=author, date=date))
    return commits


async def get_git_status(git: GitClient) -> SourceControlStatus:
    try:
        return await git.status()
    except SourceControlError as exc:
        logger.error("git_status_failed", error=str(exc))
        return SourceControlStatus(current_branch="unknown", files=[], ahead=0, behind=0)


async def commit_changes(git: GitClient, message: str, files: list[str] | None = None) -> bool:
    try:
        await git.add(files)
        await git.commit(message)
    except SourceControlError as exc:
        logger.error("git_commit_failed", error=str(exc))
        return False
    return True


async def create_branch(git: GitClient, branch_name: str) -> bool:
    try:
        await git.checkout_new_branch(branch_name)
    except SourceControlError as exc:
        logger.error("git_branch_failed", branch=branch_name, error=str(exc))
        return False
    return True


async def get_commit_history(git: GitClient, count: int = 10) -> list[CommitInfo]:
    try:
        return await git.log(max_count=count)
    except SourceControlError as exc:
        logger.error("git_history_failed", error=str(exc))
        return []
