"""Project dashboard metrics and environment discovery."""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog

from dev_assistant.config import Settings
from dev_assistant.errors import SourceControlError
from dev_assistant.services.code import EXCLUDED_DIRS
from dev_assistant.services.git import GitClient
from dev_assistant.types import Environment, ProjectMetrics

logger = structlog.get_logger(__name__)

SOURCE_EXTENSIONS = (".ts", ".js", ".tsx", ".jsx", ".py", ".java", ".cs", ".go", ".rs")
ENV_DIR_NAME = "env"
ENV_FILE_PREFIX = ".env."


async def analyze_project(settings: Settings, git: GitClient) -> ProjectMetrics:
    """Collect dependency, source-size and contributor metrics.

    Unreadable source files are skipped, a failing git log only leaves the
    commit fields empty, and any other failure yields all-zero metrics.
    """
    root = Path(settings.project_root)
    try:
        dependencies, dev_dependencies = _read_package_json(root / "package.json")

        last_commit = ""
        contributors: list[str] = []
        try:
            latest = await git.log(max_count=1)
            if latest:
                last_commit = f"{latest[0].hash} - {latest[0].message}"
            for commit in await git.log():
                if commit.author not in contributors:
                    contributors.append(commit.author)
        except SourceControlError as exc:
            logger.warning("git_analysis_failed", error=str(exc))

        total_lines = 0
        language_counts: dict[str, int] = {}
        source_files = find_source_files(root)
        for path in source_files:
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            total_lines += content.count("\n") + 1
            language_counts[path.suffix] = language_counts.get(path.suffix, 0) + 1

        return ProjectMetrics(
            total_files=len(source_files),
            total_lines=total_lines,
            language_counts=language_counts,
            last_commit_summary=last_commit,
            contributors=contributors,
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
        )
    except Exception as exc:
        logger.error("project_analysis_failed", error=str(exc))
        return ProjectMetrics()


def find_source_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRS)
        for filename in sorted(filenames):
            if Path(filename).suffix in SOURCE_EXTENSIONS:
                files.append(Path(current) / filename)
    return files


def _read_package_json(path: Path) -> tuple[dict[str, str], dict[str, str]]:
    if not path.is_file():
        return {}, {}
    package = json.loads(path.read_text(encoding="utf-8"))
    return dict(package.get("dependencies") or {}), dict(package.get("devDependencies") or {})


def get_environments(settings: Settings) -> list[Environment]:
    """Parse `env/.env.<name>` files under the project root."""
    env_dir = Path(settings.project_root) / ENV_DIR_NAME
    environments: list[Environment] = []
    if not env_dir.is_dir():
        return environments

    try:
        entries = sorted(env_dir.iterdir())
    except OSError as exc:
        logger.error("env_dir_unreadable", path=str(env_dir), error=str(exc))
        return environments

    for path in entries:
        if not path.name.startswith(ENV_FILE_PREFIX) or not path.is_file():
            continue
        name = path.name[len(ENV_FILE_PREFIX):]
        try:
            variables = parse_env_file(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("env_file_unreadable", file=path.name, error=str(exc))
            continue
        environments.append(
            Environment(
                name=name,
                variables=variables,
                is_active=bool(settings.teamsfx_env) and name == settings.teamsfx_env,
            )
        )
    return environments


def parse_env_file(content: str) -> dict[str, str]:
    variables: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        variables[key.strip()] = value.strip()
    return variables
