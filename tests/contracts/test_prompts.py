from dev_assistant.agent.chat import _SYSTEM_PROMPT
from dev_assistant.services.code import _GENERATE_PROMPT, _REVIEW_PROMPT
from dev_assistant.services.search import build_summary_prompt
from dev_assistant.types import SearchResult


def test_review_prompt_contains_rubric_and_rating_request() -> None:
    for criterion in (
        "Code quality and best practices",
        "Potential bugs and security issues",
        "Performance optimizations",
        "Maintainability improvements",
    ):
        assert criterion in _REVIEW_PROMPT
    assert "Rate 1-10" in _REVIEW_PROMPT


def test_generate_prompt_names_language() -> None:
    assert "Use idiomatic python" in _GENERATE_PROMPT.format(language="python", requirements="x")


def test_summary_prompt_requests_numbered_citations() -> None:
    prompt = build_summary_prompt([SearchResult(title="A", url="https://a.test", snippet="alpha")])
    assert "cite them as [n]" in prompt
    assert prompt.endswith("[1] A: alpha")


def test_chat_prompt_points_to_help_command() -> None:
    assert "`help`" in _SYSTEM_PROMPT
