from dev_assistant.services.code import generate_code, parse_review, review_code

REVIEW_REPLY = """
Overall the function is readable but fragile.

- Potential bug: division by zero when the list is empty
* Consider adding type hints
- Error handling swallows the original exception
- Extract the magic number into a constant

Rating: 8
"""


def test_parse_review_splits_issues_and_suggestions() -> None:
    result = parse_review(REVIEW_REPLY)

    assert result.summary == "Overall the function is readable but fragile."
    assert result.score == 8
    assert result.issues == [
        "Potential bug: division by zero when the list is empty",
        "Error handling swallows the original exception",
    ]
    assert result.suggestions == [
        "Consider adding type hints",
        "Extract the magic number into a constant",
    ]


def test_score_defaults_to_five_without_token() -> None:
    assert parse_review("Looks fine.\n- rename x").score == 5


def test_score_is_case_insensitive_and_not_clamped() -> None:
    assert parse_review("SCORE: 3").score == 3
    assert parse_review("Rating: 97 out of 10").score == 97


def test_empty_reply_gets_default_summary() -> None:
    result = parse_review("")
    assert result.summary == "Code reviewed successfully"
    assert result.suggestions == []
    assert result.issues == []


async def test_review_without_model_is_unavailable() -> None:
    result = await review_code("print(1)", None)
    assert result.summary == "AI code review unavailable - missing API key"
    assert result.score == 5
    assert result.suggestions == []
    assert result.issues == []


async def test_review_sends_rubric_and_code(recording_llm) -> None:
    llm = recording_llm(REVIEW_REPLY)
    result = await review_code("def avg(xs):\n    return sum(xs) / len(xs)", llm.runnable)

    prompt = llm.last_prompt()
    assert "Potential bugs and security issues" in prompt
    assert "```python\ndef avg(xs):" in prompt
    assert result.score == 8


async def test_review_failure_returns_degraded_result(recording_llm) -> None:
    llm = recording_llm(error=RuntimeError("timeout"))
    result = await review_code("print(1)", llm.runnable)
    assert result.summary == "Code review failed"
    assert result.score == 5


async def test_generate_code_paths(recording_llm) -> None:
    assert await generate_code("a stack", None) == "# Code generation unavailable - missing API key"

    failing = recording_llm(error=RuntimeError("boom"))
    assert await generate_code("a stack", failing.runnable) == "# Code generation failed"

    llm = recording_llm("class Stack:\n    ...")
    assert await generate_code("a stack", llm.runnable) == "class Stack:\n    ..."
    assert "a stack" in llm.last_prompt()
