from dev_assistant.types import (
    CodeReviewResult,
    CommitInfo,
    Environment,
    FileStatus,
    SourceControlStatus,
)
from dev_assistant.ui.cards import (
    CARD_SCHEMA,
    code_review_card,
    deployment_card,
    git_status_card,
    topic_card,
)


def _texts(card) -> list[str]:
    texts = []
    for block in card["body"]:
        if block["type"] == "TextBlock":
            texts.append(block["text"])
        for column in block.get("columns", []):
            texts.extend(item["text"] for item in column["items"])
    return texts


def test_topic_card_shape() -> None:
    card = topic_card("release notes")

    assert card["type"] == "AdaptiveCard"
    assert card["version"] == "1.5"
    assert card["$schema"] == CARD_SCHEMA
    assert _texts(card) == ["Generated Card", "Topic: release notes"]
    assert [action["data"]["command"] for action in card["actions"]] == ["help", "search Teams AI library"]
    assert all(action["type"] == "Action.Submit" for action in card["actions"])


def test_code_review_card_lists_score_and_findings() -> None:
    result = CodeReviewResult(
        summary="Mostly fine.", suggestions=["Add tests"], score=7, issues=["Possible bug in loop"]
    )

    texts = _texts(code_review_card(result))

    assert texts[0] == "Code Review"
    assert "7/10" in texts
    assert "- Possible bug in loop" in texts
    assert "- Add tests" in texts


def test_git_status_card_marks_staged_files() -> None:
    status = SourceControlStatus(
        current_branch="main",
        files=[FileStatus(path="a.py", status=" A", staged=True), FileStatus(path="b.py", status="M ", staged=False)],
        ahead=1,
        behind=0,
    )

    texts = _texts(git_status_card(status))

    assert "main" in texts
    assert "- A a.py (staged)\n- M b.py" in texts


def test_clean_tree_and_empty_history() -> None:
    clean = SourceControlStatus(current_branch="main", files=[], ahead=0, behind=0)
    assert "Working tree clean." in _texts(git_status_card(clean))

    card = deployment_card([Environment(name="dev", variables={"A": "1"}, is_active=True)], [])
    assert "No commit history available." in _texts(card)
    facts = card["body"][1]["facts"]
    assert facts == [{"title": "dev (active)", "value": "1 variable(s)"}]


def test_deployment_card_lists_commits() -> None:
    commits = [CommitInfo(hash="abc12345", message="ship it", author="Ana", date="2024-05-01")]
    assert "- abc12345 ship it (Ana)" in _texts(deployment_card([], commits))
