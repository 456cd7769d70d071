import httpx
import pytest

from dev_assistant.services.moderation import blocked_message, moderate
from dev_assistant.types import ModerationResult


def _unexpected(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected HTTP call to {request.url}")


async def test_disabled_moderation_never_flags(make_settings, http_client) -> None:
    settings = make_settings(enable_moderation=False, openai_moderation_key="sk-test")
    result = await moderate("build a bomb", settings, client=http_client(_unexpected))
    assert result == ModerationResult(flagged=False, reasons=[])


@pytest.mark.parametrize("text", ["I HATE mondays", "terrorism report", "Bomb squad"])
async def test_keyword_hit_short_circuits_hosted_check(make_settings, http_client, text: str) -> None:
    settings = make_settings(enable_moderation=True, openai_moderation_key="sk-test")
    result = await moderate(text, settings, client=http_client(_unexpected))
    assert result.flagged is True
    assert result.reasons == ["keyword"]


async def test_hosted_categories_returned_when_flagged(make_settings, http_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "flagged": True,
                        "categories": {"harassment": True, "violence": False, "self-harm": True},
                    }
                ]
            },
        )

    settings = make_settings(enable_moderation=True, openai_moderation_key="sk-test")
    result = await moderate("some text", settings, client=http_client(handler))

    assert result.flagged is True
    assert result.reasons == ["harassment", "self-harm"]
    assert seen[0].headers["Authorization"] == "Bearer sk-test"


async def test_hosted_unflagged(make_settings, http_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"flagged": False, "categories": {}}]})

    settings = make_settings(enable_moderation=True, openai_moderation_key="sk-test")
    result = await moderate("hello there", settings, client=http_client(handler))
    assert result.flagged is False


async def test_hosted_failure_fails_open(make_settings, http_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    settings = make_settings(enable_moderation=True, openai_moderation_key="sk-test")
    result = await moderate("hello there", settings, client=http_client(handler))
    assert result == ModerationResult(flagged=False, reasons=[])


async def test_no_hosted_key_skips_call(make_settings, http_client) -> None:
    settings = make_settings(enable_moderation=True)
    result = await moderate("hello there", settings, client=http_client(_unexpected))
    assert result.flagged is False


def test_blocked_message_lists_reasons() -> None:
    assert blocked_message(ModerationResult(True, ["keyword"])) == (
        "⚠️ Your message was blocked by safety guardrails. Reasons: keyword"
    )
    assert blocked_message(ModerationResult(True, [])) == (
        "⚠️ Your message was blocked by safety guardrails."
    )


@pytest.mark.parametrize(
    "body",
    [[], {"results": [None]}, {"results": "flagged"}, {"results": [{"flagged": True, "categories": ["hate"]}]}],
)
async def test_malformed_hosted_body_fails_open(make_settings, http_client, body) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    settings = make_settings(enable_moderation=True, openai_moderation_key="sk-test")
    result = await moderate("hello there", settings, client=http_client(handler))
    assert result == ModerationResult(flagged=False, reasons=[])
