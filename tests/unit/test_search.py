import httpx
import pytest

from dev_assistant.services.search import (
    build_summary_prompt,
    format_cited_response,
    summarize_results,
    web_search,
)
from dev_assistant.types import SearchResult

RESULTS = [
    SearchResult(title="FastAPI", url="https://fastapi.tiangolo.com", snippet="Modern web framework."),
    SearchResult(title="httpx", url="https://www.python-httpx.org", snippet="Async HTTP client."),
]


async def test_missing_key_returns_empty(make_settings) -> None:
    assert await web_search("python", make_settings()) == []


async def test_maps_results_and_caps_count(make_settings, http_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        pages = [
            {"name": f"Result {i}", "url": f"https://example.com/{i}", "snippet": f"snippet {i}"}
            for i in range(5)
        ]
        return httpx.Response(200, json={"webPages": {"value": pages}})

    settings = make_settings(bing_search_api_key="search-key")
    results = await web_search("python", settings, count=2, client=http_client(handler))

    assert results == [
        SearchResult(title="Result 0", url="https://example.com/0", snippet="snippet 0"),
        SearchResult(title="Result 1", url="https://example.com/1", snippet="snippet 1"),
    ]
    assert seen[0].headers["Ocp-Apim-Subscription-Key"] == "search-key"
    assert seen[0].url.params["q"] == "python"
    assert seen[0].url.params["count"] == "2"


async def test_search_failure_returns_empty(make_settings, http_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    settings = make_settings(bing_search_api_key="search-key")
    assert await web_search("python", settings, client=http_client(handler)) == []


def test_cited_response_lists_sources_in_order() -> None:
    text = format_cited_response("Both are popular [1][2].", RESULTS)
    assert text == (
        "Both are popular [1][2].\n\nSources:\n"
        "[1] FastAPI - https://fastapi.tiangolo.com\n"
        "[2] httpx - https://www.python-httpx.org"
    )


def test_cited_response_without_results_is_unchanged() -> None:
    assert format_cited_response("plain answer", []) == "plain answer"


async def test_summarize_results_uses_model(recording_llm) -> None:
    llm = recording_llm("  FastAPI is a framework [1].  ")
    text = await summarize_results(llm.runnable, RESULTS)

    assert text.startswith("FastAPI is a framework [1].\n\nSources:\n[1] FastAPI")
    assert llm.last_prompt() == build_summary_prompt(RESULTS)
    assert "[2] httpx: Async HTTP client." in llm.last_prompt()


async def test_summarize_results_without_model_lists_snippets() -> None:
    text = await summarize_results(None, RESULTS)
    assert text.startswith("1. Modern web framework. [1]\n2. Async HTTP client. [2]")
    assert "Sources:" in text


async def test_summarize_results_model_failure_falls_back(recording_llm) -> None:
    llm = recording_llm(error=RuntimeError("boom"))
    text = await summarize_results(llm.runnable, RESULTS)
    assert text.startswith("1. Modern web framework. [1]")


@pytest.mark.parametrize(
    "body",
    [[], {"webPages": {"value": ["oops"]}}, {"webPages": []}, "not an object"],
)
async def test_malformed_search_body_returns_empty(make_settings, http_client, body) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    settings = make_settings(bing_search_api_key="search-key")
    assert await web_search("python", settings, client=http_client(handler)) == []
