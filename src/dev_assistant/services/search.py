"""Web search and citation-grounded summarization."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from dev_assistant.config import Settings
from dev_assistant.errors import ExternalServiceError
from dev_assistant.services.http import client_scope
from dev_assistant.services.llm import complete
from dev_assistant.types import SearchResult

logger = structlog.get_logger(__name__)

DEFAULT_RESULT_COUNT = 3


async def web_search(
    query: str,
    settings: Settings,
    *,
    count: int = DEFAULT_RESULT_COUNT,
    client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Query the hosted search API.

    An empty list means search is unavailable (no key, or the call failed),
    not necessarily that nothing matched.
    """
    if not settings.bing_search_api_key:
        return []

    try:
        async with client_scope(client) as http:
            response = await http.get(
                settings.search_endpoint,
                params={"q": query, "count": count},
                headers={"Ocp-Apim-Subscription-Key": settings.bing_search_api_key},
            )
            response.raise_for_status()
            return _parse_pages(response.json(), count)
    except (httpx.HTTPError, ValueError, AttributeError, TypeError) as exc:
        logger.error("web_search_failed", query=query, error=str(exc))
        return []


def _parse_pages(payload: dict, count: int) -> list[SearchResult]:
    pages = (payload.get("webPages") or {}).get("value") or []
    return [
        SearchResult(
            title=str(page.get("name", "")),
            url=str(page.get("url", "")),
            snippet=str(page.get("snippet", "")),
        )
        for page in pages[:count]
    ]


def build_summary_prompt(results: list[SearchResult]) -> str:
    listing = "\n".join(
        f"[{idx}] {result.title}: {result.snippet}"
        for idx, result in enumerate(results, start=1)
    )
    return f"Summarize objectively the following search results and cite them as [n]:\n{listing}"


async def summarize_results(llm: Any, results: list[SearchResult]) -> str:
    """Summarize search results with `[n]` citations and a Sources block."""
    if llm is None:
        answer = _snippet_answer(results)
    else:
        try:
            answer = (await complete(llm, build_summary_prompt(results))).strip()
        except ExternalServiceError as exc:
            logger.error("search_summary_failed", error=str(exc))
            answer = _snippet_answer(results)
    return format_cited_response(answer, results)


def format_cited_response(answer: str, results: list[SearchResult]) -> str:
    if not results:
        return answer
    citations = "\n".join(
        f"[{idx}] {result.title} - {result.url}"
        for idx, result in enumerate(results, start=1)
    )
    return f"{answer}\n\nSources:\n{citations}"


def _snippet_answer(results: list[SearchResult]) -> str:
    return "\n".join(
        f"{idx}. {result.snippet} [{idx}]" for idx, result in enumerate(results, start=1)
    )
