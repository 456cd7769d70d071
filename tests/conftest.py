"""Shared fixtures: explicit settings, fake hosted model, fake HTTP transport."""

from collections.abc import Callable

import httpx
import pytest
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from dev_assistant.config import Settings


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """Build settings with every credential unset unless overridden."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "_env_file": None,
            "azure_openai_api_key": None,
            "azure_openai_endpoint": None,
            "azure_openai_deployment_name": None,
            "enable_moderation": False,
            "openai_moderation_key": None,
            "bing_search_api_key": None,
            "enable_code_review": False,
            "github_token": None,
            "teamsfx_env": None,
            "project_root": tmp_path,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


class RecordingLLM:
    """Runnable chat-model stand-in that records every prompt it receives."""

    def __init__(self, reply: str = "ok", *, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[object] = []
        self.runnable = RunnableLambda(self._respond)

    async def _respond(self, messages: object) -> AIMessage:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)

    def last_prompt(self) -> str:
        messages = self.calls[-1]
        return messages[-1]["content"]


@pytest.fixture
def recording_llm() -> Callable[..., RecordingLLM]:
    return RecordingLLM


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    return mock_client
