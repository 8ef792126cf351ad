"""
Summarization tool tests.

Covers the ``LLMTool`` facade over the mock provider, provider selection and
configuration from the environment.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from tools.errors import ConfigError, EmptyModelResponse, SummarizationError
from tools.llm.base import LLMConfig
from tools.llm.prompts import BATCH_SUMMARY, RELEASE_NOTES, PromptManager
from tools.llm.providers import MockProvider
from tools.llm.tool import LLMTool, create_llm_tool, llm_config_from_env


class TestLLMTool:
    """Test class for the summarization tool."""

    @pytest.fixture
    def config(self) -> LLMConfig:
        return LLMConfig(api_key="test-key", model="test-model")

    @pytest.fixture
    def mock_provider(self, config: LLMConfig) -> Any:
        """Mock LLM provider fixture."""
        return MockProvider(config, mock_responses=["  - Added login  "])

    @pytest.fixture
    def llm_tool(self, mock_provider: Any) -> LLMTool:
        """LLM tool fixture."""
        return LLMTool(provider=mock_provider)

    def test_tool_initialization(self, llm_tool: LLMTool) -> None:
        assert llm_tool.tool_name == "llm_tool"
        assert llm_tool.tool_id.startswith("llm_tool_")
        assert llm_tool.call_count == 0

    def test_summarize_sends_instructions_and_prompt(
        self, llm_tool: LLMTool, mock_provider: MockProvider
    ) -> None:
        text = asyncio.run(
            llm_tool.summarize("prompt body", "be brief", stage_label="release notes")
        )

        assert text == "- Added login"
        ((system, user),) = mock_provider.calls
        assert (system.role, system.content) == ("system", "be brief")
        assert (user.role, user.content) == ("user", "prompt body")
        assert llm_tool.call_count == 1
        assert llm_tool.usage.total_tokens > 0

    def test_empty_response_raises(self, config: LLMConfig) -> None:
        tool = LLMTool(MockProvider(config, mock_responses=[{"output_text": "  "}]))
        with pytest.raises(EmptyModelResponse) as exc_info:
            asyncio.run(tool.summarize("p", "i", stage_label="final"))
        assert exc_info.value.stage_label == "final"

    def test_provider_failure_is_labelled(self, config: LLMConfig) -> None:
        provider = MockProvider(config)
        provider.generate = AsyncMock(side_effect=SummarizationError("HTTP 500"))
        tool = LLMTool(provider)

        with pytest.raises(SummarizationError) as exc_info:
            asyncio.run(tool.summarize("p", "i", stage_label="batch 2/3"))

        assert exc_info.value.stage_label == "batch 2/3"
        assert str(exc_info.value) == "[batch 2/3] HTTP 500"

    def test_get_tool_info_reports_usage(self, llm_tool: LLMTool) -> None:
        asyncio.run(llm_tool.summarize("p", "i", stage_label="final"))

        info = llm_tool.get_tool_info()

        assert info["tool_name"] == "llm_tool"
        assert info["provider"]["model"] == "test-model"
        assert info["calls"] == 1
        assert info["usage"]["total_tokens"] == llm_tool.usage.total_tokens


class TestProviderSelection:
    def test_create_mock_tool(self) -> None:
        tool = create_llm_tool(LLMConfig(api_key="", model="mock-model"), "mock")
        assert isinstance(tool.provider, MockProvider)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigError):
            create_llm_tool(LLMConfig(api_key="", model="x"), "unknown")

    def test_config_from_env(self) -> None:
        config = llm_config_from_env(
            "openai",
            {
                "OPENAI_API_KEY": "sk-test",
                "LLM_MODEL": "gpt-test",
                "OPENAI_BASE_URL": "https://proxy.example/v1",
                "LLM_TIMEOUT": "30",
            },
        )
        assert config.api_key == "sk-test"
        assert config.model == "gpt-test"
        assert config.base_url == "https://proxy.example/v1"
        assert config.timeout == 30
        assert config.to_dict()["api_key"] == "***"

    def test_missing_api_key(self) -> None:
        with pytest.raises(ConfigError, match="ANTHROPIC_API_KEY"):
            llm_config_from_env("anthropic", {})

    def test_mock_needs_no_key(self) -> None:
        assert llm_config_from_env("mock", {}).model == "mock-model"

    def test_bad_timeout(self) -> None:
        with pytest.raises(ConfigError):
            llm_config_from_env("mock", {"LLM_TIMEOUT": "soon"})


class TestPromptManager:
    def test_default_templates(self) -> None:
        manager = PromptManager()
        assert "What's Changed" in manager.get_instructions(RELEASE_NOTES)
        assert "bullet" in manager.get_instructions(BATCH_SUMMARY)
        assert manager.get_template(BATCH_SUMMARY).name == BATCH_SUMMARY

    def test_unknown_template(self) -> None:
        with pytest.raises(KeyError):
            PromptManager().get_template("missing")
