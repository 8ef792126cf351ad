"""
Summarization tool.

``LLMTool`` is the single entry point the pipeline uses to talk to a model:
submit (prompt, instructions), receive text. An empty answer is fatal for the
stage (``EmptyModelResponse``); provider failures arrive as
``SummarizationError`` and are re-labelled with the stage. Nothing is retried
here.
"""

import os
import uuid
from collections.abc import Mapping
from typing import Any, Protocol

from loguru import logger

from tools.errors import ConfigError, EmptyModelResponse, SummarizationError
from tools.llm.base import LLMConfig, LLMMessage, LLMProvider, LLMUsage

DEFAULT_MODELS = {
    "openai": "gpt-5.2",
    "anthropic": "claude-sonnet-4-5",
    "mock": "mock-model",
}

API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class Summarizer(Protocol):
    """Anything that turns (prompt, instructions) into text for a stage."""

    async def summarize(
        self, prompt: str, instructions: str, *, stage_label: str
    ) -> str: ...


class LLMTool:
    """
    Summarization facade over an ``LLMProvider``.

    Tracks token usage across calls for reporting.
    """

    def __init__(self, provider: LLMProvider):
        self.tool_name = "llm_tool"
        self.tool_id = f"{self.tool_name}_{uuid.uuid4().hex[:8]}"
        self.provider = provider
        self.usage = LLMUsage(prompt_tokens=0, completion_tokens=0, total_tokens=0)
        self.call_count = 0

    async def summarize(
        self, prompt: str, instructions: str, *, stage_label: str
    ) -> str:
        """
        Submit one stage to the provider.

        Args:
            prompt: Stage input text
            instructions: Instruction text for the stage
            stage_label: Name used in logs and errors (e.g. "batch 2/5")

        Returns:
            Stripped response text

        Raises:
            SummarizationError: The provider call failed
            EmptyModelResponse: The response carried no text
        """
        messages = [
            LLMMessage(role="system", content=instructions),
            LLMMessage(role="user", content=prompt),
        ]
        logger.debug(
            f"Submitting stage '{stage_label}' ({len(prompt)} chars) "
            f"to {self.provider.provider_name}"
        )

        try:
            response = await self.provider.generate(messages)
        except SummarizationError as e:
            raise SummarizationError(str(e), stage_label=stage_label) from e

        self.call_count += 1
        self._record_usage(response.usage)

        text = response.content.strip()
        if not text:
            raise EmptyModelResponse(stage_label)
        return text

    def _record_usage(self, usage: LLMUsage) -> None:
        self.usage = LLMUsage(
            prompt_tokens=self.usage.prompt_tokens + usage.prompt_tokens,
            completion_tokens=self.usage.completion_tokens + usage.completion_tokens,
            total_tokens=self.usage.total_tokens + usage.total_tokens,
        )

    def get_tool_info(self) -> dict[str, Any]:
        """Get tool information and usage so far."""
        return {
            "tool_name": self.tool_name,
            "tool_id": self.tool_id,
            "provider": self.provider.get_provider_info(),
            "calls": self.call_count,
            "usage": self.usage.to_dict(),
        }


def llm_config_from_env(
    provider_type: str, environ: Mapping[str, str] | None = None
) -> LLMConfig:
    """
    Build an ``LLMConfig`` for ``provider_type`` from environment variables.

    Raises:
        ConfigError: Unknown provider or missing API key
    """
    env = os.environ if environ is None else environ
    if provider_type not in DEFAULT_MODELS:
        raise ConfigError(f"Unsupported provider type: {provider_type}")

    api_key = ""
    key_env = API_KEY_ENV.get(provider_type)
    if key_env:
        api_key = env.get(key_env, "")
        if not api_key:
            raise ConfigError(
                f"{key_env} is required for provider '{provider_type}'."
            )

    timeout_raw = env.get("LLM_TIMEOUT")
    try:
        timeout = int(timeout_raw) if timeout_raw else 120
    except ValueError as err:
        raise ConfigError(
            f"LLM_TIMEOUT must be an integer (got {timeout_raw!r})."
        ) from err

    return LLMConfig(
        api_key=api_key,
        model=env.get("LLM_MODEL") or DEFAULT_MODELS[provider_type],
        base_url=env.get("OPENAI_BASE_URL") if provider_type == "openai" else None,
        timeout=timeout,
    )


def create_llm_tool(
    provider_config: LLMConfig, provider_type: str = "mock"
) -> LLMTool:
    """
    Factory function to create the summarization tool with the given provider.

    Args:
        provider_config: LLM provider configuration
        provider_type: Type of provider ('openai', 'anthropic', 'mock')

    Returns:
        Configured LLM tool instance
    """
    provider: LLMProvider
    if provider_type == "openai":
        from .providers import OpenAIProvider

        provider = OpenAIProvider(provider_config)
    elif provider_type == "anthropic":
        from .providers import AnthropicProvider

        provider = AnthropicProvider(provider_config)
    elif provider_type == "mock":
        from .providers import MockProvider

        provider = MockProvider(provider_config)
    else:
        raise ConfigError(f"Unsupported provider type: {provider_type}")

    return LLMTool(provider=provider)


__all__ = ["LLMTool", "Summarizer", "create_llm_tool", "llm_config_from_env"]
