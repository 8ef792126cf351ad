"""
LLM provider implementations.

Contains specific implementations for the OpenAI Responses API, the Anthropic
Messages API and a mock provider for tests. Every provider reduces its raw
response through ``classify_response``/``extract_response_text`` so an answer
without text always surfaces as empty content.
"""

from typing import Any

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from tools.errors import SummarizationError

from .base import (
    LLMConfig,
    LLMMessage,
    LLMProvider,
    LLMResponse,
    LLMUsage,
    split_messages,
)
from .response import classify_response, extract_response_text


class OpenAIProvider(LLMProvider):
    """
    OpenAI provider implementation.

    Uses the Responses API: instructions and input are sent separately.
    """

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=0,
        )

    async def generate(self, messages: list[LLMMessage], **kwargs: Any) -> LLMResponse:
        """Generate text using the OpenAI Responses API."""

        instructions, prompt = split_messages(messages)

        request_params: dict[str, Any] = {
            "model": self.config.model,
            "input": prompt,
            "max_output_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }
        if instructions:
            request_params["instructions"] = instructions
        temperature = kwargs.get("temperature", self.config.temperature)
        if temperature is not None:
            request_params["temperature"] = temperature

        try:
            response = await self.client.responses.create(**request_params)
        except Exception as e:
            raise SummarizationError(f"OpenAI API call failed: {str(e)}") from e

        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "input_tokens", 0) or 0
        output_tokens = getattr(usage, "output_tokens", 0) or 0

        return LLMResponse(
            content=extract_response_text(classify_response(response)),
            usage=LLMUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            model=getattr(response, "model", self.config.model),
            finish_reason=getattr(response, "status", None),
            metadata={"provider": "openai"},
        )


class AnthropicProvider(LLMProvider):
    """
    Anthropic provider implementation.

    Supports Claude models.
    """

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self.client = AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=0,
        )

    async def generate(self, messages: list[LLMMessage], **kwargs: Any) -> LLMResponse:
        """Generate text using the Anthropic Messages API."""

        instructions, prompt = split_messages(messages)

        request_params: dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }
        if instructions:
            request_params["system"] = instructions
        temperature = kwargs.get("temperature", self.config.temperature)
        if temperature is not None:
            request_params["temperature"] = temperature

        try:
            response = await self.client.messages.create(**request_params)
        except Exception as e:
            raise SummarizationError(f"Anthropic API call failed: {str(e)}") from e

        usage = response.usage

        return LLMResponse(
            content=extract_response_text(classify_response(response)),
            usage=LLMUsage(
                prompt_tokens=usage.input_tokens,
                completion_tokens=usage.output_tokens,
                total_tokens=usage.input_tokens + usage.output_tokens,
            ),
            model=response.model,
            finish_reason=response.stop_reason,
            metadata={"provider": "anthropic"},
        )


class MockProvider(LLMProvider):
    """
    Mock provider for testing.

    Returns predefined responses without actual API calls. A response may be a
    plain string or a raw response payload (dict) in either supported shape.
    """

    def __init__(
        self,
        config: LLMConfig,
        mock_responses: list[str | dict[str, Any]] | None = None,
    ):
        super().__init__(config)
        self.mock_responses = mock_responses or ["Mock response for testing"]
        self.response_index = 0
        self.calls: list[list[LLMMessage]] = []

    async def generate(self, messages: list[LLMMessage], **kwargs: Any) -> LLMResponse:
        """Generate mock response."""

        self.calls.append(list(messages))
        prompt_text = " ".join([msg.content for msg in messages])
        prompt_tokens = self.estimate_tokens(prompt_text)

        raw = self.mock_responses[self.response_index % len(self.mock_responses)]
        self.response_index += 1
        if isinstance(raw, str):
            raw = {"output_text": raw}
        response_text = extract_response_text(classify_response(raw))
        completion_tokens = self.estimate_tokens(response_text)

        return LLMResponse(
            content=response_text,
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            model="mock-model",
            finish_reason="stop",
            metadata={"provider": "mock", "test_mode": True},
        )
