"""
LLM provider base interface and data structures.

This module defines the base interface and common data structures that all
summarization providers must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class LLMConfig:
    """
    LLM provider configuration structure.

    Contains API key, model settings, parameters for each provider.
    """

    api_key: str  # API key
    model: str  # Model name
    base_url: str | None = None  # Custom API endpoint
    timeout: int = 120  # Request timeout (seconds)
    max_tokens: int = 4096  # Maximum output token count
    temperature: float | None = None  # Provider default when None

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        result = asdict(self)
        result["api_key"] = "***" if self.api_key else ""
        return result


@dataclass
class LLMMessage:
    """
    LLM conversation message structure.
    """

    role: str  # 'system', 'user', 'assistant'
    content: str  # Message content


@dataclass
class LLMUsage:
    """
    LLM API usage information.
    """

    prompt_tokens: int  # Number of prompt tokens
    completion_tokens: int  # Number of completion tokens
    total_tokens: int  # Total token count

    def to_dict(self) -> dict[str, Any]:
        """Convert usage info to dictionary."""
        return asdict(self)


@dataclass
class LLMResponse:
    """
    LLM API response structure.
    """

    content: str  # Extracted text; empty when the response carried none
    usage: LLMUsage  # Token usage
    model: str  # Model used
    finish_reason: str | None = None  # Generation completion reason
    metadata: dict[str, Any] | None = None  # Additional metadata


class LLMProvider(ABC):
    """
    Base interface for summarization providers.

    All providers must implement this interface.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self.provider_name = self.__class__.__name__

    @abstractmethod
    async def generate(self, messages: list[LLMMessage], **kwargs: Any) -> LLMResponse:
        """
        Generate text using the provider.

        Args:
            messages: List of conversation messages; a 'system' message carries
                the instructions
            **kwargs: Additional parameters

        Returns:
            LLM response

        Raises:
            SummarizationError: The remote call failed
        """
        pass

    def estimate_tokens(self, text: str) -> int:
        """
        Estimate token count for text.

        Args:
            text: Text to analyze

        Returns:
            Estimated token count
        """
        # Simple estimation: 1 token ~= 4 characters for English
        return len(text) // 4

    def get_provider_info(self) -> dict[str, Any]:
        """Get provider information."""
        return {
            "provider_name": self.provider_name,
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }


def split_messages(messages: list[LLMMessage]) -> tuple[str | None, str]:
    """Split messages into (instructions, user input)."""
    system_parts = [m.content for m in messages if m.role == "system"]
    user_parts = [m.content for m in messages if m.role != "system"]
    instructions = "\n\n".join(system_parts) if system_parts else None
    return instructions, "\n\n".join(user_parts)
