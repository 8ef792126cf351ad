"""
Summarization tools.

This package wraps the remote model behind a narrow "submit text plus
instructions, receive text" interface and normalizes the response shapes the
supported providers return.
"""

from .base import LLMConfig, LLMProvider, LLMResponse
from .prompts import PromptManager, PromptTemplate
from .providers import AnthropicProvider, MockProvider, OpenAIProvider
from .response import (
    DirectText,
    EmptyResponse,
    StructuredItems,
    TextItem,
    classify_response,
    extract_response_text,
)
from .tool import LLMTool, Summarizer, create_llm_tool

__all__ = [
    "LLMProvider",
    "LLMConfig",
    "LLMResponse",
    "LLMTool",
    "Summarizer",
    "create_llm_tool",
    "OpenAIProvider",
    "AnthropicProvider",
    "MockProvider",
    "PromptTemplate",
    "PromptManager",
    "DirectText",
    "StructuredItems",
    "TextItem",
    "EmptyResponse",
    "classify_response",
    "extract_response_text",
]
