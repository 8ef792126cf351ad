"""
Tools package for the release-notes generator.

This package contains the building blocks the agents compose:
- Error taxonomy and non-fatal notices
- Configuration loading and validation
- Git queries: tags, commit ranges and per-commit change extraction
- Summarization providers and response-shape handling
"""

from .config import ReleaseNotesConfig
from .errors import (
    ConfigError,
    EmptyModelResponse,
    ErrorCode,
    NoTagsFound,
    NoticeKind,
    ReleaseNotesError,
    SummarizationError,
    TagNotFound,
    VcsQueryError,
    emit_notice,
)
from .git import GitRepository, build_commit_records, resolve_previous_tag
from .llm import LLMTool, create_llm_tool

__all__ = [
    # Errors and notices
    "ErrorCode",
    "NoticeKind",
    "ReleaseNotesError",
    "ConfigError",
    "NoTagsFound",
    "TagNotFound",
    "VcsQueryError",
    "EmptyModelResponse",
    "SummarizationError",
    "emit_notice",
    # Configuration
    "ReleaseNotesConfig",
    # Concrete tools
    "GitRepository",
    "resolve_previous_tag",
    "build_commit_records",
    "LLMTool",
    "create_llm_tool",
]
