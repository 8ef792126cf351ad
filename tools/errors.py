"""
Error taxonomy for the release-notes pipeline.

Fatal failures are raised as subclasses of ``ReleaseNotesError``. Non-fatal
conditions (truncation, degraded diff extraction) are never raised: they are
logged through ``emit_notice`` and execution continues with the reduced value.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class ErrorCode(Enum):
    """Standard error codes for fatal pipeline failures."""

    CONFIG_ERROR = "CONFIG_ERROR"
    NO_TAGS_FOUND = "NO_TAGS_FOUND"
    TAG_NOT_FOUND = "TAG_NOT_FOUND"
    VCS_QUERY_ERROR = "VCS_QUERY_ERROR"
    EMPTY_MODEL_RESPONSE = "EMPTY_MODEL_RESPONSE"
    SUMMARIZATION_ERROR = "SUMMARIZATION_ERROR"


class NoticeKind(Enum):
    """Non-fatal notice kinds."""

    TRUNCATION = "TruncationNotice"
    DIFF_DEGRADED = "DiffExtractionDegraded"


class NoticeLogger(Protocol):
    """Anything that can receive informational and warning messages."""

    def info(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def warning(self, message: str, *args: Any, **kwargs: Any) -> Any: ...


def emit_notice(logger: NoticeLogger, kind: NoticeKind, message: str) -> None:
    """Log a non-fatal notice at warning level with its kind as prefix."""
    logger.warning(f"{kind.value}: {message}")


class ReleaseNotesError(Exception):
    """Base class for every fatal pipeline error."""

    error_code: ErrorCode = ErrorCode.CONFIG_ERROR
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error_code": self.error_code.value,
            "error_message": str(self),
            "retryable": self.retryable,
        }


class ConfigError(ReleaseNotesError):
    """Malformed numeric or option input."""

    error_code = ErrorCode.CONFIG_ERROR


class NoTagsFound(ReleaseNotesError):
    """The repository has no tags at all."""

    error_code = ErrorCode.NO_TAGS_FOUND

    def __init__(self) -> None:
        super().__init__(
            "No tags found locally. Ensure the checkout fetched full history and tags."
        )


class TagNotFound(ReleaseNotesError):
    """A named tag is missing from the tag list."""

    error_code = ErrorCode.TAG_NOT_FOUND

    def __init__(self, name: str, role: str = "Tag") -> None:
        self.name = name
        super().__init__(
            f"{role} {name} not found in local tag list. Ensure tags are fetched."
        )


class VcsQueryError(ReleaseNotesError):
    """An underlying version-control command failed."""

    error_code = ErrorCode.VCS_QUERY_ERROR
    retryable = True

    def __init__(self, command: str, details: str = "") -> None:
        self.command = command
        self.details = details
        message = f"{command} failed"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)


class EmptyModelResponse(ReleaseNotesError):
    """The summarizer returned no text for a stage."""

    error_code = ErrorCode.EMPTY_MODEL_RESPONSE

    def __init__(self, stage_label: str) -> None:
        self.stage_label = stage_label
        super().__init__(
            f"Model response for stage '{stage_label}' did not include any text output."
        )


class SummarizationError(ReleaseNotesError):
    """The remote summarization call itself failed."""

    error_code = ErrorCode.SUMMARIZATION_ERROR
    retryable = True

    def __init__(self, message: str, stage_label: str | None = None) -> None:
        self.stage_label = stage_label
        if stage_label:
            message = f"[{stage_label}] {message}"
        super().__init__(message)


__all__ = [
    "ErrorCode",
    "NoticeKind",
    "NoticeLogger",
    "emit_notice",
    "ReleaseNotesError",
    "ConfigError",
    "NoTagsFound",
    "TagNotFound",
    "VcsQueryError",
    "EmptyModelResponse",
    "SummarizationError",
]
