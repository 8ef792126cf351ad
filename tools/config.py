"""
Release-notes configuration.

Values come from ``RELEASE_NOTES_*`` environment variables (optionally loaded
from ``.env``) and can be overridden by CLI flags. Every value is validated
before any git or model call is made; malformed input raises ``ConfigError``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from tools.errors import ConfigError
from tools.git.diff_extractor import DEFAULT_SOURCE_EXTENSIONS

ENV_PREFIX = "RELEASE_NOTES_"

# Characters kept free in every stage prompt for headers and instructions.
STAGE_OVERHEAD_RESERVE = 2000
MIN_STAGE_CHARS = 4000

# Room for at least one character plus the "..." marker.
MIN_LINE_LENGTH = 4

TRUE_VALUES = {"true", "1", "yes", "y", "on"}


def parse_bool(raw: str | None, default: bool) -> bool:
    """Parse a boolean flag the way CI inputs are usually written."""
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUE_VALUES


def parse_positive_int(name: str, raw: Any, minimum: int = 1) -> int:
    """Parse an integer option and enforce its lower bound.

    Raises:
        ConfigError: Value is not an integer or is below ``minimum``
    """
    if isinstance(raw, bool):
        raise ConfigError(f"{name} must be a positive integer.")
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip(), 10)
        except ValueError as err:
            raise ConfigError(
                f"{name} must be a positive integer (got {raw!r})."
            ) from err
    if value < minimum:
        raise ConfigError(f"{name} must be an integer >= {minimum} (got {value}).")
    return value


def parse_source_extensions(raw: str | Iterable[str]) -> frozenset[str]:
    """Normalize a comma separated (or iterable) list of file extensions.

    ``"py, .RS"`` becomes ``{".py", ".rs"}``.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    extensions = set()
    for item in items:
        ext = item.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        extensions.add(ext)
    if not extensions:
        raise ConfigError("source_extensions must list at least one extension.")
    return frozenset(extensions)


@dataclass(frozen=True)
class ReleaseNotesConfig:
    """Options consumed by the extraction and staging pipeline."""

    max_diff_lines: int = 120  # Lines kept per commit
    max_commits: int = 200  # Commits kept per run (most recent)
    max_stage_chars: int = 400_000  # Characters per summarization call
    max_line_length: int = 300  # Characters per diff line
    source_extensions: frozenset[str] = field(
        default_factory=lambda: DEFAULT_SOURCE_EXTENSIONS
    )
    previous_tag: str | None = None  # Explicit comparison tag
    batch_concurrency: int = 1  # Parallel batch stages
    include_github_notes: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check every option; raises ``ConfigError`` on the first bad one."""
        parse_positive_int("max_diff_lines", self.max_diff_lines)
        parse_positive_int("max_commits", self.max_commits)
        parse_positive_int("max_line_length", self.max_line_length, MIN_LINE_LENGTH)
        parse_positive_int(
            "max_stage_chars",
            self.max_stage_chars,
            STAGE_OVERHEAD_RESERVE + MIN_STAGE_CHARS,
        )
        parse_positive_int("batch_concurrency", self.batch_concurrency)
        if not self.source_extensions:
            raise ConfigError("source_extensions must list at least one extension.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReleaseNotesConfig":
        """Build a config from ``RELEASE_NOTES_*`` variables.

        Args:
            environ: Mapping to read from; defaults to ``os.environ``

        Returns:
            Validated configuration
        """
        env = os.environ if environ is None else environ

        def get(key: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{key}")
            return value if value and value.strip() else None

        values: dict[str, Any] = {}
        for key, name in (
            ("MAX_DIFF_LINES", "max_diff_lines"),
            ("MAX_COMMITS", "max_commits"),
            ("MAX_STAGE_CHARS", "max_stage_chars"),
            ("MAX_LINE_LENGTH", "max_line_length"),
            ("BATCH_CONCURRENCY", "batch_concurrency"),
        ):
            raw = get(key)
            if raw is not None:
                values[name] = parse_positive_int(name, raw)

        extensions = get("SOURCE_EXTENSIONS")
        if extensions is not None:
            values["source_extensions"] = parse_source_extensions(extensions)

        previous_tag = get("PREVIOUS_TAG")
        if previous_tag is not None:
            values["previous_tag"] = previous_tag.strip()

        values["include_github_notes"] = parse_bool(
            get("INCLUDE_GITHUB_NOTES"), False
        )
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "ReleaseNotesConfig":
        """Return a copy with the non-``None`` overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "source_extensions" in changes:
            changes["source_extensions"] = parse_source_extensions(
                changes["source_extensions"]
            )
        return replace(self, **changes)
