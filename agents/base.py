"""
Base Contracts and Data Structures

This module defines the data structures shared by the release-notes agents:
the stage enum used for progress logging, the staged summarization result and
the orchestrator state carried from tag resolution to the final notes.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tools.git.diff_extractor import CommitRecord


class SummarizationStage(Enum):
    """Stages of one summarization run, in the order they can occur."""

    PLANNING = "planning"
    DIRECT_SUBMIT = "direct_submit"
    BATCH_SUMMARIZE = "batch_summarize"
    MERGE = "merge"
    FINAL_SUBMIT = "final_submit"
    DONE = "done"


class SummarizationMode(Enum):
    """How the notes were produced."""

    DIRECT = "direct"
    STAGED = "staged"


@dataclass(frozen=True)
class BatchSummary:
    """Intermediate summary of one chunk (``index`` is 1-based)."""

    index: int
    total: int
    commit_count: int
    text: str


@dataclass
class SummarizationResult:
    """
    Outcome of a summarization run.

    ``chunk_count`` is 1 in direct mode. ``stages`` lists the stages visited.
    """

    text: str
    mode: SummarizationMode
    chunk_count: int = 1
    batch_summaries: list[BatchSummary] = field(default_factory=list)
    stages: list[SummarizationStage] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": self.mode.value,
            "chunk_count": self.chunk_count,
            "stages": [stage.value for stage in self.stages],
            "batch_summaries": [asdict(summary) for summary in self.batch_summaries],
            "text": self.text,
        }


@dataclass
class ReleaseNotesState:
    """
    State of one release-notes run.

    Filled in by the orchestrator as the pipeline advances; ``result`` is set
    once summarization completes.
    """

    current_tag: str
    previous_tag: str | None = None
    commit_shas: list[str] = field(default_factory=list)
    records: list[CommitRecord] = field(default_factory=list)
    aux_context: str | None = None
    result: SummarizationResult | None = None
    started_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def notes(self) -> str:
        return self.result.text if self.result else ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "current_tag": self.current_tag,
            "previous_tag": self.previous_tag,
            "commit_count": len(self.commit_shas),
            "commits": list(self.commit_shas),
            "has_aux_context": bool(self.aux_context),
            "started_at": self.started_at,
            "result": self.result.to_dict() if self.result else None,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str, ensure_ascii=False)
