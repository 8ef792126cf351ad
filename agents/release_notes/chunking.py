"""
Chunk planning for staged summarization.

Commit records are packed greedily, in order, into chunks whose serialized
size stays within a character budget. A record too large for any chunk is
reduced first, one step at a time, each step reported as a truncation notice.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tools.errors import ConfigError, NoticeKind, NoticeLogger, emit_notice
from tools.git.diff_extractor import CommitRecord, truncate_line

from .prompt_builder import BLOCK_SEPARATOR, format_commit_block

# Lower bound for the first message cut (a quarter of the budget otherwise)
MESSAGE_FLOOR = 200
# Message is never cut below this, even if the record then overflows
HARD_MESSAGE_FLOOR = 40


@dataclass(frozen=True)
class Chunk:
    """A contiguous run of commit records and their serialized size."""

    records: tuple[CommitRecord, ...]
    size: int

    @property
    def shas(self) -> tuple[str, ...]:
        return tuple(record.sha for record in self.records)


def block_size(record: CommitRecord) -> int:
    return len(format_commit_block(record))


def serialized_size(records: Sequence[CommitRecord]) -> int:
    """Size of ``records`` rendered as blocks joined by the block separator."""
    if not records:
        return 0
    sizes = [block_size(record) for record in records]
    return sum(sizes) + len(BLOCK_SEPARATOR) * (len(sizes) - 1)


def reduce_oversized_record(
    record: CommitRecord, budget: int, logger: NoticeLogger
) -> CommitRecord:
    """
    Shrink a record whose block exceeds ``budget``.

    Steps, stopping as soon as the block fits:
    1. cut the message to ``max(budget // 4, MESSAGE_FLOOR)`` characters
    2. drop diff lines from the end, one at a time
    3. cut the message to whatever the remaining block leaves room for,
       never below ``HARD_MESSAGE_FLOOR``

    A record that still does not fit is returned as is and will sit alone in
    an over-budget chunk.
    """
    original_size = block_size(record)
    if original_size <= budget:
        return record

    sha = record.short_sha
    message_limit = max(budget // 4, MESSAGE_FLOOR)
    if len(record.message) > message_limit:
        record = record.with_changes(
            message=truncate_line(record.message, message_limit)
        )
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Commit {sha} exceeds the stage budget ({original_size} > {budget} "
            f"chars); message truncated to {message_limit} characters.",
        )
        if block_size(record) <= budget:
            return record

    lines = list(record.diff_lines)
    dropped = 0
    while lines and block_size(record.with_changes(diff_lines=lines)) > budget:
        lines.pop()
        dropped += 1
    if dropped:
        record = record.with_changes(diff_lines=lines)
        if lines:
            detail = f"dropped {dropped} diff lines"
        else:
            detail = f"dropped all {dropped} diff lines"
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Commit {sha}: {detail} to fit the stage budget.",
        )
        if block_size(record) <= budget:
            return record

    overhead = block_size(record.with_changes(message=""))
    message_limit = max(budget - overhead, HARD_MESSAGE_FLOOR)
    if len(record.message) > message_limit:
        record = record.with_changes(
            message=truncate_line(record.message, message_limit)
        )
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Commit {sha}: message truncated to {message_limit} characters "
            "to fit the stage budget.",
        )

    final_size = block_size(record)
    if final_size > budget:
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Commit {sha} still exceeds the stage budget ({final_size} > {budget} "
            "chars) after reduction; it is sent in its own batch.",
        )
    return record


def plan_chunks(
    records: Sequence[CommitRecord], budget: int, logger: NoticeLogger
) -> list[Chunk]:
    """
    Partition ``records`` into ordered chunks of at most ``budget`` characters.

    Concatenating the chunks' records yields every input commit exactly once,
    in input order (reduced records keep their sha and position). Only a
    record that could not be reduced below the budget produces an
    over-budget chunk, and such a chunk holds that record alone.

    Args:
        records: Commit records, oldest first
        budget: Maximum serialized chunk size in characters
        logger: Receives truncation notices

    Returns:
        Chunks in order; empty when ``records`` is empty

    Raises:
        ConfigError: ``budget`` is not positive
    """
    if budget < 1:
        raise ConfigError(f"Chunk budget must be positive (got {budget}).")

    chunks: list[Chunk] = []
    current: list[CommitRecord] = []
    current_size = 0

    for record in records:
        record = reduce_oversized_record(record, budget, logger)
        size = block_size(record)
        if current and current_size + len(BLOCK_SEPARATOR) + size > budget:
            chunks.append(Chunk(records=tuple(current), size=current_size))
            current, current_size = [], 0

        if current:
            current_size += len(BLOCK_SEPARATOR) + size
        else:
            current_size = size
        current.append(record)

    if current:
        chunks.append(Chunk(records=tuple(current), size=current_size))
    return chunks
