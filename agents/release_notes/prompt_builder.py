"""Prompt rendering for release-notes stages.

All functions here are pure: the same inputs always render the same string.
"""

from __future__ import annotations

from collections.abc import Sequence

from tools.git.diff_extractor import CommitRecord

BLOCK_SEPARATOR = "\n\n"
NO_DIFF_PLACEHOLDER = "(No diff content available)"
NO_COMMITS_PLACEHOLDER = (
    "No commits were found between the previous and current tag.\n"
    "Write a short placeholder release note that explains there are no code changes."
)
AUX_CONTEXT_HEADING = "Additional context (do not quote verbatim):"
# Separator, heading and newline added in front of the context text
AUX_CONTEXT_OVERHEAD = len(BLOCK_SEPARATOR) + len(AUX_CONTEXT_HEADING) + 1


def format_commit_block(record: CommitRecord) -> str:
    """Render one commit: short sha, message, then its change lines."""
    diff_lines = record.diff_lines or (NO_DIFF_PLACEHOLDER,)
    diff_text = "\n".join(f"- {line}" for line in diff_lines)
    return "\n".join(
        [
            f"Commit {record.short_sha}",
            "The following changes had this commit message:",
            record.message,
            "",
            "The changes in this commit were:",
            diff_text,
        ]
    )


def join_blocks(blocks: Sequence[str]) -> str:
    return BLOCK_SEPARATOR.join(blocks)


def render_header(
    current_tag: str,
    previous_tag: str | None,
    commit_count: int,
    extra_lines: Sequence[str] = (),
) -> str:
    """Render the tag header; always ends with a blank line."""
    lines = [
        f"Release tag: {current_tag}",
        f"Previous tag: {previous_tag}" if previous_tag else "Previous tag: (none)",
        f"Commit count: {commit_count}",
        *extra_lines,
        "",
    ]
    return "\n".join(lines)


def _with_aux_context(prompt: str, aux_context: str | None) -> str:
    if aux_context and aux_context.strip():
        return f"{prompt}{BLOCK_SEPARATOR}{AUX_CONTEXT_HEADING}\n{aux_context.strip()}"
    return prompt


def render_prompt(
    current_tag: str,
    previous_tag: str | None,
    records: Sequence[CommitRecord],
    aux_context: str | None = None,
) -> str:
    """
    Render the single-call prompt for a release.

    Args:
        current_tag: Tag being released
        previous_tag: Comparison tag, or ``None`` when there is none
        records: Commit records, oldest first
        aux_context: Optional free text appended after the commits

    Returns:
        The prompt text
    """
    header = render_header(current_tag, previous_tag, len(records))
    if records:
        body = join_blocks([format_commit_block(record) for record in records])
    else:
        body = NO_COMMITS_PLACEHOLDER
    return _with_aux_context(f"{header}{body}", aux_context)


def render_batch_header(
    current_tag: str,
    previous_tag: str | None,
    index: int,
    total: int,
    commit_count: int,
) -> str:
    return render_header(
        current_tag,
        previous_tag,
        commit_count,
        extra_lines=[f"Batch: {index} of {total}"],
    )


def render_batch_prompt(
    current_tag: str,
    previous_tag: str | None,
    records: Sequence[CommitRecord],
    index: int,
    total: int,
) -> str:
    """Render the prompt for one batch of commits (1-based ``index``)."""
    header = render_batch_header(current_tag, previous_tag, index, total, len(records))
    return f"{header}{join_blocks([format_commit_block(r) for r in records])}"


def format_batch_section(index: int, total: int, summary: str) -> str:
    return f"Summary of batch {index} of {total}:\n{summary}"


def render_final_prompt(
    current_tag: str,
    previous_tag: str | None,
    commit_count: int,
    batch_summaries: Sequence[str],
    aux_context: str | None = None,
) -> str:
    """
    Render the merge prompt: the release header followed by one section per
    batch summary, in batch order.
    """
    total = len(batch_summaries)
    header = render_header(
        current_tag,
        previous_tag,
        commit_count,
        extra_lines=[f"Batch summaries: {total}"],
    )
    body = join_blocks(
        [
            format_batch_section(index, total, summary)
            for index, summary in enumerate(batch_summaries, start=1)
        ]
    )
    return _with_aux_context(f"{header}{body}", aux_context)
