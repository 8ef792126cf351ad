"""
Staged summarization.

When the full prompt fits the stage budget it is submitted once. Otherwise the
commits are split into chunks, each chunk is summarized on its own, and the
batch summaries are merged in one final call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from tools.config import STAGE_OVERHEAD_RESERVE
from tools.errors import ConfigError, NoticeKind, NoticeLogger, emit_notice
from tools.git.diff_extractor import CommitRecord, truncate_line
from tools.llm.prompts import BATCH_SUMMARY, RELEASE_NOTES, PromptManager
from tools.llm.tool import Summarizer

from ..base import (
    BatchSummary,
    SummarizationMode,
    SummarizationResult,
    SummarizationStage,
)
from .chunking import HARD_MESSAGE_FLOOR, Chunk, plan_chunks
from .prompt_builder import (
    AUX_CONTEXT_OVERHEAD,
    render_batch_header,
    render_batch_prompt,
    render_final_prompt,
    render_prompt,
)

DIRECT_LABEL = "release notes"
FINAL_LABEL = "final"


def batch_label(index: int, total: int) -> str:
    return f"batch {index}/{total}"


def chunk_budget(
    current_tag: str,
    previous_tag: str | None,
    commit_count: int,
    max_stage_chars: int,
) -> int:
    """
    Character budget for a chunk's commit blocks.

    The batch header is measured at its widest (index, total and count all at
    ``commit_count``), so every rendered batch prompt stays within
    ``max_stage_chars - STAGE_OVERHEAD_RESERVE``.
    """
    widest_header = render_batch_header(
        current_tag, previous_tag, commit_count, commit_count, commit_count
    )
    budget = max_stage_chars - STAGE_OVERHEAD_RESERVE - len(widest_header)
    if budget < 1:
        raise ConfigError(
            f"max_stage_chars={max_stage_chars} leaves no room for commit content "
            "after the batch header and reserve."
        )
    return budget


def fit_aux_context(
    render: Callable[[str | None], str],
    aux_context: str | None,
    limit: int,
    logger: NoticeLogger,
) -> str | None:
    """
    Cut ``aux_context`` so that ``render(aux_context)`` fits in ``limit``.

    The context is dropped when less than ``HARD_MESSAGE_FLOOR`` characters of
    room remain for it.
    """
    if not aux_context or len(render(aux_context)) <= limit:
        return aux_context

    room = limit - len(render(None)) - AUX_CONTEXT_OVERHEAD
    if room < HARD_MESSAGE_FLOOR:
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"No room left for the additional context (limit {limit}); dropping it.",
        )
        return None
    emit_notice(
        logger,
        NoticeKind.TRUNCATION,
        f"Additional context is {len(aux_context.strip())} chars; "
        f"trimming it to {room} characters.",
    )
    return truncate_line(aux_context.strip(), room)


def fit_final_prompt(
    current_tag: str,
    previous_tag: str | None,
    commit_count: int,
    summaries: Sequence[str],
    aux_context: str | None,
    max_stage_chars: int,
    logger: NoticeLogger,
) -> str:
    """
    Render the merge prompt, shrinking it to ``max_stage_chars`` if needed.

    The extra context keeps the room the summaries do not need, but at least
    half of what the header leaves. Summaries are then trimmed evenly.
    """

    def render(texts: Sequence[str], aux: str | None) -> str:
        return render_final_prompt(current_tag, previous_tag, commit_count, texts, aux)

    prompt = render(summaries, aux_context)
    if len(prompt) <= max_stage_chars:
        return prompt

    empty = [""] * len(summaries)
    bare = len(render(empty, None))
    needed = len(render(summaries, None)) - bare
    aux_limit = max_stage_chars - min(needed, (max_stage_chars - bare) // 2)
    aux_context = fit_aux_context(
        lambda aux: render(empty, aux), aux_context, aux_limit, logger
    )

    overhead = len(render(empty, aux_context))
    per_summary = max(
        (max_stage_chars - overhead) // max(len(summaries), 1), HARD_MESSAGE_FLOOR
    )
    if any(len(summary) > per_summary for summary in summaries):
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Merge prompt is {len(prompt)} chars (limit {max_stage_chars}); "
            f"trimming each batch summary to {per_summary} characters.",
        )
        summaries = [truncate_line(summary, per_summary) for summary in summaries]

    prompt = render(summaries, aux_context)
    if len(prompt) > max_stage_chars:
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Merge prompt still exceeds the limit ({len(prompt)} > "
            f"{max_stage_chars}) after trimming.",
        )
    return prompt


async def _summarize_batches(
    summarizer: Summarizer,
    current_tag: str,
    previous_tag: str | None,
    chunks: Sequence[Chunk],
    instructions: str,
    batch_concurrency: int,
    logger: NoticeLogger,
) -> list[BatchSummary]:
    """Summarize every chunk; results come back in chunk order.

    At most ``batch_concurrency`` calls are in flight. The first failure
    cancels the batches that have not finished and is re-raised.
    """
    total = len(chunks)
    semaphore = asyncio.Semaphore(batch_concurrency)

    async def summarize_chunk(index: int, chunk: Chunk) -> BatchSummary:
        async with semaphore:
            label = batch_label(index, total)
            logger.info(
                f"Summarizing {label}: {len(chunk.records)} commits, "
                f"{chunk.size} chars"
            )
            prompt = render_batch_prompt(
                current_tag, previous_tag, chunk.records, index, total
            )
            text = await summarizer.summarize(prompt, instructions, stage_label=label)
            return BatchSummary(
                index=index, total=total, commit_count=len(chunk.records), text=text
            )

    tasks = [
        asyncio.create_task(summarize_chunk(index, chunk))
        for index, chunk in enumerate(chunks, start=1)
    ]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def run_staged_summarization(
    summarizer: Summarizer,
    current_tag: str,
    previous_tag: str | None,
    records: Sequence[CommitRecord],
    *,
    max_stage_chars: int,
    logger: NoticeLogger,
    aux_context: str | None = None,
    batch_concurrency: int = 1,
    prompt_manager: PromptManager | None = None,
) -> SummarizationResult:
    """
    Produce release notes for ``records``.

    Args:
        summarizer: Model facade used for every stage
        current_tag: Tag being released
        previous_tag: Comparison tag or ``None``
        records: Commit records, oldest first
        max_stage_chars: Maximum characters per submitted prompt
        logger: Receives stage progress and truncation notices
        aux_context: Optional extra context, included in the direct or final
            prompt only
        batch_concurrency: Maximum batch calls in flight
        prompt_manager: Source of stage instructions

    Returns:
        The notes together with the mode and the stages visited

    Raises:
        EmptyModelResponse: A stage returned no text
        SummarizationError: A stage's provider call failed
        ConfigError: The budget leaves no room for content
    """
    prompts = prompt_manager or PromptManager()
    final_instructions = prompts.get_instructions(RELEASE_NOTES)
    stages = [SummarizationStage.PLANNING]

    prompt = render_prompt(current_tag, previous_tag, records, aux_context)
    if not records and len(prompt) > max_stage_chars:
        # Nothing to split; only the extra context can shrink
        aux_context = fit_aux_context(
            lambda aux: render_prompt(current_tag, previous_tag, records, aux),
            aux_context,
            max_stage_chars,
            logger,
        )
        prompt = render_prompt(current_tag, previous_tag, records, aux_context)
    if not records or len(prompt) <= max_stage_chars:
        logger.info(
            f"Prompt is {len(prompt)} chars (limit {max_stage_chars}); "
            "submitting directly"
        )
        stages.append(SummarizationStage.DIRECT_SUBMIT)
        text = await summarizer.summarize(
            prompt, final_instructions, stage_label=DIRECT_LABEL
        )
        stages.append(SummarizationStage.DONE)
        return SummarizationResult(
            text=text, mode=SummarizationMode.DIRECT, chunk_count=1, stages=stages
        )

    budget = chunk_budget(current_tag, previous_tag, len(records), max_stage_chars)
    chunks = plan_chunks(records, budget, logger)
    logger.info(
        f"Prompt is {len(prompt)} chars (limit {max_stage_chars}); "
        f"summarizing {len(records)} commits in {len(chunks)} batches"
    )

    stages.append(SummarizationStage.BATCH_SUMMARIZE)
    summaries = await _summarize_batches(
        summarizer,
        current_tag,
        previous_tag,
        chunks,
        prompts.get_instructions(BATCH_SUMMARY),
        max(batch_concurrency, 1),
        logger,
    )

    stages.append(SummarizationStage.MERGE)
    logger.info(f"Merging {len(summaries)} batch summaries")
    final_prompt = fit_final_prompt(
        current_tag,
        previous_tag,
        len(records),
        [summary.text for summary in summaries],
        aux_context,
        max_stage_chars,
        logger,
    )

    stages.append(SummarizationStage.FINAL_SUBMIT)
    text = await summarizer.summarize(
        final_prompt, final_instructions, stage_label=FINAL_LABEL
    )
    stages.append(SummarizationStage.DONE)
    return SummarizationResult(
        text=text,
        mode=SummarizationMode.STAGED,
        chunk_count=len(chunks),
        batch_summaries=summaries,
        stages=stages,
    )
