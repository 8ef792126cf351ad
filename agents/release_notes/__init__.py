"""
Release notes agent.

Renders commit records into prompts, plans chunks when a release is too large
for one call, and runs the direct or staged summarization flow.
"""

from .chunking import Chunk, plan_chunks, reduce_oversized_record, serialized_size
from .prompt_builder import (
    format_commit_block,
    render_batch_prompt,
    render_final_prompt,
    render_prompt,
)
from .summarizer import run_staged_summarization

__all__ = [
    "Chunk",
    "plan_chunks",
    "reduce_oversized_record",
    "serialized_size",
    "format_commit_block",
    "render_prompt",
    "render_batch_prompt",
    "render_final_prompt",
    "run_staged_summarization",
]
