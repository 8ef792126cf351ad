from __future__ import annotations

import asyncio
from typing import Protocol

from tools.config import ReleaseNotesConfig
from tools.errors import NoticeLogger
from tools.git.commits import extract_commit_range
from tools.git.diff_extractor import build_commit_records
from tools.git.tags import resolve_previous_tag
from tools.git.vcs import VcsQuery
from tools.llm.prompts import PromptManager
from tools.llm.tool import Summarizer

from .base import ReleaseNotesState
from .release_notes.summarizer import run_staged_summarization

GITHUB_NOTES_HEADING = "GitHub auto-generated notes:"


class NotesClient(Protocol):
    """Source of hosting-provider generated notes used as extra context."""

    def generate_release_notes(
        self,
        owner: str,
        repo: str,
        tag_name: str,
        previous_tag: str | None = None,
        target_commitish: str | None = None,
        timeout: int = 10,
    ) -> str: ...


class ReleaseNotesOrchestrator:
    """End-to-end release-notes pipeline.

    Resolves the comparison tag, collects the commit range, builds bounded
    commit records and hands them to the staged summarizer. Every fatal
    condition surfaces as a ``ReleaseNotesError``; the optional GitHub notes
    lookup is the only step whose failure is tolerated.
    """

    def __init__(
        self,
        vcs: VcsQuery,
        summarizer: Summarizer,
        config: ReleaseNotesConfig,
        logger: NoticeLogger,
        notes_client: NotesClient | None = None,
        github_repository: tuple[str, str] | None = None,
        prompt_manager: PromptManager | None = None,
    ) -> None:
        self.vcs = vcs
        self.summarizer = summarizer
        self.config = config
        self.logger = logger
        self.notes_client = notes_client
        self.github_repository = github_repository
        self.prompt_manager = prompt_manager or PromptManager()

    async def initialize_workflow(
        self, current_tag: str, aux_context: str | None = None
    ) -> ReleaseNotesState:
        """Resolve tags and collect commit records for ``current_tag``.

        Args:
            current_tag: Tag being released
            aux_context: Extra context supplied by the caller, if any

        Returns:
            State holding the previous tag, commit shas and records

        Raises:
            NoTagsFound: The repository has no tags
            TagNotFound: ``current_tag`` or the configured previous tag is missing
            VcsQueryError: A required git query failed
        """
        # GitPython calls block, so the history walk runs in a worker thread
        return await asyncio.to_thread(self._read_history, current_tag, aux_context)

    def _read_history(
        self, current_tag: str, aux_context: str | None
    ) -> ReleaseNotesState:
        if self.vcs.is_shallow():
            self.logger.warning(
                "Repository is a shallow clone; tags and history may be incomplete. "
                "Fetch full history (fetch-depth: 0) for accurate notes."
            )

        tags = self.vcs.list_tags()
        previous_tag = resolve_previous_tag(
            tags, current_tag, self.config.previous_tag, self.logger
        )
        self.logger.info(
            f"Generating notes for {current_tag} "
            f"(previous tag: {previous_tag or 'none'})"
        )

        shas = extract_commit_range(
            self.vcs, previous_tag, current_tag, self.config.max_commits, self.logger
        )
        if not shas:
            self.logger.warning(
                f"No commits found between {previous_tag or 'repository start'} "
                f"and {current_tag}."
            )

        records = build_commit_records(
            self.vcs,
            shas,
            max_diff_lines=self.config.max_diff_lines,
            max_line_length=self.config.max_line_length,
            source_extensions=self.config.source_extensions,
            logger=self.logger,
        )
        return ReleaseNotesState(
            current_tag=current_tag,
            previous_tag=previous_tag,
            commit_shas=list(shas),
            records=records,
            aux_context=aux_context,
        )

    async def collect_github_notes(self, state: ReleaseNotesState) -> None:
        """Append GitHub generated notes to the state's extra context.

        Only runs when enabled and a client and repository are configured.
        Failures are logged and the run continues without the notes.
        """
        if not self.config.include_github_notes:
            return
        if self.notes_client is None or self.github_repository is None:
            self.logger.warning(
                "GitHub notes requested but no token or repository is configured; "
                "continuing without them."
            )
            return

        owner, repo = self.github_repository
        try:
            # Network I/O runs in a thread to keep the event loop free
            notes = await asyncio.to_thread(
                self.notes_client.generate_release_notes,
                owner,
                repo,
                state.current_tag,
                state.previous_tag,
            )
        except (RuntimeError, ValueError) as e:
            self.logger.warning(f"Failed to fetch GitHub generated notes: {e}")
            return

        if not notes.strip():
            return
        section = f"{GITHUB_NOTES_HEADING}\n{notes.strip()}"
        if state.aux_context and state.aux_context.strip():
            state.aux_context = f"{state.aux_context.strip()}\n\n{section}"
        else:
            state.aux_context = section

    async def run_pipeline(self, state: ReleaseNotesState) -> ReleaseNotesState:
        """Summarize the state's records and attach the result.

        Raises:
            EmptyModelResponse: A stage returned no text
            SummarizationError: A provider call failed
        """
        await self.collect_github_notes(state)
        state.result = await run_staged_summarization(
            self.summarizer,
            state.current_tag,
            state.previous_tag,
            state.records,
            max_stage_chars=self.config.max_stage_chars,
            logger=self.logger,
            aux_context=state.aux_context,
            batch_concurrency=self.config.batch_concurrency,
            prompt_manager=self.prompt_manager,
        )
        self.logger.info(
            f"Release notes ready ({state.result.mode.value}, "
            f"{state.result.chunk_count} batch(es), {len(state.records)} commits)"
        )
        return state

    async def generate(
        self, current_tag: str, aux_context: str | None = None
    ) -> ReleaseNotesState:
        """Run the whole pipeline for ``current_tag``."""
        state = await self.initialize_workflow(current_tag, aux_context)
        return await self.run_pipeline(state)
