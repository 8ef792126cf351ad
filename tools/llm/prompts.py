"""
Prompt management system.

Holds the instruction templates sent alongside each summarization stage. The
instruction text is fixed per template; the stage input is rendered by the
prompt builder in ``agents.release_notes``.
"""

from dataclasses import dataclass

RELEASE_NOTES = "release_notes"
BATCH_SUMMARY = "batch_summary"


@dataclass(frozen=True)
class PromptTemplate:
    """
    Instruction template for one summarization stage.
    """

    name: str  # Template name
    description: str  # Template description
    instructions: str  # Instruction text sent with the stage input


class PromptManager:
    """
    Prompt template manager.

    Manages the instruction templates for the direct, batch and final stages.
    """

    def __init__(self) -> None:
        self._templates: dict[str, PromptTemplate] = {}
        self._load_default_templates()

    def _load_default_templates(self) -> None:
        """Load default prompt templates."""

        # Direct submission and final merge share the same instructions
        release_notes_template = PromptTemplate(
            name=RELEASE_NOTES,
            description="Release notes for end users from commits or batch summaries",
            instructions=(
                "Write concise release notes in Markdown for end users. "
                "Use a '## What's Changed' heading and bullet points. "
                "Prefer user-facing changes over internal refactors. "
                "Do not include code fences."
            ),
        )

        batch_summary_template = PromptTemplate(
            name=BATCH_SUMMARY,
            description="Intermediate bullet summary of one batch of commits",
            instructions=(
                "Summarize the commits in this batch into concise bullet points. "
                "Keep one bullet per meaningful change, note user-facing impact, "
                "and keep breaking changes explicit. "
                "Another step merges these bullets with other batches, so do not "
                "add headings, introductions or conclusions. "
                "Do not include code fences."
            ),
        )

        self._templates = {
            RELEASE_NOTES: release_notes_template,
            BATCH_SUMMARY: batch_summary_template,
        }

    def get_template(self, name: str) -> PromptTemplate:
        """Look up a template by name.

        Raises:
            KeyError: No template with that name
        """
        try:
            return self._templates[name]
        except KeyError:
            raise KeyError(f"Template {name} not found") from None

    def get_instructions(self, name: str) -> str:
        """Return the instruction text of a template."""
        return self.get_template(name).instructions

