import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from tools.config import ReleaseNotesConfig
from tools.errors import ConfigError, ReleaseNotesError
from tools.git.tags import get_tag_from_ref


def _load_env() -> None:
    """Load environment variables from .env if present."""
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate release notes for a git tag with a language model"
    )
    parser.add_argument(
        "--tag", help="Tag to release (default: derived from GITHUB_REF)"
    )
    parser.add_argument("--previous-tag", help="Explicit comparison tag")
    parser.add_argument(
        "--repo-path", default=".", help="Path to git repository (default: current dir)"
    )
    parser.add_argument("--max-diff-lines", type=int, help="Diff lines kept per commit")
    parser.add_argument("--max-commits", type=int, help="Most recent commits kept")
    parser.add_argument(
        "--max-stage-chars", type=int, help="Maximum characters per model call"
    )
    parser.add_argument(
        "--max-line-length", type=int, help="Maximum characters per diff line"
    )
    parser.add_argument(
        "--source-extensions",
        help="Comma-separated extensions whose diffs are included (e.g. .py,.ts)",
    )
    parser.add_argument(
        "--batch-concurrency", type=int, help="Batch summaries run in parallel"
    )
    parser.add_argument(
        "--provider",
        choices=["openai", "anthropic", "mock"],
        help="LLM provider (default: LLM_PROVIDER or openai)",
    )
    parser.add_argument("--model", help="Model name (default: LLM_MODEL)")
    parser.add_argument(
        "--github-repo",
        help="owner/repo for GitHub generated notes (default: GITHUB_REPOSITORY)",
    )
    parser.add_argument(
        "--include-github-notes",
        action="store_true",
        default=None,
        help="Add GitHub generated notes as extra context",
    )
    parser.add_argument(
        "--context-file", help="File whose text is added as extra context"
    )
    parser.add_argument("--output", help="Write notes to this file instead of stdout")
    parser.add_argument(
        "--json", action="store_true", help="Print the run summary as JSON"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    return parser


def _resolve_tag(explicit: str | None) -> str:
    tag = explicit or get_tag_from_ref(os.getenv("GITHUB_REF"))
    if not tag:
        raise ConfigError(
            "No tag given. Pass --tag or run on a tag ref (GITHUB_REF=refs/tags/...)."
        )
    return tag


def _build_notes_client(args: argparse.Namespace, config: ReleaseNotesConfig):
    """Return (client, (owner, repo)) or (None, None) when not configured."""
    if not config.include_github_notes:
        return None, None

    from tools.git.provider_github import GitHubNotesClient, parse_github_repository

    token = os.getenv("GITHUB_TOKEN")
    slug = args.github_repo or os.getenv("GITHUB_REPOSITORY")
    if not token or not slug:
        return None, None
    try:
        repository = parse_github_repository(slug)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return GitHubNotesClient(token=token), repository


def run(args: argparse.Namespace) -> str:
    """Build the pipeline from ``args`` and return the rendered output."""
    from agents.planner import ReleaseNotesOrchestrator
    from tools.git.vcs import GitRepository
    from tools.llm.tool import create_llm_tool, llm_config_from_env

    config = ReleaseNotesConfig.from_env().with_overrides(
        max_diff_lines=args.max_diff_lines,
        max_commits=args.max_commits,
        max_stage_chars=args.max_stage_chars,
        max_line_length=args.max_line_length,
        source_extensions=args.source_extensions,
        batch_concurrency=args.batch_concurrency,
        previous_tag=args.previous_tag,
        include_github_notes=args.include_github_notes,
    )
    tag = _resolve_tag(args.tag)

    aux_context = None
    if args.context_file:
        try:
            aux_context = Path(args.context_file).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read context file: {e}") from e

    provider = args.provider or os.getenv("LLM_PROVIDER", "openai")
    llm_config = llm_config_from_env(provider)
    if args.model:
        llm_config.model = args.model
    logger.info(
        f"Release notes starting (provider={provider}, model={llm_config.model})"
    )
    logger.debug(f"LLM config: {llm_config.to_dict()}")
    summarizer = create_llm_tool(llm_config, provider)

    notes_client, repository = _build_notes_client(args, config)
    orchestrator = ReleaseNotesOrchestrator(
        vcs=GitRepository(args.repo_path),
        summarizer=summarizer,
        config=config,
        logger=logger,
        notes_client=notes_client,
        github_repository=repository,
    )
    state = asyncio.run(orchestrator.generate(tag, aux_context))

    info = summarizer.get_tool_info()
    logger.info(
        f"Model calls: {info['calls']}, tokens used: {info['usage']['total_tokens']}"
    )
    return state.to_json() if args.json else state.notes


def main(argv: list[str] | None = None) -> None:
    """Entry point: generate notes for a tag and print or save them.

    Args:
        argv: Optional list of CLI arguments (for testing). If None, sys.argv is used.
    """
    _load_env()
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        output = run(args)
    except ReleaseNotesError as e:
        logger.error(f"{e.error_code.value}: {e}")
        sys.exit(1)

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info(f"Release notes written to {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
