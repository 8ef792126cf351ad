"""Commit range extraction between two tags."""

from __future__ import annotations

from tools.errors import NoticeKind, NoticeLogger, emit_notice
from tools.git.vcs import VcsQuery


def extract_commit_range(
    vcs: VcsQuery,
    previous_tag: str | None,
    current_tag: str,
    max_commits: int,
    logger: NoticeLogger,
) -> list[str]:
    """
    List the commit shas released by ``current_tag``, oldest first.

    The range is ``previous_tag..current_tag``, or everything reachable from
    ``current_tag`` when there is no previous tag. An empty range is not an
    error.

    Args:
        vcs: Version-control query port
        previous_tag: Comparison tag or ``None``
        current_tag: Tag being released
        max_commits: Maximum number of commits to keep
        logger: Receives the truncation notice

    Returns:
        At most ``max_commits`` shas; when the range is larger the most recent
        ones are kept

    Raises:
        VcsQueryError: The log query failed
    """
    commits = vcs.list_commits(previous_tag, current_tag)
    if len(commits) > max_commits:
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Found {len(commits)} commits; "
            f"truncating to the most recent {max_commits}.",
        )
        return commits[len(commits) - max_commits :]
    return commits
