"""Version-control query port.

The pipeline never shells out directly; it talks to a ``VcsQuery``
implementation. ``GitRepository`` backs the port with GitPython, and tests
substitute an in-memory fake.

1. Tag listing (newest first) and tag existence checks
2. Commit range enumeration, oldest first
3. Per-commit message, numstat, zero-context diff and name-status
4. Shallow clone probing
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from loguru import logger

from tools.errors import ConfigError, VcsQueryError

# Zero-context diffs of large commits easily exceed a few megabytes.
MAX_DIFF_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class NumstatEntry:
    """One ``git show --numstat`` row."""

    path: str  # as reported; may carry rename notation such as "a/{x => y}.py"
    additions: int | None  # None when git reports "-" (binary)
    deletions: int | None

    @property
    def is_binary(self) -> bool:
        return self.additions is None or self.deletions is None


@dataclass(frozen=True)
class NameStatusEntry:
    """One ``git show --name-status`` row."""

    status: str  # A/M/D or R<score>/C<score>
    path: str  # resulting path for renames and copies


class VcsQuery(Protocol):
    """Protocol for the version-control queries the pipeline needs."""

    def list_tags(self) -> list[str]: ...
    def tag_exists(self, name: str) -> bool: ...
    def list_commits(self, previous_tag: str | None, current_tag: str) -> list[str]: ...
    def commit_message(self, sha: str) -> str: ...
    def numstat(self, sha: str) -> list[NumstatEntry]: ...
    def unified_diff(self, sha: str, paths: Sequence[str]) -> str: ...
    def name_status(self, sha: str) -> list[NameStatusEntry]: ...
    def is_shallow(self) -> bool: ...


def parse_numstat(output: str) -> list[NumstatEntry]:
    """Parse ``--numstat`` output into entries, skipping blank rows."""
    entries: list[NumstatEntry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        additions, deletions = parts[0], parts[1]
        path = "\t".join(parts[2:])
        if not path:
            continue
        entries.append(
            NumstatEntry(
                path=path,
                additions=None if additions == "-" else int(additions),
                deletions=None if deletions == "-" else int(deletions),
            )
        )
    return entries


def parse_name_status(output: str) -> list[NameStatusEntry]:
    """Parse ``--name-status`` output; renames and copies keep the new path."""
    entries: list[NameStatusEntry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        status, *paths = line.split("\t")
        paths = [p for p in paths if p]
        if not paths:
            continue
        entries.append(NameStatusEntry(status=status.strip(), path=paths[-1]))
    return entries


def _clean_text(output: str) -> str:
    """Replace bytes that are not valid UTF-8 with U+FFFD.

    GitPython decodes stdout with ``surrogateescape``, which leaves lone
    surrogates that cannot be encoded again.
    """
    return output.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class GitRepository:
    """GitPython implementation of the ``VcsQuery`` protocol.

    Every ``GitCommandError`` is converted to ``VcsQueryError`` here, except
    for the calls where empty output is a legitimate answer (tag listing,
    tag existence, shallow probing).
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        """
        Open the repository.

        Args:
            repo_path: Git repository path (relative or absolute)

        Raises:
            ConfigError: Path does not exist or is not a Git repository
        """
        self.repo_path = Path(repo_path).resolve()

        if not self.repo_path.is_dir():
            raise ConfigError(f"Repository path is not a directory: {self.repo_path}")

        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as err:
            raise ConfigError(f"Invalid Git repository: {self.repo_path}") from err
        logger.debug(f"Git repository opened: {self.repo_path}")

    def _run(
        self, command: str, *args: str, tolerant: bool = False, **kwargs: Any
    ) -> str:
        """Run ``git <command> <args>`` and return stdout.

        When ``tolerant`` is set a failing command yields ``""`` instead of
        raising.
        """
        try:
            output = getattr(self.repo.git, command.replace("-", "_"))(*args, **kwargs)
            return _clean_text(output)
        except GitCommandError as e:
            if tolerant:
                logger.debug(f"git {command} failed (tolerated): {e}")
                return ""
            details = "\n".join(
                part.strip()
                for part in (str(e.stderr or ""), str(e.stdout or ""))
                if part and part.strip()
            )
            raise VcsQueryError(f"git {command} {' '.join(args)}", details) from e

    def list_tags(self) -> list[str]:
        output = self._run(
            "for-each-ref",
            "--sort=-creatordate",
            "--format=%(refname:short)",
            "refs/tags",
            tolerant=True,
        )
        return [tag.strip() for tag in output.splitlines() if tag.strip()]

    def tag_exists(self, name: str) -> bool:
        output = self._run(
            "rev-parse", "-q", "--verify", f"refs/tags/{name}", tolerant=True
        )
        return bool(output.strip())

    def list_commits(self, previous_tag: str | None, current_tag: str) -> list[str]:
        rev_range = f"{previous_tag}..{current_tag}" if previous_tag else current_tag
        output = self._run("log", "--reverse", "--pretty=format:%H", rev_range)
        return [sha.strip() for sha in output.splitlines() if sha.strip()]

    def commit_message(self, sha: str) -> str:
        return self._run("log", "-1", "--pretty=format:%s%n%n%b", sha).strip()

    def numstat(self, sha: str) -> list[NumstatEntry]:
        return parse_numstat(self._run("show", "--numstat", "--pretty=format:", sha))

    def unified_diff(self, sha: str, paths: Sequence[str]) -> str:
        output = self._run(
            "show",
            "--no-color",
            "--unified=0",
            "--pretty=format:",
            sha,
            "--",
            *paths,
            strip_newline_in_stdout=False,
        )
        if len(output) > MAX_DIFF_BYTES:
            raise VcsQueryError(
                f"git show {sha[:7]}",
                f"diff output exceeds {MAX_DIFF_BYTES} characters",
            )
        return output

    def name_status(self, sha: str) -> list[NameStatusEntry]:
        return parse_name_status(
            self._run("show", "--name-status", "--pretty=format:", sha)
        )

    def is_shallow(self) -> bool:
        output = self._run("rev-parse", "--is-shallow-repository", tolerant=True)
        return output.strip() == "true"


__all__ = [
    "GitRepository",
    "NameStatusEntry",
    "NumstatEntry",
    "VcsQuery",
    "parse_name_status",
    "parse_numstat",
]
