"""
Change Classifier & Diff Extractor

Turns one commit into a ``CommitRecord``: its message plus a bounded list of
diff lines. For every file touched by the commit it:
- classifies the path as source, non-source or binary
- extracts zero-context added/removed lines for source paths only
- summarizes non-source and binary paths by name
- falls back to a name-status listing when the diff cannot be read
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from tools.errors import NoticeKind, NoticeLogger, VcsQueryError, emit_notice
from tools.git.vcs import NameStatusEntry, NumstatEntry, VcsQuery

DEFAULT_SOURCE_EXTENSIONS = frozenset(
    {
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".py",
        ".go",
        ".rs",
        ".java",
        ".kt",
        ".kts",
        ".swift",
        ".cs",
        ".cpp",
        ".c",
        ".h",
        ".hpp",
        ".m",
        ".mm",
        ".rb",
        ".php",
        ".scala",
        ".lua",
        ".sh",
        ".ps1",
        ".pl",
        ".r",
        ".dart",
        ".sql",
        ".hs",
        ".clj",
        ".cljs",
        ".erl",
        ".ex",
        ".exs",
    }
)

DEFAULT_MAX_LINE_LENGTH = 300
ELLIPSIS = "..."
NO_COMMIT_MESSAGE = "(no commit message)"

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+)$")
_BRACE_RENAME_RE = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")
_SKIPPED_PREFIXES = ("+++", "---", "@@", "\\ No newline")

_FILE_STATUS = {"A": "added", "M": "modified", "D": "deleted"}


class ChangeKind(Enum):
    """How a changed path is represented in the commit record."""

    SOURCE = "source"
    NON_SOURCE = "nonSource"
    BINARY = "binary"


@dataclass(frozen=True)
class ChangeEntry:
    """A classified file change within one commit."""

    path: str
    kind: ChangeKind

    def summary(self) -> str:
        """One-line stand-in used instead of raw diff text."""
        if self.kind is ChangeKind.BINARY:
            return f"{self.path}: binary change (diff omitted)"
        if self.kind is ChangeKind.NON_SOURCE:
            return f"{self.path}: non-source change (diff omitted)"
        return f"{self.path}: source change (diff omitted)"


@dataclass(frozen=True)
class CommitRecord:
    """A commit prepared for prompting."""

    sha: str
    message: str
    diff_lines: tuple[str, ...] = ()

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    def with_changes(
        self, *, message: str | None = None, diff_lines: Sequence[str] | None = None
    ) -> "CommitRecord":
        """Return a new record; records are never mutated in place."""
        return replace(
            self,
            message=self.message if message is None else message,
            diff_lines=self.diff_lines if diff_lines is None else tuple(diff_lines),
        )


def normalize_path(path: str) -> str:
    """Reduce numstat rename notation to the resulting path.

    ``src/{old => new}/a.py`` becomes ``src/new/a.py`` and ``a.py => b.py``
    becomes ``b.py``.
    """
    if "=>" not in path:
        return path
    match = _BRACE_RENAME_RE.match(path)
    if match:
        prefix, _old, new, suffix = match.groups()
        return re.sub(r"/{2,}", "/", f"{prefix}{new}{suffix}").lstrip("/")
    return path.split("=>")[-1].strip()


def is_source_path(path: str, extensions: Collection[str]) -> bool:
    """Check whether ``path`` has one of the recognized source extensions."""
    name = normalize_path(path).lower().rsplit("/", 1)[-1]
    dot_index = name.rfind(".")
    if dot_index == -1:
        return False
    return name[dot_index:] in extensions


def classify_changes(
    entries: Iterable[NumstatEntry], extensions: Collection[str]
) -> list[ChangeEntry]:
    """Classify each numstat row as binary, source or non-source."""
    changes: list[ChangeEntry] = []
    for entry in entries:
        path = normalize_path(entry.path)
        if entry.is_binary:
            kind = ChangeKind.BINARY
        elif is_source_path(path, extensions):
            kind = ChangeKind.SOURCE
        else:
            kind = ChangeKind.NON_SOURCE
        changes.append(ChangeEntry(path=path, kind=kind))
    return changes


def truncate_line(line: str, max_length: int = DEFAULT_MAX_LINE_LENGTH) -> str:
    """Cut ``line`` to ``max_length`` characters, ending with ``...`` when cut."""
    if len(line) <= max_length:
        return line
    return f"{line[: max_length - len(ELLIPSIS)]}{ELLIPSIS}"


def extract_diff_lines(
    diff: str,
    max_lines: int,
    allowed_paths: Collection[str] | None = None,
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> list[str]:
    """
    Keep the added/removed lines of a zero-context unified diff.

    File headers and hunk markers are dropped. Each kept line is truncated to
    ``max_line_length`` and prefixed with its file path.

    Args:
        diff: Output of ``git show --unified=0``
        max_lines: Stop after this many lines
        allowed_paths: Only keep lines for these paths (all when ``None``)
        max_line_length: Per-line character limit before the path prefix

    Returns:
        Lines of the form ``"<path>: +added"`` or ``"<path>: -removed"``
    """
    results: list[str] = []
    current_file = ""
    include_file = True

    for raw_line in diff.split("\n"):
        if len(results) >= max_lines:
            break
        line = raw_line.rstrip("\r")

        if line.startswith("diff --git "):
            match = _DIFF_HEADER_RE.match(line)
            current_file = (match.group(2) or match.group(1)) if match else ""
            include_file = allowed_paths is None or current_file in allowed_paths
            continue

        if not include_file or line.startswith(_SKIPPED_PREFIXES):
            continue

        if not line.startswith(("Binary files ", "+", "-")):
            continue
        entry = truncate_line(line, max_line_length)
        results.append(f"{current_file}: {entry}" if current_file else entry)

    return results


def format_file_status(status: str) -> str:
    """Map a name-status letter to a readable word."""
    if status.startswith("R"):
        return "renamed"
    if status.startswith("C"):
        return "copied"
    return _FILE_STATUS.get(status, status)


def name_status_lines(
    entries: Iterable[NameStatusEntry],
    max_lines: int,
    paths: Collection[str] | None = None,
) -> list[str]:
    """Render name-status rows as ``"<path>: <status>"`` lines."""
    results: list[str] = []
    for entry in entries:
        if paths is not None and entry.path not in paths:
            continue
        results.append(f"{entry.path}: {format_file_status(entry.status)}")
        if len(results) >= max_lines:
            break
    return results


def extract_source_diff(
    vcs: VcsQuery,
    sha: str,
    source_paths: Sequence[str],
    max_lines: int,
    max_line_length: int,
    logger: NoticeLogger,
) -> list[str]:
    """
    Extract diff lines for the source paths of one commit.

    Never raises for git failures: a failed or empty diff degrades to a
    name-status listing, and a failed name-status degrades to per-path
    "source change" summaries.
    """
    short_sha = sha[:7]
    path_set = set(source_paths)
    lines: list[str] = []

    try:
        diff = vcs.unified_diff(sha, source_paths)
        lines = extract_diff_lines(diff, max_lines, path_set, max_line_length)
        if not lines:
            emit_notice(
                logger,
                NoticeKind.DIFF_DEGRADED,
                f"Diff for {short_sha} was empty. Falling back to file summary.",
            )
    except VcsQueryError as e:
        emit_notice(
            logger,
            NoticeKind.DIFF_DEGRADED,
            f"Failed to read diff for {short_sha}: {e}. Falling back to file summary.",
        )

    if lines:
        return lines

    source_summaries = [
        ChangeEntry(path, ChangeKind.SOURCE).summary() for path in source_paths
    ][:max_lines]
    try:
        entries = vcs.name_status(sha)
    except VcsQueryError as e:
        emit_notice(
            logger,
            NoticeKind.DIFF_DEGRADED,
            f"Failed to read file status for {short_sha}: {e}.",
        )
        return source_summaries

    return name_status_lines(entries, max_lines, path_set) or source_summaries


def build_commit_record(
    vcs: VcsQuery,
    sha: str,
    *,
    max_diff_lines: int,
    max_line_length: int,
    source_extensions: Collection[str],
    logger: NoticeLogger,
) -> CommitRecord:
    """Build the record for one commit.

    Raises:
        VcsQueryError: The message or numstat query failed
    """
    message = vcs.commit_message(sha).strip() or NO_COMMIT_MESSAGE
    changes = classify_changes(vcs.numstat(sha), source_extensions)

    source_paths = [c.path for c in changes if c.kind is ChangeKind.SOURCE]
    summaries = [c.summary() for c in changes if c.kind is not ChangeKind.SOURCE]

    diff_lines: list[str] = []
    if source_paths:
        # One extra line so an over-long diff is detected and reported
        diff_lines = extract_source_diff(
            vcs, sha, source_paths, max_diff_lines + 1, max_line_length, logger
        )

    all_lines = diff_lines + summaries
    if len(all_lines) > max_diff_lines:
        emit_notice(
            logger,
            NoticeKind.TRUNCATION,
            f"Commit {sha[:7]} has {len(all_lines)} change lines; "
            f"keeping the first {max_diff_lines}.",
        )
    return CommitRecord(
        sha=sha, message=message, diff_lines=tuple(all_lines[:max_diff_lines])
    )


def build_commit_records(
    vcs: VcsQuery,
    shas: Iterable[str],
    *,
    max_diff_lines: int,
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    source_extensions: Collection[str] = DEFAULT_SOURCE_EXTENSIONS,
    logger: NoticeLogger,
) -> list[CommitRecord]:
    """Build one ``CommitRecord`` per sha, preserving order."""
    return [
        build_commit_record(
            vcs,
            sha,
            max_diff_lines=max_diff_lines,
            max_line_length=max_line_length,
            source_extensions=source_extensions,
            logger=logger,
        )
        for sha in shas
    ]
