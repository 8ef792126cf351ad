"""
Git tools package for the release-notes pipeline.

This package provides tools for:
- Querying tags, commit ranges and per-commit changes
- Resolving the comparison tag for a release
- Turning commits into bounded commit records
"""

from .commits import extract_commit_range
from .diff_extractor import (
    DEFAULT_SOURCE_EXTENSIONS,
    ChangeEntry,
    ChangeKind,
    CommitRecord,
    build_commit_records,
)
from .tags import NO_PREVIOUS_TAG, get_tag_from_ref, resolve_previous_tag
from .vcs import GitRepository, NameStatusEntry, NumstatEntry, VcsQuery

__all__ = [
    "DEFAULT_SOURCE_EXTENSIONS",
    "NO_PREVIOUS_TAG",
    "ChangeEntry",
    "ChangeKind",
    "CommitRecord",
    "GitRepository",
    "NameStatusEntry",
    "NumstatEntry",
    "VcsQuery",
    "build_commit_records",
    "extract_commit_range",
    "get_tag_from_ref",
    "resolve_previous_tag",
]
