"""
Release Notes Generator

Turns the commits between two git tags into end-user release notes with a
language model, splitting large releases into batches that are summarized
separately and then merged.
"""

__version__ = "0.1.0"
__author__ = "Release Notes Generator Team"

__all__ = [
    "__version__",
    "__author__",
]
