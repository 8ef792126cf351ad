"""Tag resolution: pick the comparison tag for a release."""

from __future__ import annotations

from collections.abc import Sequence

from tools.errors import NoTagsFound, NoticeLogger, TagNotFound

TAG_REF_PREFIX = "refs/tags/"

# Returned when the current tag is the oldest one; the range then covers
# everything reachable from the current tag.
NO_PREVIOUS_TAG: None = None


def get_tag_from_ref(ref: str | None) -> str | None:
    """Return the tag name for a ``refs/tags/<name>`` ref, else ``None``."""
    if not ref or not ref.startswith(TAG_REF_PREFIX):
        return None
    return ref[len(TAG_REF_PREFIX) :] or None


def resolve_previous_tag(
    tags: Sequence[str],
    current_tag: str,
    override: str | None,
    logger: NoticeLogger,
) -> str | None:
    """
    Resolve the tag to compare ``current_tag`` against.

    Tags sharing a creation timestamp keep the order the listing produced;
    no secondary sort is applied.

    Args:
        tags: All tags ordered by creation date, newest first
        current_tag: Tag being released
        override: Explicit comparison tag, if any
        logger: Receives the "no previous tag" notice

    Returns:
        The nearest older tag, or ``NO_PREVIOUS_TAG`` when ``current_tag`` is
        the oldest tag

    Raises:
        TagNotFound: ``override`` or ``current_tag`` is not in ``tags``
        NoTagsFound: ``tags`` is empty and no override was given
    """
    if override:
        if override not in tags:
            raise TagNotFound(override, role="Override previous tag")
        return override

    if not tags:
        raise NoTagsFound()

    try:
        index = list(tags).index(current_tag)
    except ValueError as err:
        raise TagNotFound(current_tag) from err

    if index + 1 >= len(tags):
        logger.info("No previous tag found; comparing against the empty tree.")
        return NO_PREVIOUS_TAG

    return tags[index + 1]
