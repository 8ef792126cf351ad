"""
GitHub provider utility for fetching auto-generated release notes.

The generated notes are only auxiliary context for the release-notes prompt,
so every failure here is reported to the caller as a ``RuntimeError`` that the
pipeline downgrades to a warning. Transient failures are retried with
exponential backoff; authentication errors are not.

The implementation intentionally uses the `requests` library for clarity.
"""

from __future__ import annotations

import re
import time
from typing import Any

import requests
from loguru import logger


def parse_github_repository(slug_or_url: str) -> tuple[str, str]:
    """Parse a GitHub repository reference and return (owner, repo).

    Supported forms include:
      - owner/repo (the ``GITHUB_REPOSITORY`` format)
      - https://github.com/{owner}/{repo}[.git]
      - git@github.com:{owner}/{repo}.git

    Raises ValueError if parsing fails.
    """
    if not slug_or_url:
        raise ValueError("Empty GitHub repository reference")

    m = re.search(r"github\.com[/:]([^/]+)/([^/]+?)(?:\.git)?/?$", slug_or_url)
    if m:
        return m.group(1), m.group(2)

    m2 = re.fullmatch(r"([\w.-]+)/([\w.-]+)", slug_or_url.strip())
    if m2:
        return m2.group(1), m2.group(2)

    raise ValueError(f"Unable to parse GitHub repository: {slug_or_url}")


class GitHubNotesClient:
    """Client for GitHub's "generate release notes" endpoint.

    Usage:
        client = GitHubNotesClient(token=os.getenv("GITHUB_TOKEN"))
        body = client.generate_release_notes("owner", "repo", "v1.1.0", "v1.0.0")
    """

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        if not token:
            raise ValueError("GitHub token is required")
        self.token = token
        self.api_url = api_url.rstrip("/")

    def generate_release_notes(
        self,
        owner: str,
        repo: str,
        tag_name: str,
        previous_tag: str | None = None,
        target_commitish: str | None = None,
        timeout: int = 10,
    ) -> str:
        """Return the body of GitHub's generated notes for ``tag_name``.

        Retries transient errors with exponential backoff (3 attempts).
        Raises RuntimeError on persistent failure.
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/releases/generate-notes"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "release-notes-scribe",
        }
        payload: dict[str, Any] = {"tag_name": tag_name}
        if previous_tag:
            payload["previous_tag_name"] = previous_tag
        if target_commitish:
            payload["target_commitish"] = target_commitish

        max_attempts = 3
        for attempt in range(1, max_attempts + 1):
            try:
                logger.debug(f"Requesting generated notes attempt {attempt} to {url}")
                resp = requests.post(
                    url, headers=headers, json=payload, timeout=timeout
                )
                if resp.ok:
                    data = resp.json()
                    if isinstance(data, dict):
                        return str(data.get("body") or "")
                    return ""

                # Authentication/authorization errors should not be retried
                if resp.status_code in (401, 403, 404):
                    raise RuntimeError(
                        f"GitHub rejected generate-notes request: {resp.status_code}"
                    )

                logger.warning(
                    f"Non-ok response generating notes (attempt {attempt}): "
                    f"{resp.status_code} {resp.text}"
                )
            except requests.RequestException as exc:
                logger.warning(
                    f"RequestException generating notes (attempt {attempt}): {exc}"
                )

            if attempt < max_attempts:
                time.sleep(2 ** (attempt - 1))

        raise RuntimeError("Failed to generate release notes after retries")
