import pytest
import requests


class FakeResp:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.text = text
        self._payload = payload or {}

    def json(self):
        return self._payload


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("octo/widgets", ("octo", "widgets")),
        ("https://github.com/octo/widgets", ("octo", "widgets")),
        ("https://github.com/octo/widgets.git", ("octo", "widgets")),
        ("git@github.com:octo/widgets.git", ("octo", "widgets")),
    ],
)
def test_parse_github_repository(ref, expected):
    from tools.git.provider_github import parse_github_repository

    assert parse_github_repository(ref) == expected


def test_parse_github_repository_rejects_garbage():
    from tools.git.provider_github import parse_github_repository

    with pytest.raises(ValueError):
        parse_github_repository("not a repo")


def test_generate_notes_happy_path(monkeypatch):
    from tools.git.provider_github import GitHubNotesClient

    called = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        called["url"] = url
        called["headers"] = headers
        called["json"] = json
        return FakeResp(200, {"name": "v2", "body": "## What's Changed\n* x"})

    monkeypatch.setattr("requests.post", fake_post)
    client = GitHubNotesClient(token="tok")
    body = client.generate_release_notes("org", "repo", "v2", previous_tag="v1")

    assert body == "## What's Changed\n* x"
    assert called["url"].endswith("/repos/org/repo/releases/generate-notes")
    assert called["headers"]["Authorization"] == "Bearer tok"
    assert called["json"] == {"tag_name": "v2", "previous_tag_name": "v1"}


def test_generate_notes_auth_failure_is_not_retried(monkeypatch):
    from tools.git.provider_github import GitHubNotesClient

    attempts = []

    def fake_post(url, headers=None, json=None, timeout=None):
        attempts.append(url)
        return FakeResp(403, text="forbidden")

    monkeypatch.setattr("requests.post", fake_post)
    with pytest.raises(RuntimeError):
        GitHubNotesClient(token="tok").generate_release_notes("org", "repo", "v2")
    assert len(attempts) == 1


def test_generate_notes_retries_transient_errors(monkeypatch):
    from tools.git.provider_github import GitHubNotesClient

    responses = [requests.ConnectionError("reset"), FakeResp(502), FakeResp(200)]

    def fake_post(url, headers=None, json=None, timeout=None):
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    sleeps = []
    monkeypatch.setattr("requests.post", fake_post)
    monkeypatch.setattr("time.sleep", sleeps.append)

    body = GitHubNotesClient(token="tok").generate_release_notes("org", "repo", "v2")

    assert body == ""
    assert sleeps == [1, 2]


def test_token_required():
    from tools.git.provider_github import GitHubNotesClient

    with pytest.raises(ValueError):
        GitHubNotesClient(token="")
