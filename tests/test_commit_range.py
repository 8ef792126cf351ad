from tools.git.commits import extract_commit_range

from tests.fakes import FakeVcs


def test_range_within_limit_is_returned_unchanged(recording_logger):
    vcs = FakeVcs(ranges={("v1", "v2"): ["a", "b", "c"]})
    assert extract_commit_range(vcs, "v1", "v2", 10, recording_logger) == [
        "a",
        "b",
        "c",
    ]
    assert recording_logger.warnings == []


def test_range_keeps_most_recent_commits(recording_logger):
    shas = [f"sha{i}" for i in range(250)]
    vcs = FakeVcs(ranges={("v1", "v2"): shas})

    result = extract_commit_range(vcs, "v1", "v2", 200, recording_logger)

    assert result == shas[50:]
    notices = recording_logger.notices("TruncationNotice")
    assert len(notices) == 1
    assert "250" in notices[0] and "200" in notices[0]


def test_range_without_previous_tag(recording_logger):
    vcs = FakeVcs(ranges={(None, "v1"): ["root", "second"]})
    assert extract_commit_range(vcs, None, "v1", 5, recording_logger) == [
        "root",
        "second",
    ]


def test_empty_range_is_not_an_error(recording_logger):
    vcs = FakeVcs()
    assert extract_commit_range(vcs, "v1", "v2", 5, recording_logger) == []
