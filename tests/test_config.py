import pytest

from tools.config import (
    ReleaseNotesConfig,
    parse_bool,
    parse_positive_int,
    parse_source_extensions,
)
from tools.errors import ConfigError
from tools.git.diff_extractor import DEFAULT_SOURCE_EXTENSIONS


def test_defaults():
    config = ReleaseNotesConfig()
    assert config.max_diff_lines == 120
    assert config.max_commits == 200
    assert config.max_stage_chars == 400_000
    assert config.max_line_length == 300
    assert config.source_extensions == DEFAULT_SOURCE_EXTENSIONS
    assert config.previous_tag is None
    assert config.batch_concurrency == 1
    assert config.include_github_notes is False


def test_from_env_reads_prefixed_variables():
    env = {
        "RELEASE_NOTES_MAX_DIFF_LINES": "50",
        "RELEASE_NOTES_MAX_COMMITS": " 10 ",
        "RELEASE_NOTES_MAX_STAGE_CHARS": "8000",
        "RELEASE_NOTES_SOURCE_EXTENSIONS": "py, .RS",
        "RELEASE_NOTES_PREVIOUS_TAG": "v1.0.0",
        "RELEASE_NOTES_INCLUDE_GITHUB_NOTES": "yes",
        "RELEASE_NOTES_BATCH_CONCURRENCY": "",
    }

    config = ReleaseNotesConfig.from_env(env)

    assert config.max_diff_lines == 50
    assert config.max_commits == 10
    assert config.max_stage_chars == 8000
    assert config.source_extensions == frozenset({".py", ".rs"})
    assert config.previous_tag == "v1.0.0"
    assert config.include_github_notes is True
    assert config.batch_concurrency == 1


def test_overrides_skip_none_values():
    config = ReleaseNotesConfig().with_overrides(
        max_commits=5, previous_tag=None, source_extensions="ts"
    )
    assert config.max_commits == 5
    assert config.previous_tag is None
    assert config.source_extensions == frozenset({".ts"})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_diff_lines": 0},
        {"max_commits": -1},
        {"max_line_length": 3},
        {"max_stage_chars": 5_999},
        {"batch_concurrency": 0},
        {"source_extensions": frozenset()},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ConfigError):
        ReleaseNotesConfig(**kwargs)


def test_malformed_env_value_is_rejected():
    with pytest.raises(ConfigError, match="max_commits"):
        ReleaseNotesConfig.from_env({"RELEASE_NOTES_MAX_COMMITS": "lots"})


def test_parse_positive_int():
    assert parse_positive_int("n", "42") == 42
    assert parse_positive_int("n", 7) == 7
    with pytest.raises(ConfigError):
        parse_positive_int("n", True)
    with pytest.raises(ConfigError):
        parse_positive_int("n", "1.5")


def test_parse_bool():
    assert parse_bool("ON", False) is True
    assert parse_bool("no", True) is False
    assert parse_bool(None, True) is True
    assert parse_bool("  ", False) is False


def test_parse_source_extensions_requires_one():
    assert parse_source_extensions([".Go", "rb"]) == frozenset({".go", ".rb"})
    with pytest.raises(ConfigError):
        parse_source_extensions(" , ")
