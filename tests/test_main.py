import pytest
from loguru import logger

import main
from agents.base import ReleaseNotesState, SummarizationMode, SummarizationResult


class StubOrchestrator:
    last_init: dict = {}

    def __init__(self, **kwargs):
        StubOrchestrator.last_init = kwargs

    async def generate(self, tag, aux_context=None):
        state = ReleaseNotesState(current_tag=tag, aux_context=aux_context)
        state.result = SummarizationResult(
            text=f"notes for {tag}", mode=SummarizationMode.DIRECT
        )
        return state


@pytest.fixture
def stub_pipeline(monkeypatch):
    monkeypatch.setattr("agents.planner.ReleaseNotesOrchestrator", StubOrchestrator)
    monkeypatch.setattr("tools.git.vcs.GitRepository", lambda path: f"repo:{path}")
    monkeypatch.setattr(main, "_configure_logging", lambda verbose: None)
    for name in ("GITHUB_REF", "LLM_PROVIDER", "RELEASE_NOTES_MAX_COMMITS"):
        monkeypatch.delenv(name, raising=False)


def test_prints_notes_for_explicit_tag(stub_pipeline, capsys):
    main.main(["--tag", "v1.2.0", "--provider", "mock"])
    assert capsys.readouterr().out.strip() == "notes for v1.2.0"
    assert StubOrchestrator.last_init["vcs"] == "repo:."


def test_tag_from_github_ref_and_output_file(stub_pipeline, monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_REF", "refs/tags/v3.0.0")
    context = tmp_path / "context.md"
    context.write_text("extra", encoding="utf-8")
    output = tmp_path / "notes.md"

    main.main(
        [
            "--provider",
            "mock",
            "--context-file",
            str(context),
            "--max-commits",
            "7",
            "--output",
            str(output),
        ]
    )

    assert output.read_text(encoding="utf-8") == "notes for v3.0.0\n"
    assert StubOrchestrator.last_init["config"].max_commits == 7


def test_missing_tag_exits_with_error(stub_pipeline):
    with pytest.raises(SystemExit) as exc_info:
        main.main(["--provider", "mock"])
    assert exc_info.value.code == 1


def test_invalid_option_exits_with_error(stub_pipeline):
    with pytest.raises(SystemExit) as exc_info:
        main.main(["--tag", "v1", "--provider", "mock", "--max-line-length", "2"])
    assert exc_info.value.code == 1


def test_model_usage_is_logged(stub_pipeline):
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="INFO", format="{message}")
    try:
        main.main(["--tag", "v1", "--provider", "mock"])
    finally:
        logger.remove(sink_id)

    assert any("Model calls: 0, tokens used: 0" in m for m in messages)
