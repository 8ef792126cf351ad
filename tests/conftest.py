import pytest

from tests.fakes import RecordingLogger


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
