import pytest

from agents.release_notes.chunking import (
    HARD_MESSAGE_FLOOR,
    block_size,
    plan_chunks,
    reduce_oversized_record,
    serialized_size,
)
from tools.errors import ConfigError
from tools.git.diff_extractor import CommitRecord


def _record(index: int, lines: int = 5, width: int = 40) -> CommitRecord:
    return CommitRecord(
        sha=f"{index:07d}" + "f" * 33,
        message=f"Commit number {index}",
        diff_lines=tuple(f"src/m{index}.py: +{'x' * width}" for _ in range(lines)),
    )


class TestPlanChunks:
    def test_partition_preserves_every_commit_in_order(self, recording_logger):
        records = [_record(i) for i in range(50)]
        budget = serialized_size(records[:7])

        chunks = plan_chunks(records, budget, recording_logger)

        flattened = [sha for chunk in chunks for sha in chunk.shas]
        assert flattened == [r.sha for r in records]
        assert len(chunks) > 1
        assert all(chunk.size <= budget for chunk in chunks)
        assert all(
            chunk.size == serialized_size(chunk.records) for chunk in chunks
        )
        assert recording_logger.warnings == []

    def test_everything_fits_in_one_chunk(self, recording_logger):
        records = [_record(i) for i in range(3)]
        chunks = plan_chunks(records, 10_000, recording_logger)
        assert len(chunks) == 1
        assert chunks[0].records == tuple(records)

    def test_no_records_means_no_chunks(self, recording_logger):
        assert plan_chunks([], 1000, recording_logger) == []

    def test_budget_must_be_positive(self, recording_logger):
        with pytest.raises(ConfigError):
            plan_chunks([_record(1)], 0, recording_logger)

    def test_oversized_record_is_reduced_and_kept_in_place(self, recording_logger):
        small = [_record(i, lines=1) for i in range(3)]
        huge = _record(99, lines=400, width=100)
        records = [small[0], huge, small[1], small[2]]
        budget = 2_000

        chunks = plan_chunks(records, budget, recording_logger)

        flattened = [r.sha for chunk in chunks for r in chunk.records]
        assert flattened == [r.sha for r in records]
        assert all(chunk.size <= budget for chunk in chunks)
        notices = recording_logger.notices("TruncationNotice")
        assert notices
        assert all("0000099" in notice for notice in notices)


class TestReduceOversizedRecord:
    def test_record_within_budget_is_untouched(self, recording_logger):
        record = _record(1)
        assert reduce_oversized_record(record, 10_000, recording_logger) is record
        assert recording_logger.warnings == []

    def test_long_message_is_cut_first(self, recording_logger):
        record = CommitRecord("a" * 40, "m" * 5_000, ("a.py: +x",))

        reduced = reduce_oversized_record(record, 1_000, recording_logger)

        assert len(reduced.message) == 250
        assert reduced.message.endswith("...")
        assert reduced.diff_lines == record.diff_lines
        assert block_size(reduced) <= 1_000

    def test_diff_lines_dropped_from_the_end(self, recording_logger):
        record = _record(1, lines=100)

        reduced = reduce_oversized_record(record, 800, recording_logger)

        assert 0 < len(reduced.diff_lines) < 100
        assert reduced.diff_lines == record.diff_lines[: len(reduced.diff_lines)]
        assert block_size(reduced) <= 800

    def test_unreducible_record_overflows_with_notice(self, recording_logger):
        record = CommitRecord("b" * 40, "m" * 5_000, ("z" * 50,) * 3)

        reduced = reduce_oversized_record(record, 60, recording_logger)

        assert reduced.diff_lines == ()
        assert len(reduced.message) == HARD_MESSAGE_FLOOR
        assert "still exceeds" in recording_logger.warnings[-1]

    def test_reduced_chunk_holds_only_the_oversized_record(self, recording_logger):
        oversized = CommitRecord("c" * 40, "m" * 5_000, ())
        records = [_record(1, lines=0), oversized, _record(2, lines=0)]
        # Room for a short message but not for the message floor
        budget = block_size(oversized.with_changes(message="")) + 20

        chunks = plan_chunks(records, budget, recording_logger)

        over_budget = [chunk for chunk in chunks if chunk.size > budget]
        assert [len(chunk.records) for chunk in over_budget] == [1]
        assert over_budget[0].records[0].sha == oversized.sha
