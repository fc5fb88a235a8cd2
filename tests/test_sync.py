"""
Tests for reconciling local review runs with persisted runs.

Feature: run reconciliation
"""

from datetime import datetime, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from rovex.status import ACTIVE_STATUSES, TERMINAL_STATUSES
from rovex.sync import (
    DEFAULT_RUN_LABEL,
    has_active_review_runs,
    is_optimistic_run_id,
    map_persisted_review_run,
    merge_persisted_review_runs,
    parse_timestamp_ms,
)
from rovex.testing import (
    create_mock_chunk,
    create_mock_persisted_run,
    create_mock_progress_event,
    create_mock_review_run,
)
from rovex.types.diff import FullScope

NOW = 1_000_000


def iso_ms(value: str) -> int:
    return int(datetime.fromisoformat(value).replace(tzinfo=timezone.utc).timestamp() * 1000)


class TestParseTimestamp:
    """Tests for parse_timestamp_ms."""

    def test_zulu_suffix(self) -> None:
        assert parse_timestamp_ms("2026-02-20T00:00:01.000Z") == iso_ms("2026-02-20T00:00:01")

    def test_offset(self) -> None:
        assert parse_timestamp_ms("2026-02-20T02:00:00+02:00") == iso_ms("2026-02-20T00:00:00")

    def test_naive_is_utc(self) -> None:
        assert parse_timestamp_ms("2026-02-20T00:00:00") == iso_ms("2026-02-20T00:00:00")

    def test_invalid_and_empty(self) -> None:
        assert parse_timestamp_ms("not a date") is None
        assert parse_timestamp_ms("") is None
        assert parse_timestamp_ms(None) is None


class TestMapPersistedReviewRun:
    """Tests for map_persisted_review_run."""

    def test_basic_mapping(self) -> None:
        persisted = create_mock_persisted_run(
            run_id="r1",
            status="completed",
            review="All good.",
            ended_at="2026-02-20T00:00:09.000Z",
            diff_truncated=True,
        )
        run = map_persisted_review_run(persisted, now=NOW)

        assert run.id == "r1"
        assert run.status == "completed"
        assert run.scope == FullScope()
        assert run.scope_label == "Full diff"
        assert run.started_at == iso_ms("2026-02-20T00:00:01")
        assert run.ended_at == iso_ms("2026-02-20T00:00:09")
        assert run.review == "All good."
        assert run.model == "gpt-4.1-mini"
        assert run.diff_truncated is True

    def test_unknown_status_maps_to_running(self) -> None:
        run = map_persisted_review_run(create_mock_persisted_run(status="retrying"), now=NOW)
        assert run.status == "running"
        assert run.ended_at is None

    def test_stale_running_resolved_from_events(self) -> None:
        """A running run whose log shows every chunk done becomes completed."""
        persisted = create_mock_persisted_run(
            status="running",
            progress_events=[
                create_mock_progress_event("chunk-complete", total_chunks=2, completed_chunks=1),
                create_mock_progress_event("chunk-complete", total_chunks=2, completed_chunks=2),
            ],
        )
        run = map_persisted_review_run(persisted, now=NOW)

        assert run.status == "completed"
        assert run.ended_at == NOW

    def test_started_at_fallbacks(self) -> None:
        from_created = map_persisted_review_run(
            create_mock_persisted_run(started_at=None, created_at="2026-02-20T00:00:00Z"), now=NOW
        )
        from_now = map_persisted_review_run(
            create_mock_persisted_run(started_at=None, created_at=None), now=NOW
        )

        assert from_created.started_at == iso_ms("2026-02-20T00:00:00")
        assert from_now.started_at == NOW

    def test_blank_scope_label(self) -> None:
        run = map_persisted_review_run(create_mock_persisted_run(scope_label="  "), now=NOW)
        assert run.scope_label == DEFAULT_RUN_LABEL


class TestMergePersistedReviewRuns:
    """Tests for merge_persisted_review_runs."""

    def test_race_recovery_keeps_local_terminal_status(self) -> None:
        """A stale running snapshot does not revert a run the client saw finish."""
        local = create_mock_review_run("r1", "completed", ended_at=200, review="done")
        persisted = create_mock_persisted_run("r1", "running", ended_at=None, review=None)

        merged = merge_persisted_review_runs([local], [persisted], now=NOW)

        assert len(merged) == 1
        assert merged[0].status == "completed"
        assert merged[0].ended_at == 200
        assert merged[0].review == "done"

    def test_race_recovery_prefers_richer_collections(self) -> None:
        local = create_mock_review_run(
            "r1",
            "completed_with_errors",
            ended_at=200,
            chunks=[create_mock_chunk("c1"), create_mock_chunk("c2", chunk_index=2)],
            error="chunk c2 failed",
        )
        persisted = create_mock_persisted_run(
            "r1",
            "running",
            review="partial review",
            chunks=[create_mock_chunk("c1")],
        )

        merged = merge_persisted_review_runs([local], [persisted], now=NOW)[0]

        assert merged.status == "completed_with_errors"
        assert [chunk.id for chunk in merged.chunks] == ["c1", "c2"]
        assert merged.review == "partial review"
        assert merged.error == "chunk c2 failed"

    def test_accepts_legitimate_terminal_update(self) -> None:
        local = create_mock_review_run("r1", "running")
        persisted = create_mock_persisted_run(
            "r1", "completed_with_errors", ended_at="2026-02-20T00:00:05.000Z"
        )

        merged = merge_persisted_review_runs([local], [persisted], now=NOW)

        assert merged[0].status == "completed_with_errors"
        assert merged[0].ended_at == iso_ms("2026-02-20T00:00:05")

    def test_persisted_terminal_wins_over_local_terminal(self) -> None:
        local = create_mock_review_run("r1", "completed", ended_at=200)
        persisted = create_mock_persisted_run("r1", "failed", error="model timeout")

        merged = merge_persisted_review_runs([local], [persisted], now=NOW)

        assert merged[0].status == "failed"
        assert merged[0].error == "model timeout"

    def test_optimistic_run_retained(self) -> None:
        local = create_mock_review_run("run-pending-123", "queued")

        merged = merge_persisted_review_runs([local], [], now=NOW)

        assert merged == [local]

    def test_local_only_runs(self) -> None:
        """Local-only runs survive while active or optimistic and come first."""
        active = create_mock_review_run("r-active", "running")
        finished = create_mock_review_run("r-done", "completed", ended_at=50)
        failed_placeholder = create_mock_review_run("run-pending-9", "failed", ended_at=60)
        persisted = create_mock_persisted_run("r-server", "queued")

        merged = merge_persisted_review_runs(
            [finished, active, failed_placeholder], [persisted], now=NOW
        )

        assert [run.id for run in merged] == ["r-active", "run-pending-9", "r-server"]

    def test_persisted_order_preserved(self) -> None:
        persisted = [
            create_mock_persisted_run("r3", "running"),
            create_mock_persisted_run("r1", "completed"),
            create_mock_persisted_run("r2", "failed"),
        ]
        merged = merge_persisted_review_runs([], persisted, now=NOW)
        assert [run.id for run in merged] == ["r3", "r1", "r2"]

    @given(
        local_status=st.sampled_from(sorted(TERMINAL_STATUSES)),
        persisted_status=st.sampled_from(sorted(ACTIVE_STATUSES)),
        ended_at=st.integers(min_value=1, max_value=10**12),
    )
    @settings(max_examples=100)
    def test_terminal_local_never_regresses(
        self, local_status: str, persisted_status: str, ended_at: int
    ) -> None:
        """
        Property: merge race recovery.

        For any local terminal run and active persisted snapshot of the same
        run, the merged run keeps the local status and end time.
        """
        local = create_mock_review_run("r1", local_status, ended_at=ended_at)
        persisted = create_mock_persisted_run("r1", persisted_status)

        merged = merge_persisted_review_runs([local], [persisted], now=NOW)

        assert merged[0].status == local_status
        assert merged[0].ended_at == ended_at


class TestHelpers:
    """Tests for run list helpers."""

    def test_has_active_review_runs(self) -> None:
        assert not has_active_review_runs([])
        assert not has_active_review_runs([create_mock_review_run(status="canceled")])
        assert has_active_review_runs(
            [create_mock_review_run("a", "failed"), create_mock_review_run("b", "queued")]
        )

    def test_is_optimistic_run_id(self) -> None:
        assert is_optimistic_run_id("run-pending-1718000000000-a1b2c3")
        assert not is_optimistic_run_id("3f2c9a")
