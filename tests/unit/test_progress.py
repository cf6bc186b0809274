"""Unit tests for progress derivation."""

import pytest

from booktrans.core.models import Job, WorkUnit
from booktrans.core.progress import compute_progress


@pytest.mark.parametrize("completed, total, expected", [
    (0, 4, 0),
    (1, 4, 25),
    (2, 4, 50),
    (4, 4, 100),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),
    (0, 0, 100),
    (5, 4, 100),
    (-1, 4, 0),
])
def test_compute_progress(completed, total, expected):
    assert compute_progress(completed, total) == expected


class TestJobProgress:

    def _job(self, total):
        units = [WorkUnit(text=f"S{i}.") for i in range(total)]
        return Job(owner_id="book1", title="Book", pending_units=units,
                   batch_size=2, total_units=total, initial_pending=list(units))

    def test_set_completed_refreshes_percent(self):
        job = self._job(4)
        job.set_completed(3)
        assert job.completed_units == 3
        assert job.progress_percent == 75

    def test_set_completed_is_clamped(self):
        job = self._job(4)
        job.set_completed(9)
        assert job.completed_units == 4
        assert job.progress_percent == 100

    def test_initial_cache_hits(self):
        job = self._job(4)
        job.total_units = 6
        assert job.initial_cache_hits == 2

    def test_to_dict(self):
        job = self._job(4)
        job.set_completed(1)
        data = job.to_dict()
        assert data["status"] == "running"
        assert data["pending_units"] == 4
        assert data["progress_percent"] == 25
        assert data["ended_at"] is None
        assert data["elapsed_seconds"] >= 0

    def test_elapsed_uses_end_time(self):
        job = self._job(1)
        job.started_at = 100.0
        job.ended_at = 112.5
        assert job.elapsed_seconds() == 12.5
