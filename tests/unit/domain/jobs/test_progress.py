"""Tests for compute_progress."""

import pytest

from sheetjobs.domain.jobs.progress import compute_progress


@pytest.mark.parametrize(
    "processed, failed, total, expected",
    [
        (0, 0, 3, 0),
        (1, 0, 3, 33),
        (1, 1, 3, 66),
        (2, 1, 3, 100),
        (29, 0, 100, 29),
        (0, 1, 7, 14),
        (0, 0, 0, 0),
        (5, 0, -1, 0),
        (10, 5, 10, 100),
    ],
)
def test_compute_progress(processed, failed, total, expected):
    """Test floor((processed + failed) / total * 100), clamped to 0-100."""
    assert compute_progress(processed, failed, total) == expected


def test_compute_progress_is_monotonic_over_a_run():
    """Test progress never decreases while records are attempted."""
    total = 17
    values = [compute_progress(i, 0, total) for i in range(total + 1)]

    assert values == sorted(values)
    assert values[-1] == 100
