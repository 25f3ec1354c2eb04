from __future__ import annotations

import logging

import numpy as np
import pytest

from gazerqa.rqa.lines import (
    Direction,
    count_upper_triangle_ones,
    logging_hook,
    max_line_points,
    scan_lines,
    upper_triangle_points,
)


def _random_symmetric(n: int, p: float, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    U = np.triu((rng.random((n, n)) < p).astype(np.uint8), k=1)
    R = U + U.T
    np.fill_diagonal(R, 1)
    return R


def test_upper_triangle_points_row_major() -> None:
    R = np.ones((3, 3), dtype=np.uint8)
    rows, cols = upper_triangle_points(R)
    assert list(zip(rows.tolist(), cols.tolist())) == [(0, 1), (0, 2), (1, 2)]
    assert count_upper_triangle_ones(R) == 3


def test_count_ignores_diagonal_and_lower_triangle() -> None:
    R = np.eye(4, dtype=np.uint8)
    R[3, 0] = 1
    assert count_upper_triangle_ones(R) == 0
    assert count_upper_triangle_ones(np.zeros((0, 0))) == 0


def test_full_matrix_line_lengths() -> None:
    R = np.ones((5, 5), dtype=np.uint8)
    diag = scan_lines(R, Direction.DIAGONAL, 2)
    horiz = scan_lines(R, Direction.HORIZONTAL, 2)
    vert = scan_lines(R, Direction.VERTICAL, 2)

    assert sorted(diag.lengths) == [2, 3, 4]
    assert sorted(horiz.lengths) == [2, 3, 4]
    assert sorted(vert.lengths) == [2, 3, 4]
    assert diag.total == max_line_points(5, 2) == 9
    assert diag.max_length == 4
    assert diag.count == 3


def test_min_length_one_counts_every_point() -> None:
    R = _random_symmetric(12, 0.3, seed=1)
    r = count_upper_triangle_ones(R)
    for d in Direction:
        assert scan_lines(R, d, 1).total == r


def test_runs_are_maximal_and_broken_by_zeros() -> None:
    R = np.eye(6, dtype=np.uint8)
    # Diagonal k=1 with a gap: (0,1),(1,2) then (3,4),(4,5).
    for i, j in [(0, 1), (1, 2), (3, 4), (4, 5)]:
        R[i, j] = R[j, i] = 1
    stats = scan_lines(R, Direction.DIAGONAL, 2)
    assert stats.lengths == (2, 2)

    stats3 = scan_lines(R, Direction.DIAGONAL, 3)
    assert stats3.lengths == ()
    assert stats3.total == 0


def test_vertical_run_stops_at_matrix_edge_and_horizontal_below_diagonal() -> None:
    R = np.eye(4, dtype=np.uint8)
    R[0, 1:] = 1
    R[1:, 0] = 1
    vert = scan_lines(R, Direction.VERTICAL, 2)
    assert vert.lengths == (3,)
    # Column-wise runs never cross the main diagonal.
    horiz = scan_lines(R, Direction.HORIZONTAL, 2)
    assert horiz.lengths == ()


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_scan_never_exceeds_recurrence_points(seed: int) -> None:
    R = _random_symmetric(30, 0.35, seed=seed)
    r = count_upper_triangle_ones(R)
    for d in Direction:
        for L in (1, 2, 3):
            assert scan_lines(R, d, L).total <= r


def test_scan_does_not_mutate_input_and_is_repeatable() -> None:
    R = _random_symmetric(20, 0.4, seed=9)
    before = R.copy()
    a = scan_lines(R, Direction.DIAGONAL, 2)
    b = scan_lines(R, Direction.DIAGONAL, 2)
    assert a == b
    assert np.array_equal(R, before)


def test_degenerate_sizes() -> None:
    for R in (np.zeros((0, 0)), np.ones((1, 1))):
        for d in Direction:
            s = scan_lines(R, d, 2)
            assert s.total == 0 and s.max_length == 0 and s.mean_length == 0.0


def test_max_line_points() -> None:
    assert max_line_points(0, 2) == 0.0
    assert max_line_points(1, 2) == 0.0
    assert max_line_points(2, 2) == 0.0
    assert max_line_points(3, 2) == 2.0
    assert max_line_points(5, 1) == 10.0


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        scan_lines(np.ones((3, 3)), Direction.DIAGONAL, 0)
    with pytest.raises(ValueError):
        scan_lines(np.ones((2, 3)), Direction.DIAGONAL, 2)


def test_logging_hook_reports_each_line(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("gazerqa.test.lines")
    R = np.ones((4, 4), dtype=np.uint8)
    with caplog.at_level(logging.DEBUG, logger="gazerqa.test.lines"):
        stats = scan_lines(R, Direction.DIAGONAL, 2, hook=logging_hook(logger))
    messages = [r.getMessage() for r in caplog.records if r.name == "gazerqa.test.lines"]
    assert len(messages) == stats.count == 2
    assert messages[0] == "diagonal line at (0, 1) length=3"
