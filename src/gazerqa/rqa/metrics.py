from __future__ import annotations

"""RQA metrics for fixation recurrence matrices.

All percentage metrics are in [0, 100]. Line-based metrics are normalised by
MaxDet(N, L) (see `max_line_points`), which does not depend on how much
recurrence the matrix happens to contain.

Every metric returns 0.0 for N < 2 and for any zero denominator; none of them
raise on data edge cases. Metrics only read the matrix.
"""

from typing import Dict, Optional

import numpy as np

from gazerqa.data.fixations import FixationSequence
from gazerqa.rqa.config import DEFAULT_MIN_LINE_LENGTH, DET_LAM_EPS, RQAConfig
from gazerqa.rqa.lines import (
    Direction,
    LineHook,
    LineStats,
    as_binary,
    count_upper_triangle_ones,
    max_line_points,
    scan_lines,
    upper_triangle_points,
)
from gazerqa.rqa.matrix import build_recurrence_matrix


MetricReport = Dict[str, float]

METRIC_NAMES: tuple[str, ...] = (
    "recurrence_rate",
    "determinism",
    "laminarity",
    "horizontal_laminarity",
    "vertical_laminarity",
    "det_lam_difference",
    "consecutive_fixation_ratio",
    "center_of_recurrence_mass",
    "diagonal_line_count",
    "max_diagonal_length",
    "average_diagonal_length",
    "diagonal_entropy",
)


def _size(matrix: np.ndarray) -> int:
    return int(as_binary(matrix).shape[0])


def _percent(num: float, den: float) -> float:
    if den <= 0:
        return 0.0
    return 100.0 * float(num) / float(den)


def _shannon_entropy(counts: np.ndarray) -> float:
    c = np.asarray(counts, dtype=float)
    c = c[c > 0]
    if c.size == 0:
        return 0.0
    p = c / float(np.sum(c))
    return float(-np.sum(p * np.log(p)))


def recurrence_rate(matrix: np.ndarray) -> float:
    """100 * 2R / (N * (N - 1))."""
    n = _size(matrix)
    if n < 2:
        return 0.0
    r = count_upper_triangle_ones(matrix)
    return _percent(2 * r, n * (n - 1))


def diagonal_lines(
    matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH, *, hook: Optional[LineHook] = None
) -> LineStats:
    return scan_lines(matrix, Direction.DIAGONAL, min_length, hook=hook)


def determinism(
    matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH, *, hook: Optional[LineHook] = None
) -> float:
    """Share of MaxDet(N, L) covered by diagonal lines of length >= L."""
    n = _size(matrix)
    if n < 2:
        return 0.0
    stats = diagonal_lines(matrix, min_length, hook=hook)
    return _percent(stats.total, max_line_points(n, min_length))


def horizontal_laminarity(
    matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH, *, hook: Optional[LineHook] = None
) -> float:
    n = _size(matrix)
    if n < 2:
        return 0.0
    stats = scan_lines(matrix, Direction.HORIZONTAL, min_length, hook=hook)
    return _percent(stats.total, max_line_points(n, min_length))


def vertical_laminarity(
    matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH, *, hook: Optional[LineHook] = None
) -> float:
    n = _size(matrix)
    if n < 2:
        return 0.0
    stats = scan_lines(matrix, Direction.VERTICAL, min_length, hook=hook)
    return _percent(stats.total, max_line_points(n, min_length))


def laminarity(
    matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH, *, hook: Optional[LineHook] = None
) -> float:
    """Horizontal plus vertical line points over 2 * MaxDet(N, L).

    Each direction is scanned independently with its own consumption state.
    """
    n = _size(matrix)
    if n < 2:
        return 0.0
    h = scan_lines(matrix, Direction.HORIZONTAL, min_length, hook=hook)
    v = scan_lines(matrix, Direction.VERTICAL, min_length, hook=hook)
    return _percent(h.total + v.total, 2.0 * max_line_points(n, min_length))


def det_lam_balance(det: float, lam: float) -> float:
    """Map (det - lam) / (det + lam) from [-1, 1] onto [0, 100].

    50 means balanced, and is also returned when det + lam is ~0.
    """
    s = float(det) + float(lam)
    if s < DET_LAM_EPS:
        return 50.0
    ratio = (float(det) - float(lam)) / s
    return 50.0 * (ratio + 1.0)


def det_lam_difference(matrix: np.ndarray, min_length: int = DEFAULT_MIN_LINE_LENGTH) -> float:
    if _size(matrix) < 2:
        return 0.0
    return det_lam_balance(determinism(matrix, min_length), laminarity(matrix, min_length))


def consecutive_fixation_ratio(matrix: np.ndarray) -> float:
    """Percentage of fixations i (0..N-2) recurrent with fixation i + 1."""
    n = _size(matrix)
    if n < 2:
        return 0.0
    rows, cols = upper_triangle_points(matrix)
    return _percent(int(np.sum((cols - rows) == 1)), n - 1)


def center_of_recurrence_mass(matrix: np.ndarray) -> float:
    """CORM: 100 * sum(j - i) / ((N - 1) * R) over upper-triangle recurrences.

    Low values mean recurrences are close in time, high values mean they span
    most of the sequence.
    """
    n = _size(matrix)
    if n < 2:
        return 0.0
    rows, cols = upper_triangle_points(matrix)
    if rows.size == 0:
        return 0.0
    return _percent(int(np.sum(cols - rows)), (n - 1) * int(rows.size))


def compute_report(
    matrix: np.ndarray,
    min_length: int = DEFAULT_MIN_LINE_LENGTH,
    *,
    hook: Optional[LineHook] = None,
) -> MetricReport:
    """All metrics for one matrix, keyed in METRIC_NAMES order.

    One scan per direction is shared between the metrics that need it.
    """
    if int(min_length) < 1:
        raise ValueError("min_length must be >= 1")

    n = _size(matrix)
    if n < 2:
        return {name: 0.0 for name in METRIC_NAMES}

    max_det = max_line_points(n, min_length)
    diag = scan_lines(matrix, Direction.DIAGONAL, min_length, hook=hook)
    horiz = scan_lines(matrix, Direction.HORIZONTAL, min_length, hook=hook)
    vert = scan_lines(matrix, Direction.VERTICAL, min_length, hook=hook)

    det = _percent(diag.total, max_det)
    lam = _percent(horiz.total + vert.total, 2.0 * max_det)
    if diag.lengths:
        _, counts = np.unique(np.asarray(diag.lengths), return_counts=True)
        entropy = _shannon_entropy(counts)
    else:
        entropy = 0.0

    return {
        "recurrence_rate": recurrence_rate(matrix),
        "determinism": det,
        "laminarity": lam,
        "horizontal_laminarity": _percent(horiz.total, max_det),
        "vertical_laminarity": _percent(vert.total, max_det),
        "det_lam_difference": det_lam_balance(det, lam),
        "consecutive_fixation_ratio": consecutive_fixation_ratio(matrix),
        "center_of_recurrence_mass": center_of_recurrence_mass(matrix),
        "diagonal_line_count": float(diag.count),
        "max_diagonal_length": float(diag.max_length),
        "average_diagonal_length": float(diag.mean_length),
        "diagonal_entropy": entropy,
    }


def compute_fixation_report(fixations: FixationSequence, config: RQAConfig | None = None) -> MetricReport:
    """Build the recurrence matrix for `fixations` and report every metric."""
    cfg = config or RQAConfig()
    R = build_recurrence_matrix(fixations, cfg)
    return compute_report(R, cfg.min_line_length)
