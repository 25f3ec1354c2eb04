from __future__ import annotations

"""Line (run) detection over the upper triangle of a recurrence matrix.

Every scan walks the upper-triangle recurrence points in row-major order and
greedily extends a chain from each point not yet consumed by this scan.
Consumption is tracked in a flat N*N bytearray owned by the scan, so two
scans never share state and the input matrix is never modified.

Directions:
- DIAGONAL: step (+1, +1)
- HORIZONTAL: fixed column, increasing row while row < column
- VERTICAL: fixed row, increasing column
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np


class Direction(Enum):
    DIAGONAL = (1, 1)
    HORIZONTAL = (1, 0)
    VERTICAL = (0, 1)

    @property
    def step(self) -> tuple[int, int]:
        return self.value


# hook(direction, row, col, length) is called once per qualifying line.
LineHook = Callable[[Direction, int, int, int], None]


@dataclass(frozen=True)
class LineStats:
    """Qualifying lines found by one scan."""

    direction: Direction
    min_length: int
    lengths: tuple[int, ...] = ()

    @property
    def total(self) -> int:
        return int(sum(self.lengths))

    @property
    def count(self) -> int:
        return len(self.lengths)

    @property
    def max_length(self) -> int:
        return max(self.lengths) if self.lengths else 0

    @property
    def mean_length(self) -> float:
        return float(self.total) / self.count if self.lengths else 0.0


def as_binary(matrix: np.ndarray) -> np.ndarray:
    """Boolean copy of a square recurrence matrix (any non-zero cell is 1)."""
    R = np.asarray(matrix)
    if R.size == 0:
        return np.zeros((0, 0), dtype=bool)
    if R.ndim != 2 or R.shape[0] != R.shape[1]:
        raise ValueError(f"Recurrence matrix must be square, got shape {R.shape}")
    return R != 0


def upper_triangle_points(matrix: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Row and column indices of 1-cells with i < j, in row-major order."""
    R = as_binary(matrix)
    rows, cols = np.nonzero(np.triu(R, k=1))
    return rows, cols


def count_upper_triangle_ones(matrix: np.ndarray) -> int:
    """Recurrence point count R: 1-cells strictly above the main diagonal."""
    rows, _ = upper_triangle_points(matrix)
    return int(rows.size)


def scan_lines(
    matrix: np.ndarray,
    direction: Direction,
    min_length: int = 2,
    *,
    hook: Optional[LineHook] = None,
) -> LineStats:
    """Find every maximal run of length >= min_length along `direction`."""
    if int(min_length) < 1:
        raise ValueError("min_length must be >= 1")
    if not isinstance(direction, Direction):
        raise ValueError(f"Unknown direction: {direction!r}")

    R = as_binary(matrix)
    n = int(R.shape[0])
    min_length = int(min_length)
    if n < 2:
        return LineStats(direction=direction, min_length=min_length)

    cells = R.ravel().tolist()
    consumed = bytearray(n * n)
    di, dj = direction.step
    rows, cols = upper_triangle_points(R)

    lengths: list[int] = []
    for i, j in zip(rows.tolist(), cols.tolist()):
        if consumed[i * n + j]:
            continue
        r, c = i, j
        length = 0
        while r < c < n:
            k = r * n + c
            if not cells[k] or consumed[k]:
                break
            consumed[k] = 1
            length += 1
            r += di
            c += dj
        if length >= min_length:
            lengths.append(length)
            if hook is not None:
                hook(direction, i, j, length)

    return LineStats(direction=direction, min_length=min_length, lengths=tuple(lengths))


def max_line_points(n: int, min_length: int = 2) -> float:
    """MaxDet(N, L) = (N - 1 + L) * (N - L) / 2.

    Upper bound on upper-triangle cells that can lie on a qualifying line of
    length >= L in an N x N matrix; 0 when no such line fits.
    """
    n = int(n)
    L = int(min_length)
    if n < 2 or L >= n:
        return 0.0
    return float((n - 1 + L) * (n - L)) / 2.0


def logging_hook(logger: logging.Logger, level: int = logging.DEBUG) -> LineHook:
    def _hook(direction: Direction, row: int, col: int, length: int) -> None:
        logger.log(level, "%s line at (%d, %d) length=%d", direction.name.lower(), row, col, length)

    return _hook
