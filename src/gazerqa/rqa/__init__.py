"""Recurrence Quantification Analysis (RQA) of fixation sequences.

Pipeline: fixations -> recurrence matrix (`matrix`) -> line scans (`lines`)
-> metrics (`metrics`).

Core implementation:
- NumPy/SciPy only, pure and synchronous.
"""

from __future__ import annotations

from .config import RQAConfig  # noqa: F401
from .lines import Direction, LineStats, count_upper_triangle_ones, scan_lines  # noqa: F401
from .matrix import build_by_label_overlap, build_by_proximity, build_recurrence_matrix  # noqa: F401
from .metrics import METRIC_NAMES, compute_fixation_report, compute_report  # noqa: F401
