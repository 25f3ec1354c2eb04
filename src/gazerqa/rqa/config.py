from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal


Method = Literal["aoi", "proximity"]

METHODS: tuple[str, ...] = ("aoi", "proximity")

DEFAULT_MIN_LINE_LENGTH = 2
DEFAULT_PROXIMITY_THRESHOLD = 100.0  # pixels

# det + lam below this is treated as "no line structure at all".
DET_LAM_EPS = 1e-6


@dataclass(frozen=True)
class RQAConfig:
    """Configuration for fixation RQA.

    method: "aoi" (shared AOI label) or "proximity" (euclidean distance with
    contiguous-group exclusion).
    min_line_length: minimum run length L counted by line-based metrics.
    proximity_threshold: distance threshold for the proximity predicate.
    """

    method: Method = "aoi"
    min_line_length: int = DEFAULT_MIN_LINE_LENGTH
    proximity_threshold: float = DEFAULT_PROXIMITY_THRESHOLD

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(f"Unknown recurrence method: {self.method!r}")
        if int(self.min_line_length) < 1:
            raise ValueError("min_line_length must be >= 1")
        thr = float(self.proximity_threshold)
        if not math.isfinite(thr) or thr <= 0:
            raise ValueError("proximity_threshold must be a finite number > 0")
