from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class Fixation:
    """One gaze fixation.

    `aoi` holds zero or more AOI labels; an empty string means "no AOI".
    Several labels model overlapping regions.
    """

    id: int
    timestamp: float
    aoi: tuple[str, ...] = ()
    x: Optional[float] = None
    y: Optional[float] = None

    def __post_init__(self) -> None:
        # Accept any iterable of labels but store an immutable tuple.
        if isinstance(self.aoi, str):
            object.__setattr__(self, "aoi", (self.aoi,))
        elif not isinstance(self.aoi, tuple):
            object.__setattr__(self, "aoi", tuple(self.aoi))

    @property
    def labels(self) -> frozenset[str]:
        """Non-empty AOI labels."""
        return frozenset(a for a in self.aoi if a != "")

    @property
    def has_position(self) -> bool:
        return _is_number(self.x) and _is_number(self.y)


# Index order is temporal order; nothing in the package re-sorts it.
FixationSequence = Sequence[Fixation]


@dataclass(frozen=True)
class FixationGroup:
    """A labelled fixation sequence (one participant, trial or file)."""

    label: str
    fixations: tuple[Fixation, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.fixations)


def _is_number(v: Any) -> bool:
    if v is None:
        return False
    try:
        return bool(np.isfinite(float(v)))
    except (TypeError, ValueError):
        return False


def _split_aoi(value: Any) -> tuple[str, ...]:
    if value is None:
        return ("",)
    if isinstance(value, float) and not np.isfinite(value):
        return ("",)
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(";"))
    return tuple(str(part).strip() for part in value)


def _optional_float(v: Any) -> Optional[float]:
    return float(v) if _is_number(v) else None


def fixations_from_records(records: Iterable[Mapping[str, Any]]) -> list[Fixation]:
    """Build fixations from mappings with id, timestamp, aoi and optional x/y.

    `aoi` may be a list of labels or a ';'-separated string. A missing id
    defaults to the 1-based position. x and y are kept only when both are
    finite numbers.
    """
    out: list[Fixation] = []
    for pos, rec in enumerate(records, start=1):
        x = _optional_float(rec.get("x"))
        y = _optional_float(rec.get("y"))
        if x is None or y is None:
            x = y = None
        raw_id = rec.get("id")
        out.append(
            Fixation(
                id=int(raw_id) if _is_number(raw_id) else pos,
                timestamp=float(rec.get("timestamp", 0.0)),
                aoi=_split_aoi(rec.get("aoi")),
                x=x,
                y=y,
            )
        )
    return out


def fixations_from_frame(df: pd.DataFrame) -> list[Fixation]:
    """Build fixations from a dataframe with canonical column names."""
    cols = [c for c in ("id", "timestamp", "aoi", "x", "y") if c in df.columns]
    return fixations_from_records(df[cols].to_dict(orient="records"))


def coordinates(fixations: FixationSequence) -> np.ndarray:
    """(N, 2) float array of positions; NaN where a fixation has none."""
    xy = np.full((len(fixations), 2), np.nan, dtype=float)
    for i, f in enumerate(fixations):
        if f.has_position:
            xy[i, 0] = float(f.x)  # type: ignore[arg-type]
            xy[i, 1] = float(f.y)  # type: ignore[arg-type]
    return xy
