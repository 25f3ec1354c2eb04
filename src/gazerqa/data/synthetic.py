from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

from gazerqa.data.fixations import Fixation


DEFAULT_AOIS = ("A", "B", "C", "D")


def synthetic_scanpath(
    n: int,
    rng: np.random.Generator,
    aois: Sequence[str] = DEFAULT_AOIS,
    revisit_prob: float = 0.3,
    empty_prob: float = 0.0,
    centers: Mapping[str, tuple[float, float]] | None = None,
    jitter_px: float = 20.0,
    mean_duration_ms: float = 250.0,
) -> list[Fixation]:
    """Random AOI scanpath with tunable re-fixation behaviour.

    With probability `revisit_prob` a fixation stays on the previous AOI,
    with probability `empty_prob` it lands outside every AOI, otherwise it
    picks an AOI uniformly. When `centers` is given, each fixation gets x/y
    around its AOI centre with gaussian jitter (outside-AOI fixations have
    no position).
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    if not aois:
        raise ValueError("aois must not be empty")

    out: list[Fixation] = []
    t = 0.0
    prev: str | None = None
    for i in range(n):
        u = float(rng.random())
        if prev is not None and u < revisit_prob:
            label = prev
        elif revisit_prob <= u < revisit_prob + empty_prob:
            label = ""
        else:
            label = str(aois[int(rng.integers(0, len(aois)))])

        x = y = None
        if centers is not None and label in centers:
            cx, cy = centers[label]
            x = float(cx + rng.normal(0.0, jitter_px))
            y = float(cy + rng.normal(0.0, jitter_px))

        out.append(Fixation(id=i + 1, timestamp=t, aoi=(label,), x=x, y=y))
        t += float(rng.exponential(mean_duration_ms))
        prev = label if label else None
    return out
