from __future__ import annotations

import logging
from dataclasses import replace
from itertools import product
from typing import Any, Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from gazerqa.data.fixations import FixationGroup, FixationSequence
from gazerqa.rqa.config import RQAConfig
from gazerqa.rqa.metrics import METRIC_NAMES, compute_fixation_report


logger = logging.getLogger(__name__)


def build_grid(
    *,
    min_line_length: Iterable[int],
    method: Iterable[str] = ("aoi",),
    proximity_threshold: Iterable[float] = (100.0,),
) -> list[RQAConfig]:
    """Build a Cartesian product grid of RQA configurations.

    Thresholds only matter for the proximity method, so "aoi" configs are not
    repeated once per threshold.
    """
    cfgs: list[RQAConfig] = []
    seen: set[RQAConfig] = set()
    thresholds = [float(t) for t in proximity_threshold]
    for m, L, thr in product(method, min_line_length, thresholds):
        cfg = RQAConfig(method=m, min_line_length=int(L), proximity_threshold=float(thr))  # type: ignore[arg-type]
        if m == "aoi":
            cfg = replace(cfg, proximity_threshold=RQAConfig().proximity_threshold)
        if cfg in seen:
            continue
        seen.add(cfg)
        cfgs.append(cfg)
    return cfgs


def _config_columns(cfg: RQAConfig) -> Dict[str, Any]:
    return {
        "method": cfg.method,
        "min_line_length": int(cfg.min_line_length),
        "proximity_threshold": float(cfg.proximity_threshold),
    }


def compute_group_reports(groups: Sequence[FixationGroup], config: RQAConfig | None = None) -> pd.DataFrame:
    """One row per group: label, n_fixations and every metric."""
    cfg = config or RQAConfig()
    rows: list[Dict[str, Any]] = []
    for g in groups:
        m = compute_fixation_report(g.fixations, cfg)
        rows.append({"label": g.label, "n_fixations": len(g), **m})
    return pd.DataFrame(rows, columns=["label", "n_fixations", *METRIC_NAMES])


def compute_windowed_reports(
    fixations: FixationSequence,
    *,
    window_n: int,
    step_n: int,
    config: RQAConfig | None = None,
) -> pd.DataFrame:
    """Compute every metric over sliding windows of `window_n` fixations.

    Windows start every `step_n` fixations; a sequence shorter than one window
    yields a single window covering all of it.
    """
    if int(window_n) < 2:
        raise ValueError("window_n must be >= 2")
    if int(step_n) < 1:
        raise ValueError("step_n must be >= 1")

    cfg = config or RQAConfig()
    n = len(fixations)
    window_n = int(window_n)
    step_n = int(step_n)
    starts = list(range(0, n - window_n + 1, step_n)) if n >= window_n else [0]
    ts = np.asarray([f.timestamp for f in fixations], dtype=float)

    rows: list[Dict[str, Any]] = []
    for start in starts:
        end = min(start + window_n, n)
        window = fixations[start:end]
        m = compute_fixation_report(window, cfg)
        t_win = ts[start:end]
        t_win = t_win[np.isfinite(t_win)]
        t_mid = float(np.median(t_win)) if t_win.size else float("nan")
        rows.append({"start": start, "end": end, "t_mid_ms": t_mid, **m})

    logger.debug("computed %d windows (window_n=%d, step_n=%d)", len(rows), window_n, step_n)
    return pd.DataFrame(rows, columns=["start", "end", "t_mid_ms", *METRIC_NAMES])


def sweep(groups: Sequence[FixationGroup], cfgs: Sequence[RQAConfig]) -> pd.DataFrame:
    """Run every config over every group.

    Returns one row per (run_id, group) with config columns followed by the
    metric report.
    """
    frames: list[pd.DataFrame] = []
    for run_id, cfg in enumerate(cfgs, start=1):
        df = compute_group_reports(groups, cfg)
        for key, value in reversed(list(_config_columns(cfg).items())):
            df.insert(0, key, value)
        df.insert(0, "run_id", run_id)
        frames.append(df)
        logger.info("run %d: %s over %d groups", run_id, cfg, len(groups))

    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def summarize_reports(df: pd.DataFrame) -> Dict[str, Any]:
    """Mean/std/min/max per metric column present in `df`."""
    summary: Dict[str, Any] = {"rows": int(len(df))}
    for col in METRIC_NAMES:
        if col not in df.columns:
            continue
        s = pd.to_numeric(df[col], errors="coerce")
        s = s[np.isfinite(s)]
        if s.empty:
            continue
        summary[col] = {
            "mean": float(s.mean()),
            "std": float(s.std(ddof=0)),
            "min": float(s.min()),
            "max": float(s.max()),
        }
    return summary
