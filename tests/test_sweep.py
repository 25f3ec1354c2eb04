from __future__ import annotations

import numpy as np
import pytest

from gazerqa.data.fixations import Fixation, FixationGroup
from gazerqa.data.synthetic import synthetic_scanpath
from gazerqa.orchestrator.sweep import (
    build_grid,
    compute_group_reports,
    compute_windowed_reports,
    summarize_reports,
    sweep,
)
from gazerqa.rqa.config import RQAConfig
from gazerqa.rqa.metrics import METRIC_NAMES


def _groups() -> list[FixationGroup]:
    centers = {"A": (100.0, 100.0), "B": (700.0, 100.0), "C": (400.0, 600.0)}
    out = []
    for k, label in enumerate(["p01", "p02", "p03"]):
        fix = synthetic_scanpath(30, np.random.default_rng(k), aois=("A", "B", "C"), centers=centers)
        out.append(FixationGroup(label=label, fixations=tuple(fix)))
    return out


def test_group_reports_one_row_per_group() -> None:
    df = compute_group_reports(_groups())
    assert df["label"].tolist() == ["p01", "p02", "p03"]
    assert df["n_fixations"].tolist() == [30, 30, 30]
    assert set(METRIC_NAMES).issubset(df.columns)


def test_group_reports_with_degenerate_group() -> None:
    groups = [
        FixationGroup(label="empty"),
        FixationGroup(label="single", fixations=(Fixation(id=1, timestamp=0.0, aoi=("A",)),)),
    ]
    df = compute_group_reports(groups)
    assert (df[list(METRIC_NAMES)] == 0.0).all().all()


def test_windowed_reports() -> None:
    fix = synthetic_scanpath(25, np.random.default_rng(1))
    df = compute_windowed_reports(fix, window_n=10, step_n=5)
    assert df["start"].tolist() == [0, 5, 10, 15]
    assert df["end"].tolist() == [10, 15, 20, 25]
    assert np.all(np.isfinite(df["t_mid_ms"].to_numpy(dtype=float)))
    assert df["recurrence_rate"].between(0.0, 100.0).all()


def test_windowed_reports_short_sequence_uses_single_window() -> None:
    fix = synthetic_scanpath(4, np.random.default_rng(2))
    df = compute_windowed_reports(fix, window_n=10, step_n=5)
    assert len(df) == 1
    assert int(df.loc[0, "end"]) == 4


def test_windowed_reports_validation() -> None:
    with pytest.raises(ValueError):
        compute_windowed_reports([], window_n=1, step_n=1)
    with pytest.raises(ValueError):
        compute_windowed_reports([], window_n=5, step_n=0)


def test_build_grid_collapses_thresholds_for_aoi() -> None:
    cfgs = build_grid(min_line_length=[2, 3], method=["aoi", "proximity"], proximity_threshold=[50.0, 100.0])
    assert len(cfgs) == 2 + 4
    assert RQAConfig(method="proximity", min_line_length=3, proximity_threshold=50.0) in cfgs


def test_sweep_rows_and_summary() -> None:
    groups = _groups()
    cfgs = build_grid(min_line_length=[2, 3], method=["aoi"])
    df = sweep(groups, cfgs)
    assert len(df) == len(cfgs) * len(groups)
    assert list(df.columns[:4]) == ["run_id", "method", "min_line_length", "proximity_threshold"]
    assert sorted(df["run_id"].unique().tolist()) == [1, 2]

    summary = summarize_reports(df)
    assert summary["rows"] == len(df)
    rr = summary["recurrence_rate"]
    assert rr["min"] <= rr["mean"] <= rr["max"]


def test_sweep_empty_grid() -> None:
    assert sweep(_groups(), []).empty
