from __future__ import annotations

"""CLI: RQA metric report for one or more fixation exports.

Prints a JSON document to stdout with one report per file (group), a summary
across groups and, with --window-n, per-window reports.

Example
-------
python -m gazerqa.cli.rqa_report \
  --input data/p01.csv data/p02.csv \
  --method proximity --threshold 80 --min-line-length 2
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from gazerqa.data.ingest import load_fixation_groups
from gazerqa.orchestrator.sweep import compute_group_reports, compute_windowed_reports, summarize_reports
from gazerqa.rqa.config import DEFAULT_MIN_LINE_LENGTH, DEFAULT_PROXIMITY_THRESHOLD, METHODS, RQAConfig


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gazerqa.rqa_report", description="RQA metrics for fixation sequences.")
    p.add_argument("--input", required=True, nargs="+", help="Fixation CSV/JSON files (one group per file).")
    p.add_argument("--method", choices=list(METHODS), default="aoi", help="Recurrence predicate.")
    p.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_PROXIMITY_THRESHOLD,
        help="Distance threshold for --method proximity.",
    )
    p.add_argument("--min-line-length", type=int, default=DEFAULT_MIN_LINE_LENGTH)
    p.add_argument("--window-n", type=int, default=None, help="Also report sliding windows of this many fixations.")
    p.add_argument("--step-n", type=int, default=None, help="Window step (default: half the window).")
    p.add_argument("--indent", type=int, default=2)
    p.add_argument("--verbose", action="store_true", help="Debug logging on stderr.")
    return p


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    out = []
    for row in df.to_dict(orient="records"):
        clean: Dict[str, Any] = {}
        for k, v in row.items():
            if isinstance(v, (np.integer,)):
                v = int(v)
            elif isinstance(v, (np.floating, float)):
                v = float(v) if np.isfinite(v) else None
            clean[str(k)] = v
        out.append(clean)
    return out


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = RQAConfig(
            method=args.method,
            min_line_length=int(args.min_line_length),
            proximity_threshold=float(args.threshold),
        )
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}") from e

    try:
        groups = load_fixation_groups(args.input)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(f"Cannot load input: {e}") from e

    reports = compute_group_reports(groups, cfg)
    logger.info("computed reports for %d groups", len(reports))
    doc: Dict[str, Any] = {
        "config": {
            "method": cfg.method,
            "min_line_length": cfg.min_line_length,
            "proximity_threshold": cfg.proximity_threshold,
        },
        "groups": _records(reports),
        "summary": summarize_reports(reports),
    }

    if args.window_n is not None:
        window_n = int(args.window_n)
        step_n = int(args.step_n) if args.step_n is not None else max(1, window_n // 2)
        try:
            doc["windows"] = {
                g.label: _records(compute_windowed_reports(g.fixations, window_n=window_n, step_n=step_n, config=cfg))
                for g in groups
            }
        except ValueError as e:
            raise SystemExit(f"Invalid window: {e}") from e

    json.dump(doc, sys.stdout, indent=int(args.indent), sort_keys=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
