from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

import numpy as np
import pandas as pd

from gazerqa.data.fixations import FixationGroup, fixations_from_frame


logger = logging.getLogger(__name__)


# Header detection is case-insensitive. A column matches a key when its name
# equals the key, contains it as a word token, or (for keys longer than two
# characters) contains it as a substring, so "Fixation Timestamp [ms]",
# "AOI hit" or "gaze x" are all recognised.
TIMESTAMP_KEYS = ("timestamp", "time")
AOI_KEYS = ("aoi",)
ID_KEYS = ("id",)
X_KEYS = ("x",)
Y_KEYS = ("y",)


def _matches(column: str, key: str) -> bool:
    name = column.lower()
    if name == key:
        return True
    if key in re.split(r"[^a-z0-9]+", name):
        return True
    return len(key) > 2 and key in name


def _find_column(columns: list[str], keys: tuple[str, ...], *, exclude: Iterable[str] = ()) -> str | None:
    skip = set(exclude)
    for key in keys:
        for c in columns:
            if c not in skip and _matches(c, key):
                return c
    return None


def _read_table(p: Path) -> pd.DataFrame:
    suffix = p.suffix.lower()
    if suffix == ".csv":
        # AOI labels must stay strings ("1" and "01" are distinct regions).
        return pd.read_csv(p, dtype=str, keep_default_na=False)
    if suffix == ".json":
        data: Any = json.loads(p.read_text(encoding="utf-8"))
        return pd.DataFrame(data)
    raise ValueError(f"Unsupported input: {p.suffix}")


def _aoi_cell(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return [str(a) for a in v]
    if v is None or (isinstance(v, float) and not np.isfinite(v)):
        return ""
    return str(v)


def _is_blank(v: Any) -> bool:
    if isinstance(v, (list, tuple)):
        return len(v) == 0
    if v is None:
        return True
    if isinstance(v, float):
        return not np.isfinite(v)
    return str(v).strip() == ""


def canonicalize_fixation_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Map detected columns to id/timestamp/aoi/x/y.

    timestamp and aoi are required. id, x and y are best-effort: id is filled
    with the 1-based row index, and x/y are NaN when absent or non-numeric.
    """
    df = df.reset_index(drop=True)
    df.columns = [str(c).strip() for c in df.columns]
    columns = list(df.columns)

    ts_col = _find_column(columns, TIMESTAMP_KEYS)
    aoi_col = _find_column(columns, AOI_KEYS, exclude=[ts_col] if ts_col else [])
    if ts_col is None or aoi_col is None:
        raise ValueError("Missing required columns: timestamp and aoi")

    used = {ts_col, aoi_col}
    id_col = _find_column(columns, ID_KEYS, exclude=used)
    if id_col is not None:
        used.add(id_col)
    x_col = _find_column(columns, X_KEYS, exclude=used)
    if x_col is not None:
        used.add(x_col)
    y_col = _find_column(columns, Y_KEYS, exclude=used)

    out = pd.DataFrame(index=df.index)
    out["timestamp"] = pd.to_numeric(df[ts_col], errors="coerce")
    out["aoi"] = df[aoi_col].map(_aoi_cell)

    row_ids = pd.Series(np.arange(1, len(df) + 1, dtype=float), index=df.index)
    if id_col is not None:
        out["id"] = pd.to_numeric(df[id_col], errors="coerce").fillna(row_ids)
    else:
        out["id"] = row_ids

    if x_col is not None and y_col is not None:
        out["x"] = pd.to_numeric(df[x_col], errors="coerce")
        out["y"] = pd.to_numeric(df[y_col], errors="coerce")
    else:
        out["x"] = np.nan
        out["y"] = np.nan

    logger.debug(
        "column mapping: timestamp=%r aoi=%r id=%r x=%r y=%r", ts_col, aoi_col, id_col, x_col, y_col
    )
    return out


def load_fixation_group(path: str | Path) -> FixationGroup:
    """
    Load one fixation export (CSV or JSON) as a labelled group.

    The label is the file stem. Row order is kept as-is: it is taken to be the
    temporal order of the fixations.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))

    df = _read_table(p)
    # Drop fully blank rows that spreadsheet exports tend to append.
    if not df.empty:
        blank = df.apply(lambda row: all(_is_blank(v) for v in row), axis=1)
        df = df[~blank]
    if df.empty:
        raise ValueError(f"Empty input dataset: {p}")

    canon = canonicalize_fixation_frame(df)
    fixations = tuple(fixations_from_frame(canon))
    logger.info("loaded %d fixations from %s", len(fixations), p)
    return FixationGroup(label=p.stem, fixations=fixations)


def load_fixation_groups(paths: Iterable[str | Path]) -> list[FixationGroup]:
    """Load several exports; the result is sorted by group label."""
    candidates = [Path(p) for p in paths]
    supported = [p for p in candidates if p.suffix.lower() in (".csv", ".json")]
    if not supported:
        raise ValueError("No CSV or JSON files given")
    for p in candidates:
        if p not in supported:
            logger.warning("skipping unsupported file %s", p)

    groups = [load_fixation_group(p) for p in supported]
    return sorted(groups, key=lambda g: g.label)
