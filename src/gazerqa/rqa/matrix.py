from __future__ import annotations

"""Recurrence matrix construction for fixation sequences.

Two recurrence predicates are supported:
- label overlap: fixations i and j recur when they share a non-empty AOI label
- proximity: fixations recur when closer than a distance threshold and they
  belong to different contiguous groups of the scanpath

Both return a symmetric N x N uint8 matrix with ones on the main diagonal.
"""

import numpy as np
import scipy.spatial.distance as ssd

from gazerqa.data.fixations import FixationSequence, coordinates
from gazerqa.rqa.config import DEFAULT_PROXIMITY_THRESHOLD, RQAConfig


def _finalize(R: np.ndarray) -> np.ndarray:
    out = np.asarray(R, dtype=np.uint8)
    if out.shape[0] > 0:
        np.fill_diagonal(out, 1)
    return out


def build_by_label_overlap(fixations: FixationSequence) -> np.ndarray:
    """Cell (i, j) is 1 iff fixations i and j share at least one non-empty AOI."""
    n = len(fixations)
    if n == 0:
        return np.zeros((0, 0), dtype=np.uint8)

    vocab: dict[str, int] = {}
    label_sets = [f.labels for f in fixations]
    for labels in label_sets:
        for a in sorted(labels):
            vocab.setdefault(a, len(vocab))

    # Incidence matrix fixation x label; shared labels show up in B @ B.T.
    B = np.zeros((n, max(len(vocab), 1)), dtype=np.int64)
    for i, labels in enumerate(label_sets):
        for a in labels:
            B[i, vocab[a]] = 1

    R = (B @ B.T) > 0
    return _finalize(R)


def contiguous_groups(fixations: FixationSequence, threshold: float) -> np.ndarray:
    """Group index per fixation from a single forward pass.

    Fixation i opens a new group unless it lies strictly within `threshold`
    of fixation i - 1. A fixation without coordinates is never within the
    threshold of anything.
    """
    n = len(fixations)
    if n == 0:
        return np.zeros(0, dtype=np.int64)
    xy = coordinates(fixations)
    step = np.linalg.norm(np.diff(xy, axis=0), axis=1)
    close = np.isfinite(step) & (step < float(threshold))
    return np.concatenate([[0], np.cumsum(~close)]).astype(np.int64)


def pairwise_distances(fixations: FixationSequence) -> np.ndarray:
    """Euclidean distance matrix; +inf wherever either fixation lacks a position."""
    n = len(fixations)
    if n == 0:
        return np.zeros((0, 0), dtype=float)
    xy = coordinates(fixations)
    if n == 1:
        return np.zeros((1, 1), dtype=float) if np.all(np.isfinite(xy)) else np.full((1, 1), np.inf)
    D = ssd.squareform(ssd.pdist(xy, metric="euclidean"))
    missing = ~np.all(np.isfinite(xy), axis=1)
    D[missing, :] = np.inf
    D[:, missing] = np.inf
    return D


def build_by_proximity(
    fixations: FixationSequence,
    threshold: float = DEFAULT_PROXIMITY_THRESHOLD,
) -> np.ndarray:
    """Cell (i, j) is 1 iff i == j, or distance(i, j) < threshold and i, j
    sit in different contiguous groups.

    Same-group pairs are excluded so that consecutive fixations on one spot
    are not counted as recurrence.
    """
    thr = float(threshold)
    if not np.isfinite(thr) or thr <= 0:
        raise ValueError("threshold must be a finite number > 0")

    n = len(fixations)
    if n == 0:
        return np.zeros((0, 0), dtype=np.uint8)

    D = pairwise_distances(fixations)
    groups = contiguous_groups(fixations, thr)
    R = (D < thr) & (groups[:, None] != groups[None, :])
    return _finalize(R)


def build_recurrence_matrix(fixations: FixationSequence, config: RQAConfig | None = None) -> np.ndarray:
    cfg = config or RQAConfig()
    if cfg.method == "proximity":
        return build_by_proximity(fixations, threshold=cfg.proximity_threshold)
    return build_by_label_overlap(fixations)
