# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Review Flagging
A one-to-one pair whose score is under the confidence threshold is kept
in the output but marked `flagged`, so an editor can inspect it before
the subject feature is merged into the reference dataset.

Score summaries (mean, spread, flagged share) feed the final run log.
"""

from __future__ import annotations

import numpy as np

from geoconflate.config import get_settings
from geoconflate.models.match import SimpleMatch
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)

_EMPTY_STATS = {
    "mean": 0.0,
    "min": 0.0,
    "max": 0.0,
    "std": 0.0,
    "flagged_count": 0,
    "flagged_fraction": 0.0,
}


def _scores(pairs: list[SimpleMatch]) -> np.ndarray:
    return np.fromiter((p.score for p in pairs), dtype=np.float64, count=len(pairs))


def flag_low_confidence(
    matches: list[SimpleMatch],
    threshold: float | None = None,
) -> list[SimpleMatch]:
    """
    Set `flagged` on every pair from its score alone; a pair flagged by an
    earlier call is cleared if it now clears the threshold.

    Args:
        matches:   Pairs produced by generate_matches (updated in place)
        threshold: Scores strictly below this are flagged.
                   Defaults to the configured confidence_threshold.
    """
    if threshold is None:
        threshold = get_settings().confidence_threshold

    below = _scores(matches) < threshold
    for pair, is_low in zip(matches, below):
        pair.flagged = bool(is_low)

    log.info(
        "review_flags_set",
        pairs=len(matches),
        flagged=int(below.sum()),
        threshold=threshold,
    )
    return matches


def compute_confidence_stats(matches: list[SimpleMatch]) -> dict:
    """Score summary over the pairs: mean/min/max/std plus flagged count and share."""
    if not matches:
        return dict(_EMPTY_STATS)

    scores = _scores(matches)
    flagged = sum(p.flagged for p in matches)
    return {
        "mean": float(scores.mean()),
        "min": float(scores.min()),
        "max": float(scores.max()),
        "std": float(scores.std()),
        "flagged_count": flagged,
        "flagged_fraction": flagged / len(matches),
    }
