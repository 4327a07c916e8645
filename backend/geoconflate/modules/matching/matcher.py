# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Match Generation
Runs a configured FCMatchFinder over the reference and subject
collections and converts the result into one-to-one SimpleMatch pairs:

  Stage 1: finder.match()          → {reference feature: Matches}
  Stage 2: top match per target    → SimpleMatch(target, subject, score)
  Stage 3: confidence flagging + summary statistics

Targets whose Matches is empty produce no pair.
"""

from __future__ import annotations

from geoconflate.core.task_monitor import NullTaskMonitor, TaskMonitor
from geoconflate.models.collection import FeatureCollection
from geoconflate.models.match import SimpleMatch
from geoconflate.modules.matching.base import FCMatchFinder
from geoconflate.modules.matching.confidence_scorer import (
    compute_confidence_stats,
    flag_low_confidence,
)
from geoconflate.utils.geometry_utils import centroid_distance
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


def generate_matches(
    reference: FeatureCollection,
    subject: FeatureCollection,
    finder: FCMatchFinder,
    monitor: TaskMonitor | None = None,
    threshold: float | None = None,
) -> list[SimpleMatch]:
    """
    Match reference features (targets) against subject features (candidates).

    Args:
        reference: Target collection
        subject:   Candidate collection
        finder:    Usually a DisambiguatingFCMatchFinder so pairs are one-to-one
        monitor:   Progress/cancellation monitor
        threshold: Flagging threshold, defaults to config CONFIDENCE_THRESHOLD

    Returns:
        One SimpleMatch per target that has a top match, in reference order.
    """
    monitor = monitor or NullTaskMonitor()

    log.info(
        "match_generation_start",
        n_reference=len(reference),
        n_subject=len(subject),
        finder=type(finder).__name__,
    )

    target_to_matches = finder.match(reference, subject, monitor)

    monitor.report("Finishing")
    pairs: list[SimpleMatch] = []
    for target, matches in target_to_matches.items():
        top = matches.top_match
        if top is None:
            continue
        pairs.append(
            SimpleMatch(
                target=target,
                subject=top,
                score=matches.top_score,
                distance=centroid_distance(target.geometry, top.geometry),
            )
        )

    pairs = flag_low_confidence(pairs, threshold)
    stats = compute_confidence_stats(pairs)

    log.info(
        "match_generation_complete",
        total_pairs=len(pairs),
        unmatched=len(reference) - len(pairs),
        mean_score=round(stats["mean"], 3),
        flagged=stats["flagged_count"],
    )

    return pairs
