# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Disambiguating Match Finder
Turns the many-to-many output of an inner FCMatchFinder into a one-to-one
assignment between targets and candidates.

Algorithm (greedy by global score):
  1. Run the inner finder → {target: Matches}
  2. Flatten every (target, candidate, score) into one list
  3. Sort by score descending; ties broken by target identity, then
     candidate identity, so the result never depends on hash order
  4. Scan once, accepting a pair only if neither its target nor its
     candidate has been accepted yet
  5. Emit an entry for every target of the target collection: a one-pair
     Matches if accepted, an empty Matches otherwise

"Aggressive": a target whose best candidate was claimed by a stronger
pair falls back to its next-best still-free candidate, as long as that
candidate is already in its original Matches. Nothing is re-scored.

This is maximal greedy matching, not optimal weighted bipartite matching.
The bias toward the strongest individual pairs is intentional.

Cost: O(E log E) for the sort, O(E) for the scan, E = total scored pairs.
"""

from __future__ import annotations

from collections.abc import Mapping

from geoconflate.core.task_monitor import NullTaskMonitor, TaskMonitor
from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import Feature, FeatureId
from geoconflate.models.match import DisambiguationMatch
from geoconflate.models.matches import Matches
from geoconflate.modules.matching.base import FCMatchFinder
from geoconflate.modules.matching.finders import blank_target_to_matches_map
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)

# Item progress is reported once per this many ranked pairs
_PROGRESS_STRIDE = 500


def create_disambiguation_matches(
    target_to_matches: Mapping[Feature, Matches],
) -> list[DisambiguationMatch]:
    """Flatten a raw match map into pairs ranked for greedy assignment."""
    pairs = [
        DisambiguationMatch(target=target, candidate=candidate, score=score)
        for target, matches in target_to_matches.items()
        for candidate, score in matches.items()
    ]
    pairs.sort(key=DisambiguationMatch.sort_key)
    return pairs


def assign_greedily(
    ranked: list[DisambiguationMatch],
    monitor: TaskMonitor | None = None,
) -> list[DisambiguationMatch] | None:
    """
    Accept each ranked pair whose target and candidate are both still free.
    Returns None if cancellation was requested during the scan.
    """
    monitor = monitor or NullTaskMonitor()
    assigned_targets: set[FeatureId] = set()
    assigned_candidates: set[FeatureId] = set()
    accepted: list[DisambiguationMatch] = []
    total = len(ranked)

    for i, pair in enumerate(ranked):
        if monitor.is_cancel_requested():
            return None
        if (i + 1) % _PROGRESS_STRIDE == 0:
            monitor.report_progress(i + 1, total, "matches")

        target_id = pair.target.feature_id
        candidate_id = pair.candidate.feature_id
        if target_id in assigned_targets or candidate_id in assigned_candidates:
            continue
        assigned_targets.add(target_id)
        assigned_candidates.add(candidate_id)
        accepted.append(pair)

    monitor.report_progress(total, total, "matches")
    return accepted


class DisambiguatingFCMatchFinder(FCMatchFinder):
    """Enforces a one-to-one target ↔ candidate relationship on an inner finder."""

    def __init__(self, finder: FCMatchFinder) -> None:
        self._finder = finder

    @property
    def inner(self) -> FCMatchFinder:
        return self._finder

    def match(
        self,
        target_fc: FeatureCollection,
        candidate_fc: FeatureCollection,
        monitor: TaskMonitor | None = None,
    ) -> dict[Feature, Matches]:
        monitor = monitor or NullTaskMonitor()
        raw = self._finder.match(target_fc, candidate_fc, monitor)

        if monitor.is_cancel_requested():
            log.info("disambiguation_skipped", reason="cancelled")
            return {}

        monitor.report("Sorting scores")
        ranked = create_disambiguation_matches(raw)

        monitor.report("Discarding inferior matches")
        accepted = assign_greedily(ranked, monitor)
        if accepted is None:
            log.info("disambiguation_skipped", reason="cancelled")
            return {}

        result = blank_target_to_matches_map(target_fc.features, candidate_fc.schema)
        for pair in accepted:
            matches = Matches(candidate_fc.schema)
            matches.add(pair.candidate, pair.score)
            result[pair.target] = matches

        log.info(
            "disambiguation_complete",
            n_targets=len(result),
            scored_pairs=len(ranked),
            assigned_pairs=len(accepted),
            discarded_pairs=len(ranked) - len(accepted),
        )
        return result
