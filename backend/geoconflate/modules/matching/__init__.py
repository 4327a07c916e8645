# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Matching Engine Module
Public API for scoring, composition, collection matching and
one-to-one disambiguation.
"""

from geoconflate.modules.matching.base import (
    FCMatchFinder,
    FeatureMatcher,
    IndependentCandidateMatcher,
)
from geoconflate.modules.matching.centroid_aligner import CentroidAligner
from geoconflate.modules.matching.confidence_scorer import (
    compute_confidence_stats,
    flag_low_confidence,
)
from geoconflate.modules.matching.disambiguation import (
    DisambiguatingFCMatchFinder,
    assign_greedily,
    create_disambiguation_matches,
)
from geoconflate.modules.matching.finders import (
    BasicFCMatchFinder,
    blank_target_to_matches_map,
)
from geoconflate.modules.matching.matcher import generate_matches
from geoconflate.modules.matching.scorers import (
    AttributeMatcher,
    CentroidDistanceMatcher,
    HausdorffDistanceMatcher,
    SymDiffMatcher,
)
from geoconflate.modules.matching.weighted_matcher import WeightedMatcher

__all__ = [
    # Contracts
    "FeatureMatcher",
    "IndependentCandidateMatcher",
    "FCMatchFinder",
    # Leaf scorers
    "CentroidDistanceMatcher",
    "HausdorffDistanceMatcher",
    "SymDiffMatcher",
    "AttributeMatcher",
    # Composition
    "WeightedMatcher",
    "CentroidAligner",
    # Collection matching
    "BasicFCMatchFinder",
    "blank_target_to_matches_map",
    # Disambiguation
    "DisambiguatingFCMatchFinder",
    "create_disambiguation_matches",
    "assign_greedily",
    # Confidence
    "flag_low_confidence",
    "compute_confidence_stats",
    # Orchestrator
    "generate_matches",
]
