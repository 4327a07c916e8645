# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Matcher Contracts

FeatureMatcher               one target vs. a candidate collection → Matches
IndependentCandidateMatcher  FeatureMatcher built from a pairwise geometry score
FCMatchFinder                whole target collection vs. candidate collection
                             → {target: Matches}, one entry per target

Scores are in [0, 1]. A score of exactly 0 is the same as "not a match"
and never appears in a Matches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shapely.geometry.base import BaseGeometry

from geoconflate.core.task_monitor import TaskMonitor
from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import Feature
from geoconflate.models.matches import Matches


class FeatureMatcher(ABC):
    """Scores the candidates of one target feature."""

    @abstractmethod
    def match(self, target: Feature, candidates: FeatureCollection) -> Matches:
        """
        Return the candidates that match target, each with a score in (0, 1].
        Must not modify target or candidates.
        """


class IndependentCandidateMatcher(FeatureMatcher):
    """
    Matcher whose score for a candidate depends only on that candidate's
    geometry and the target's geometry, not on the other candidates.
    """

    def match(self, target: Feature, candidates: FeatureCollection) -> Matches:
        matches = Matches(candidates.schema)
        for candidate in candidates:
            matches.add(candidate, self.score(target.geometry, candidate.geometry))
        return matches

    @abstractmethod
    def score(self, target: BaseGeometry, candidate: BaseGeometry) -> float:
        """Similarity of one geometry pair in [0, 1]."""


class FCMatchFinder(ABC):
    """Matches every feature of a target collection against a candidate collection."""

    @abstractmethod
    def match(
        self,
        target_fc: FeatureCollection,
        candidate_fc: FeatureCollection,
        monitor: TaskMonitor | None = None,
    ) -> dict[Feature, Matches]:
        """
        Return a mapping from each target feature to its Matches.
        Every target appears as a key, with an empty Matches if nothing
        scored, unless the run was cancelled through the monitor.
        """
