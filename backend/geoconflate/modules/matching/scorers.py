# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Leaf Scoring Strategies

CentroidDistanceMatcher   location: 1 at equal centroids, 0 at max_distance
HausdorffDistanceMatcher  outline: same linear falloff on Hausdorff distance
SymDiffMatcher            shape overlap: 1 - area(A △ B) / area(A ∪ B)
AttributeMatcher          attribute equality (e.g. name, house number)

The geometric scorers are pairwise and can be wrapped in a CentroidAligner
to compare shape and size independently of position.
"""

from __future__ import annotations

import shapely
from shapely.geometry.base import BaseGeometry

from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import Feature
from geoconflate.models.matches import Matches
from geoconflate.modules.matching.base import FeatureMatcher, IndependentCandidateMatcher
from geoconflate.utils.geometry_utils import centroid_distance, distance_to_score


def _valid(geometry: BaseGeometry) -> BaseGeometry:
    """Repair self-intersections so overlay operations do not raise."""
    return geometry if geometry.is_valid else shapely.make_valid(geometry)


class CentroidDistanceMatcher(IndependentCandidateMatcher):
    """Scores by distance between centroids."""

    def __init__(self, max_distance: float) -> None:
        if max_distance <= 0:
            raise ValueError(f"max_distance must be > 0 (got {max_distance})")
        self.max_distance = float(max_distance)

    def score(self, target: BaseGeometry, candidate: BaseGeometry) -> float:
        return distance_to_score(centroid_distance(target, candidate), self.max_distance)


class HausdorffDistanceMatcher(IndependentCandidateMatcher):
    """Scores by the Hausdorff distance between the two outlines."""

    def __init__(self, max_distance: float) -> None:
        if max_distance <= 0:
            raise ValueError(f"max_distance must be > 0 (got {max_distance})")
        self.max_distance = float(max_distance)

    def score(self, target: BaseGeometry, candidate: BaseGeometry) -> float:
        if target.is_empty or candidate.is_empty:
            return 0.0
        return distance_to_score(target.hausdorff_distance(candidate), self.max_distance)


class SymDiffMatcher(IndependentCandidateMatcher):
    """
    Scores areal overlap. Identical polygons score 1, disjoint ones 0.
    Points and lines have no area and always score 0.
    """

    def score(self, target: BaseGeometry, candidate: BaseGeometry) -> float:
        if target.is_empty or candidate.is_empty:
            return 0.0
        target = _valid(target)
        candidate = _valid(candidate)
        union_area = target.union(candidate).area
        if union_area <= 0.0:
            return 0.0
        sym_diff_area = target.symmetric_difference(candidate).area
        return min(1.0, max(0.0, 1.0 - sym_diff_area / union_area))


class AttributeMatcher(FeatureMatcher):
    """
    Scores 1.0 for candidates whose attribute value equals the target's.
    Values are compared as stripped strings; empty or missing values
    never match.
    """

    def __init__(self, attribute_name: str, case_sensitive: bool = False) -> None:
        self.attribute_name = attribute_name
        self.case_sensitive = case_sensitive

    def _normalise(self, value: object) -> str:
        if value is None:
            return ""
        text = str(value).strip()
        return text if self.case_sensitive else text.casefold()

    def match(self, target: Feature, candidates: FeatureCollection) -> Matches:
        matches = Matches(candidates.schema)
        wanted = self._normalise(target.attributes.get(self.attribute_name))
        if not wanted:
            return matches
        for candidate in candidates:
            if self._normalise(candidate.attributes.get(self.attribute_name)) == wanted:
                matches.add(candidate, 1.0)
        return matches
