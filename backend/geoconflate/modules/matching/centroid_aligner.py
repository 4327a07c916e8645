# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Centroid Aligner
Decorator that moves both geometries of a pair onto the origin before
handing them to an inner pairwise matcher, so the inner matcher judges
shape and size rather than location.

Each geometry is aligned on its own centroid, independently of the other.
Alignment works on translated copies; the caller's geometries are never
touched.
"""

from __future__ import annotations

from shapely.geometry.base import BaseGeometry

from geoconflate.modules.matching.base import IndependentCandidateMatcher
from geoconflate.utils.geometry_utils import ORIGIN
from geoconflate.utils.geometry_utils import align as align_centroid


class CentroidAligner(IndependentCandidateMatcher):
    """Pairwise matcher that neutralises translation before scoring."""

    def __init__(self, matcher: IndependentCandidateMatcher) -> None:
        self._matcher = matcher

    @property
    def inner(self) -> IndependentCandidateMatcher:
        return self._matcher

    @staticmethod
    def align(geometry: BaseGeometry) -> BaseGeometry:
        """Copy of geometry translated so its centroid is the origin."""
        return align_centroid(geometry, ORIGIN)

    def score(self, target: BaseGeometry, candidate: BaseGeometry) -> float:
        return self._matcher.score(self.align(target), self.align(candidate))
