# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Weighted Matcher
Runs several FeatureMatchers against the same candidates and combines
their scores into a weighted average.

Score formula (per candidate c):
  score(c) = Σ_i  (w_i / W) × s_i(c)      W = Σ_i w_i over retained matchers

  - s_i(c) is 0 when matcher i did not score c (a missing entry is a
    zero contribution, not an error)
  - matchers registered with weight 0 are dropped and never invoked
  - if W == 0 no matcher runs and the result is empty

Determinism:
  Contributions are accumulated in registration order and candidates are
  emitted in ascending identity order, so the floating-point sums and the
  Matches insertion order are identical across runs. The sum is taken as
  Σ(w_i × s_i) / W, which is the normalised sum above and cannot round
  past 1.0.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import Feature, FeatureId, identity_sort_key
from geoconflate.models.matches import Matches
from geoconflate.modules.matching.base import FeatureMatcher
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


class WeightedMatcher(FeatureMatcher):
    """Composite matcher averaging sub-matcher scores by relative weight."""

    def __init__(self, matchers_and_weights: Iterable[tuple[FeatureMatcher, float]]) -> None:
        # Insertion-ordered registry; registering a matcher again replaces its weight
        self._weights: dict[FeatureMatcher, float] = {}
        for matcher, weight in matchers_and_weights:
            self.add(matcher, weight)

        log.debug(
            "weighted_matcher_built",
            matchers=[type(m).__name__ for m in self._weights],
            weights=list(self._weights.values()),
        )

    def add(self, matcher: FeatureMatcher, weight: float) -> None:
        """Register matcher with weight, replacing any earlier weight. 0 removes it."""
        weight = float(weight)
        if math.isnan(weight) or weight < 0:
            raise ValueError(f"weight must be >= 0 (got {weight})")
        if weight == 0:
            self._weights.pop(matcher, None)
            return
        self._weights[matcher] = weight

    @property
    def matchers(self) -> list[FeatureMatcher]:
        return list(self._weights)

    @property
    def weight_total(self) -> float:
        return sum(self._weights.values())

    def weight(self, matcher: FeatureMatcher) -> float:
        return self._weights.get(matcher, 0.0)

    def normalized_weight(self, matcher: FeatureMatcher) -> float:
        total = self.weight_total
        if total == 0:
            return 0.0
        return self._weights.get(matcher, 0.0) / total

    def match(self, target: Feature, candidates: FeatureCollection) -> Matches:
        total = self.weight_total
        if total == 0:
            return Matches(candidates.schema)

        by_id: dict[FeatureId, Feature] = {}
        weighted_sums: dict[FeatureId, float] = {}

        for matcher, weight in self._weights.items():
            for candidate, score in matcher.match(target, candidates).items():
                key = candidate.feature_id
                by_id.setdefault(key, candidate)
                weighted_sums[key] = weighted_sums.get(key, 0.0) + weight * score

        result = Matches(candidates.schema)
        for key in sorted(weighted_sums, key=identity_sort_key):
            result.add(by_id[key], weighted_sums[key] / total)
        return result
