# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Matches (per-target match set)
Append-only list of (candidate, score) pairs for one target feature,
with the best entry tracked incrementally.

Rules enforced by add():
  - score must lie in [0, 1]; anything else raises InvalidScoreError
  - score 0 means "no match" and is silently not stored
  - a candidate identity can be scored at most once per Matches
  - the top entry is the first-inserted entry with the maximum score

There is no removal and no overwrite. A Matches object is filled by the
component that computes it and is read-only once published.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator

from geoconflate.core.errors import DuplicateMatchError, InvalidScoreError
from geoconflate.models.feature import Feature, FeatureId, FeatureSchema
from geoconflate.utils.geometry_utils import (
    Envelope,
    envelopes_intersect,
    union_envelopes,
)


class Matches:
    """Scored candidates for one target."""

    def __init__(
        self,
        schema: FeatureSchema,
        features: Iterable[Feature] = (),
    ) -> None:
        self._schema = schema
        self._features: list[Feature] = []
        self._scores: list[float] = []
        self._positions: dict[FeatureId, int] = {}
        self._top_match: Feature | None = None
        self._top_score = 0.0
        # Features given up front are certain matches
        for feature in features:
            self.add(feature, 1.0)

    def add(self, feature: Feature, score: float) -> None:
        """Record a scored candidate. Zero scores are ignored."""
        score = float(score)
        if math.isnan(score) or not 0.0 <= score <= 1.0:
            raise InvalidScoreError(f"Score = {score} for candidate {feature.feature_id!r}")
        if score == 0.0:
            return
        if feature.feature_id in self._positions:
            raise DuplicateMatchError(
                f"Candidate {feature.feature_id!r} already scored for this target"
            )
        self._positions[feature.feature_id] = len(self._features)
        self._features.append(feature)
        self._scores.append(score)
        if score > self._top_score:
            self._top_score = score
            self._top_match = feature

    # ── Best entry ───────────────────────────────────────────────────────────

    @property
    def top_match(self) -> Feature | None:
        return self._top_match

    @property
    def top_score(self) -> float:
        return self._top_score

    # ── Read access ──────────────────────────────────────────────────────────

    @property
    def schema(self) -> FeatureSchema:
        return self._schema

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __contains__(self, feature: object) -> bool:
        return isinstance(feature, Feature) and feature.feature_id in self._positions

    def __repr__(self) -> str:
        top = self._top_match.feature_id if self._top_match is not None else None
        return f"Matches(size={len(self)}, top={top!r}, top_score={self._top_score:.3f})"

    def is_empty(self) -> bool:
        return not self._features

    def get_feature(self, index: int) -> Feature:
        return self._features[index]

    def get_score(self, index: int) -> float:
        return self._scores[index]

    def score_for(self, feature: Feature) -> float:
        """Score recorded for feature, or 0.0 if it was never matched."""
        position = self._positions.get(feature.feature_id)
        return 0.0 if position is None else self._scores[position]

    def items(self) -> Iterator[tuple[Feature, float]]:
        return zip(self._features, self._scores)

    @property
    def features(self) -> list[Feature]:
        return list(self._features)

    @property
    def scores(self) -> list[float]:
        return list(self._scores)

    @property
    def envelope(self) -> Envelope | None:
        envelope: Envelope | None = None
        for feature in self._features:
            envelope = union_envelopes(envelope, feature.envelope)
        return envelope

    def query(self, envelope: Envelope) -> list[Feature]:
        return [f for f in self._features if envelopes_intersect(f.envelope, envelope)]

    def copy(self) -> Matches:
        clone = Matches(self._schema)
        for feature, score in self.items():
            clone.add(feature, score)
        return clone
