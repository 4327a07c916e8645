# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Match Records
DisambiguationMatch is the transient (target, candidate, score) tuple
ranked during global disambiguation. SimpleMatch is the one-to-one pair
handed to downstream merge tooling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from geoconflate.models.feature import Feature, FeatureId, identity_sort_key


@dataclass(frozen=True)
class DisambiguationMatch:
    """One scored (target, candidate) pair from a raw match map."""

    target: Feature
    candidate: Feature
    score: float

    def sort_key(self) -> tuple[float, tuple[int, Any], tuple[int, Any]]:
        """
        Score descending, then target identity, then candidate identity.
        Never depends on hashing or insertion order.
        """
        return (
            -self.score,
            identity_sort_key(self.target.feature_id),
            identity_sort_key(self.candidate.feature_id),
        )


class SimpleMatch(BaseModel):
    """
    Final pairing of a reference feature with a subject feature.
    Produced after disambiguation from each target's top match.
    """
    target: Feature
    subject: Feature
    score: float = Field(..., ge=0.0, le=1.0)
    # Centroid distance between the two geometries (inf if either is empty)
    distance: float = Field(0.0, ge=0.0)
    flagged: bool = Field(False, description="True if score below confidence threshold")

    @property
    def target_id(self) -> FeatureId:
        return self.target.feature_id

    @property
    def subject_id(self) -> FeatureId:
        return self.subject.feature_id

    def to_record(self) -> dict[str, Any]:
        """Flat JSON-friendly view without geometries."""
        return {
            "reference_id": self.target_id,
            "subject_id": self.subject_id,
            "score": self.score,
            "distance": self.distance if self.distance != float("inf") else None,
            "flagged": self.flagged,
        }
