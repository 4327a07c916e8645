# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Feature Collections
Ordered containers of features sharing one schema, queryable by envelope.

Lifecycle:
  - Built once per conflation run by a feature source adapter
  - Read-only for the whole matching pass (safe for parallel readers)
  - Discarded with the run (no cross-run state)

The envelope is computed lazily. Additions grow a cached envelope in
place; removals invalidate it so the next read recomputes it exactly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from shapely import STRtree
from shapely.geometry import box

from geoconflate.core.errors import DuplicateFeatureError
from geoconflate.models.feature import Feature, FeatureId, FeatureSchema
from geoconflate.utils.geometry_utils import (
    Envelope,
    envelopes_intersect,
    union_envelopes,
)
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


class FeatureCollection:
    """Ordered list of features plus their shared schema."""

    def __init__(
        self,
        schema: FeatureSchema,
        features: Iterable[Feature] = (),
    ) -> None:
        self._schema = schema
        self._features: list[Feature] = []
        self._ids: set[FeatureId] = set()
        self._envelope: Envelope | None = None
        self._envelope_valid = False
        self.add_all(features)

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __contains__(self, feature: object) -> bool:
        return isinstance(feature, Feature) and feature.feature_id in self._ids

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)})"

    # ── Accessors ────────────────────────────────────────────────────────────

    @property
    def schema(self) -> FeatureSchema:
        return self._schema

    @property
    def features(self) -> list[Feature]:
        """Snapshot of the features in insertion order."""
        return list(self._features)

    def get_feature(self, index: int) -> Feature:
        return self._features[index]

    def contains(self, feature: Feature) -> bool:
        return feature in self

    def is_empty(self) -> bool:
        return not self._features

    @property
    def envelope(self) -> Envelope | None:
        """Envelope of every feature, or None if there is nothing with extent."""
        if not self._envelope_valid:
            envelope: Envelope | None = None
            for feature in self._features:
                envelope = union_envelopes(envelope, feature.envelope)
            self._envelope = envelope
            self._envelope_valid = True
        return self._envelope

    def invalidate_envelope(self) -> None:
        """Force recomputation, e.g. after a feature's geometry was replaced."""
        self._envelope = None
        self._envelope_valid = False

    def query(self, envelope: Envelope | None) -> list[Feature]:
        """Features whose envelopes intersect the given envelope, in order."""
        if not envelopes_intersect(envelope, self.envelope):
            return []
        return [f for f in self._features if envelopes_intersect(f.envelope, envelope)]

    # ── Mutation ─────────────────────────────────────────────────────────────

    def add(self, feature: Feature) -> None:
        feature.check_schema(self._schema)
        if feature.feature_id in self._ids:
            raise DuplicateFeatureError(
                f"Feature {feature.feature_id!r} is already in this collection"
            )
        self._features.append(feature)
        self._ids.add(feature.feature_id)
        if self._envelope_valid:
            self._envelope = union_envelopes(self._envelope, feature.envelope)

    def add_all(self, features: Iterable[Feature]) -> None:
        for feature in features:
            self.add(feature)

    def remove(self, feature: Feature) -> bool:
        """Remove a feature by identity. Returns False if it was not present."""
        if feature.feature_id not in self._ids:
            return False
        self._features = [f for f in self._features if f.feature_id != feature.feature_id]
        self._ids.discard(feature.feature_id)
        self.invalidate_envelope()
        return True

    def remove_where(self, predicate: Callable[[Feature], bool]) -> list[Feature]:
        """Remove and return every feature for which predicate is true."""
        removed = [f for f in self._features if predicate(f)]
        if removed:
            removed_ids = {f.feature_id for f in removed}
            self._features = [f for f in self._features if f.feature_id not in removed_ids]
            self._ids -= removed_ids
            self.invalidate_envelope()
        return removed

    def remove_envelope(self, envelope: Envelope) -> list[Feature]:
        """Remove and return the features intersecting envelope."""
        hits = {f.feature_id for f in self.query(envelope)}
        return self.remove_where(lambda f: f.feature_id in hits)

    def clear(self) -> None:
        self._features = []
        self._ids = set()
        self.invalidate_envelope()


class IndexedFeatureCollection(FeatureCollection):
    """
    Read-only view of a collection whose envelope queries go through a
    shapely STRtree built once at construction. Query results keep the
    source collection order so downstream scoring stays deterministic.
    """

    _tree: STRtree | None = None

    def __init__(self, source: FeatureCollection) -> None:
        super().__init__(source.schema, source.features)
        self._indexed: list[Feature] = [f for f in self._features if f.envelope is not None]
        self._tree = STRtree([f.geometry for f in self._indexed])
        log.debug("feature_index_built", indexed=len(self._indexed), total=len(self))

    def query(self, envelope: Envelope | None) -> list[Feature]:
        if envelope is None or not self._indexed:
            return []
        hits = self._tree.query(box(*envelope))
        return [self._indexed[i] for i in sorted(int(i) for i in hits)]

    def add(self, feature: Feature) -> None:
        if self._tree is not None:
            raise NotImplementedError("IndexedFeatureCollection is read-only")
        super().add(feature)

    def remove(self, feature: Feature) -> bool:
        raise NotImplementedError("IndexedFeatureCollection is read-only")

    def remove_where(self, predicate: Callable[[Feature], bool]) -> list[Feature]:
        raise NotImplementedError("IndexedFeatureCollection is read-only")

    def clear(self) -> None:
        raise NotImplementedError("IndexedFeatureCollection is read-only")
