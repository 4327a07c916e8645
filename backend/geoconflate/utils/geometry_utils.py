# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Geometry Utilities
Envelope arithmetic, centroid alignment and distance helpers shared by
the feature collections and the scoring strategies.

Envelopes are plain (min_x, min_y, max_x, max_y) tuples. An empty
geometry has no envelope and is represented by None.
"""

from __future__ import annotations

from shapely import affinity
from shapely.geometry.base import BaseGeometry

Envelope = tuple[float, float, float, float]

ORIGIN: tuple[float, float] = (0.0, 0.0)


# ─── Envelope ────────────────────────────────────────────────────────────────

def envelope_of(geometry: BaseGeometry | None) -> Envelope | None:
    """Return the bounds of a geometry, or None if it is missing or empty."""
    if geometry is None or geometry.is_empty:
        return None
    min_x, min_y, max_x, max_y = geometry.bounds
    return (float(min_x), float(min_y), float(max_x), float(max_y))


def expand_envelope(envelope: Envelope | None, margin: float) -> Envelope | None:
    """Grow an envelope by margin on every side."""
    if envelope is None:
        return None
    min_x, min_y, max_x, max_y = envelope
    return (min_x - margin, min_y - margin, max_x + margin, max_y + margin)


def union_envelopes(a: Envelope | None, b: Envelope | None) -> Envelope | None:
    """Smallest envelope covering both inputs. None acts as the identity."""
    if a is None:
        return b
    if b is None:
        return a
    return (min(a[0], b[0]), min(a[1], b[1]), max(a[2], b[2]), max(a[3], b[3]))


def envelopes_intersect(a: Envelope | None, b: Envelope | None) -> bool:
    """True if the envelopes share at least one point (touching counts)."""
    if a is None or b is None:
        return False
    return not (a[2] < b[0] or a[0] > b[2] or a[3] < b[1] or a[1] > b[3])


# ─── Centroid ────────────────────────────────────────────────────────────────

def align(
    geometry: BaseGeometry,
    reference_point: tuple[float, float] = ORIGIN,
) -> BaseGeometry:
    """
    Return a translated copy of geometry whose centroid sits on reference_point.
    The input geometry is never modified. Empty geometries come back as-is.
    """
    if geometry.is_empty:
        return geometry
    centroid = geometry.centroid
    return affinity.translate(
        geometry,
        xoff=reference_point[0] - centroid.x,
        yoff=reference_point[1] - centroid.y,
    )


def centroid_distance(a: BaseGeometry, b: BaseGeometry) -> float:
    """Euclidean distance between centroids. Infinite if either is empty."""
    if a.is_empty or b.is_empty:
        return float("inf")
    return float(a.centroid.distance(b.centroid))


def distance_to_score(distance: float, max_distance: float) -> float:
    """
    Map a distance onto [0, 1]: 1.0 at zero distance, falling linearly
    to 0.0 at max_distance and beyond.
    """
    if distance >= max_distance:
        return 0.0
    return max(0.0, 1.0 - distance / max_distance)
