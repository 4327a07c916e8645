# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Modules
Public API for feature ingestion and the matching engine.
"""

from geoconflate.modules.ingest import features_from_geojson, load_geojson
from geoconflate.modules.matching import (
    BasicFCMatchFinder,
    DisambiguatingFCMatchFinder,
    WeightedMatcher,
    generate_matches,
)

__all__ = [
    # Ingest
    "features_from_geojson",
    "load_geojson",
    # Matching
    "BasicFCMatchFinder",
    "DisambiguatingFCMatchFinder",
    "WeightedMatcher",
    "generate_matches",
]
