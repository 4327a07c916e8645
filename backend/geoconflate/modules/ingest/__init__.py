# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Ingest Module
Public API for converting source records into feature collections.
"""

from geoconflate.modules.ingest.geojson_source import (
    build_schema,
    features_from_geojson,
    infer_attribute_type,
    load_geojson,
)

__all__ = [
    "build_schema",
    "features_from_geojson",
    "infer_attribute_type",
    "load_geojson",
]
