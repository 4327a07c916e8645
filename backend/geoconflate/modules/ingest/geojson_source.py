# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — GeoJSON Feature Source
Converts a GeoJSON FeatureCollection into a FeatureCollection with one
shared schema.

Schema:
  geometry attribute + the sorted union of all property keys, each typed
  from its non-null values (mixed int/float widen to DOUBLE, any other
  mix becomes OBJECT).

Identity, first available of:
  1. the GeoJSON "id" member
  2. properties[id_property]
  3. "#<index>" (position in the source document)

Records that cannot be converted (missing or malformed geometry,
duplicate identity) are skipped and returned in the error map keyed by
source index. Nothing is dropped silently.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import shape

from geoconflate.core.errors import DuplicateFeatureError, FeatureConversionError
from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import AttributeType, Feature, FeatureId, FeatureSchema
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)

_NUMERIC = {AttributeType.INTEGER, AttributeType.DOUBLE}


def infer_attribute_type(value: Any) -> AttributeType:
    """Attribute type for a single JSON value."""
    # bool is a subclass of int, test it first
    if isinstance(value, bool):
        return AttributeType.BOOLEAN
    if isinstance(value, int):
        return AttributeType.INTEGER
    if isinstance(value, float):
        return AttributeType.DOUBLE
    if isinstance(value, str):
        return AttributeType.STRING
    return AttributeType.OBJECT


def _widen(current: AttributeType | None, new: AttributeType) -> AttributeType:
    if current is None or current == new:
        return new
    if current in _NUMERIC and new in _NUMERIC:
        return AttributeType.DOUBLE
    return AttributeType.OBJECT


def _properties(record: Any) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        return {}
    props = record.get("properties")
    return props if isinstance(props, Mapping) else {}


def build_schema(records: list[Any]) -> FeatureSchema:
    """Geometry attribute plus every property key found in records."""
    types: dict[str, AttributeType | None] = {}
    for record in records:
        for key, value in _properties(record).items():
            types.setdefault(key, None)
            if value is not None:
                types[key] = _widen(types[key], infer_attribute_type(value))

    schema = FeatureSchema.with_geometry()
    for key in sorted(types):
        if key == schema.geometry_attribute:
            continue
        schema.add_attribute(key, types[key] or AttributeType.STRING)
    return schema


def _identity(record: Mapping[str, Any], index: int, id_property: str | None) -> FeatureId:
    value = record.get("id")
    if value is None and id_property is not None:
        value = _properties(record).get(id_property)
    if value is None:
        return f"#{index}"
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return str(value)


def _convert(
    record: Any,
    index: int,
    schema: FeatureSchema,
    id_property: str | None,
) -> Feature:
    if not isinstance(record, Mapping) or record.get("type") != "Feature":
        raise FeatureConversionError(f"Record {index} is not a GeoJSON Feature")

    geometry_json = record.get("geometry")
    if not geometry_json:
        raise FeatureConversionError(f"Record {index} has no geometry")
    try:
        geometry = shape(geometry_json)
    except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as exc:
        raise FeatureConversionError(f"Record {index} has an unreadable geometry: {exc}") from exc

    attributes = {
        key: value
        for key, value in _properties(record).items()
        if key != schema.geometry_attribute
    }
    return Feature(
        feature_id=_identity(record, index, id_property),
        geometry=geometry,
        feature_schema=schema,
        attributes=attributes,
    )


def features_from_geojson(
    data: Mapping[str, Any],
    id_property: str | None = None,
) -> tuple[FeatureCollection, dict[int, FeatureConversionError]]:
    """
    Convert a GeoJSON FeatureCollection mapping.

    Returns:
        (collection, errors) — errors maps source index → conversion error
        for every record left out of the collection.

    Raises:
        FeatureConversionError: If data is not a FeatureCollection at all.
    """
    if not isinstance(data, Mapping) or data.get("type") != "FeatureCollection":
        raise FeatureConversionError("Input is not a GeoJSON FeatureCollection")
    records = data.get("features") or []
    if not isinstance(records, list):
        raise FeatureConversionError("FeatureCollection 'features' must be a list")

    schema = build_schema(records)
    collection = FeatureCollection(schema)
    errors: dict[int, FeatureConversionError] = {}

    for index, record in enumerate(records):
        try:
            collection.add(_convert(record, index, schema, id_property))
        except FeatureConversionError as exc:
            errors[index] = exc
            log.warning("feature_skipped", index=index, error=str(exc))
        except DuplicateFeatureError as exc:
            errors[index] = FeatureConversionError(f"Record {index}: {exc.args[0]}")
            log.warning("feature_skipped", index=index, error=str(errors[index]))

    log.info(
        "geojson_converted",
        converted=len(collection),
        skipped=len(errors),
        attributes=schema.attribute_count - 1,
    )
    return collection, errors


def load_geojson(path: str | Path) -> dict[str, Any]:
    """
    Read a GeoJSON document from disk.

    Raises:
        FeatureConversionError: If the file is missing or not valid JSON.
    """
    path = Path(path)
    if not path.exists():
        raise FeatureConversionError(f"GeoJSON file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise FeatureConversionError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise FeatureConversionError(f"Cannot read {path}: {e}") from e
