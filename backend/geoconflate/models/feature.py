# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Feature Data Models
Pydantic models for a geometric record and the attribute schema shared
by every feature of one collection.

Identity vs. comparison:
  A Feature is equal to another Feature only if their feature_id values
  are equal. Geometry and attributes never take part in equality or
  hashing, so features with identical shapes stay distinct in every
  dict or set used for aggregation and assignment.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from geoconflate.core.errors import SchemaMismatchError
from geoconflate.utils.geometry_utils import Envelope, envelope_of

GEOMETRY_ATTRIBUTE = "__GEOMETRY__"

FeatureId = int | str


class AttributeType(str, Enum):
    GEOMETRY = "geometry"
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    OBJECT = "object"


def identity_sort_key(feature_id: FeatureId) -> tuple[int, Any]:
    """
    Total order over feature identities: integers first (numerically),
    then strings (lexically). Used only for deterministic tie-breaking.
    """
    if isinstance(feature_id, int):
        return (0, feature_id)
    return (1, str(feature_id))


class FeatureSchema(BaseModel):
    """
    Ordered attribute name → type mapping with one geometry attribute.
    Shared by reference between all features of a collection.
    """

    attributes: dict[str, AttributeType] = Field(default_factory=dict)
    geometry_attribute: str | None = None

    @classmethod
    def with_geometry(cls, name: str = GEOMETRY_ATTRIBUTE) -> FeatureSchema:
        schema = cls()
        schema.add_attribute(name, AttributeType.GEOMETRY)
        return schema

    def add_attribute(self, name: str, attribute_type: AttributeType) -> None:
        if name in self.attributes:
            raise SchemaMismatchError(f"Attribute already defined: {name!r}")
        if attribute_type == AttributeType.GEOMETRY:
            if self.geometry_attribute is not None:
                raise SchemaMismatchError(
                    f"Schema already has geometry attribute {self.geometry_attribute!r}"
                )
            self.geometry_attribute = name
        self.attributes[name] = attribute_type

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def attribute_index(self, name: str) -> int:
        try:
            return list(self.attributes).index(name)
        except ValueError:
            raise SchemaMismatchError(f"Unknown attribute: {name!r}") from None

    def attribute_type(self, name: str) -> AttributeType:
        if name not in self.attributes:
            raise SchemaMismatchError(f"Unknown attribute: {name!r}")
        return self.attributes[name]

    @property
    def attribute_names(self) -> list[str]:
        return list(self.attributes)

    @property
    def attribute_count(self) -> int:
        return len(self.attributes)


class Feature(BaseModel):
    """
    A geometric record: stable identity, mutable shapely geometry and
    attribute values keyed by schema attribute name.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    feature_id: FeatureId = Field(..., description="Stable unique key, never derived from content")
    geometry: Any = Field(..., description="shapely geometry")
    feature_schema: FeatureSchema = Field(..., description="Schema shared with the owning collection")
    # Non-geometry attribute values; names must exist in feature_schema
    attributes: dict[str, Any] = Field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return type(self) is type(other) and self.feature_id == other.feature_id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.feature_id))

    def __repr__(self) -> str:
        geom_type = getattr(self.geometry, "geom_type", None)
        return f"Feature(id={self.feature_id!r}, geometry={geom_type})"

    def get_attribute(self, name: str) -> Any:
        if name == self.feature_schema.geometry_attribute:
            return self.geometry
        if not self.feature_schema.has_attribute(name):
            raise SchemaMismatchError(f"Unknown attribute: {name!r}")
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        if name == self.feature_schema.geometry_attribute:
            self.geometry = value
            return
        if not self.feature_schema.has_attribute(name):
            raise SchemaMismatchError(f"Unknown attribute: {name!r}")
        self.attributes[name] = value

    @property
    def envelope(self) -> Envelope | None:
        return envelope_of(self.geometry)

    def check_schema(self, schema: FeatureSchema) -> None:
        """Raise SchemaMismatchError unless this feature conforms to schema."""
        if self.feature_schema is not schema and self.feature_schema != schema:
            raise SchemaMismatchError(
                f"Feature {self.feature_id!r} schema differs from collection schema"
            )
        unknown = set(self.attributes) - set(schema.attributes)
        if unknown:
            raise SchemaMismatchError(
                f"Feature {self.feature_id!r} has attributes outside the schema: {sorted(unknown)}"
            )
