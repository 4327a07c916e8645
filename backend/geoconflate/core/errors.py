# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Error Types
Precondition violations raised by the data model and the feature adapter.
Cancellation is not an error and has no type here.
"""


class GeoConflateError(Exception):
    """Base class for all GeoConflate errors."""


class InvalidScoreError(GeoConflateError, ValueError):
    """Raised when a matcher records a score outside [0, 1]."""


class SchemaMismatchError(GeoConflateError, ValueError):
    """Raised when a feature does not conform to the collection schema."""


class DuplicateFeatureError(GeoConflateError, KeyError):
    """Raised when a feature identity is added twice to one collection."""


class DuplicateMatchError(GeoConflateError, ValueError):
    """Raised when the same candidate is scored twice for one target."""


class FeatureConversionError(GeoConflateError, ValueError):
    """Raised when a source record cannot be converted to a Feature."""
