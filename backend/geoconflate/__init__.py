# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — feature matching and disambiguation for dataset conflation.
"""

__version__ = "0.1.0"
