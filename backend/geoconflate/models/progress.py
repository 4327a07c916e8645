# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Task Progress Model
Snapshot of a matching run's progress as recorded by InMemoryTaskMonitor.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TaskProgress(BaseModel):
    """Latest description and item counter reported by the matching core."""
    description: str = ""
    done: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    unit: str = ""
    cancel_requested: bool = False

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return min(100, int(self.done * 100 / self.total))
