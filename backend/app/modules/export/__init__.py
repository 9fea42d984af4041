# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Export Module
Public API for snapshot encoding and persistence.
"""

from app.modules.export.snapshot import Snapshot, SnapshotExporter

__all__ = [
    "Snapshot",
    "SnapshotExporter",
]
