# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Interaction Module
Public API for the design-state controller.
"""

from app.modules.interaction.controller import InteractionController, UploadedFile

__all__ = [
    "InteractionController",
    "UploadedFile",
]
