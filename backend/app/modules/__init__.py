# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Design Modules
geometry     placement and transform clamping
assets       texture catalog, image validation, async asset loading
compositor   render surface and the layered lid frame
interaction  pointer, slider, texture, and artwork events
export       PNG snapshots of the presented frame
"""
