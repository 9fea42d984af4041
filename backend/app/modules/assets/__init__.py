# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Assets Module
Public API for the texture catalog, upload validation, and asset loading.
"""

from app.modules.assets.catalog import (
    BUILTIN_TEXTURES,
    DEFAULT_TEXTURE_ID,
    TextureCatalog,
    get_catalog,
    load_catalog,
)
from app.modules.assets.loader import (
    SLOT_ARTWORK,
    SLOT_TEMPLATE,
    SLOT_TEXTURE,
    AssetLoader,
    LoadResult,
)
from app.modules.assets.validator import (
    is_image_content_type,
    sniff_image_format,
    validate_upload_bytes,
)

__all__ = [
    # Catalog
    "BUILTIN_TEXTURES",
    "DEFAULT_TEXTURE_ID",
    "TextureCatalog",
    "get_catalog",
    "load_catalog",
    # Loader
    "AssetLoader",
    "LoadResult",
    "SLOT_TEXTURE",
    "SLOT_TEMPLATE",
    "SLOT_ARTWORK",
    # Validator
    "is_image_content_type",
    "sniff_image_format",
    "validate_upload_bytes",
]
