# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Texture Catalog
Static, process-wide list of lid textures. Loaded once; entries are
immutable. A JSON file (TEXTURE_CATALOG_PATH) may replace the built-in
list, e.g.:

    {"default": "plain",
     "textures": [{"id": "plain", "display_name": "Plain",
                   "fallback_color": "#f3f4f6"}, ...]}
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from app.api.middleware.error_handler import TextureNotFoundError
from app.config import get_settings
from app.models.design import Texture
from app.utils.logger import get_logger

log = get_logger(__name__)

DEFAULT_TEXTURE_ID = "plain"

BUILTIN_TEXTURES: tuple[Texture, ...] = (
    Texture(id="plain", display_name="Plain (Upload Art)", fallback_color="#f3f4f6"),
    Texture(id="cosmic-nova", display_name="Cosmic Nova", image_ref="/photos/lid1.png"),
    Texture(id="volcano-lava", display_name="Volcano Lava", image_ref="/photos/lid2.png"),
    Texture(id="ice-crystal", display_name="Ice Crystal", image_ref="/photos/lid3.png"),
    Texture(id="neon-lattice", display_name="Neon Lattice", image_ref="/photos/lid4.png"),
    Texture(id="camo-volt", display_name="Camo Volt", image_ref="/photos/lid5.png"),
    Texture(id="dragon-fire", display_name="Dragon Fire Scales", image_ref="/photos/lid6.png"),
    Texture(id="sea-dragon", display_name="Sea Dragon Scales", image_ref="/photos/lid7.png"),
    Texture(id="caramel-croc", display_name="Caramel Croc", image_ref="/photos/lid8.png"),
    Texture(id="green-viper", display_name="Green Viper", image_ref="/photos/lid9.png"),
    Texture(id="carbon", display_name="Carbon Weave", image_ref="/photos/lid10.png"),
)


class TextureCatalog:
    """Ordered, id-indexed texture list with a designated default."""

    def __init__(self, textures: list[Texture], default_id: str = DEFAULT_TEXTURE_ID) -> None:
        by_id: dict[str, Texture] = {}
        for t in textures:
            if t.id in by_id:
                raise ValueError(f"Duplicate texture id in catalog: {t.id!r}")
            by_id[t.id] = t

        default = by_id.get(default_id)
        if default is None:
            raise ValueError(f"Default texture {default_id!r} is not in the catalog.")
        # The initial selection must render without any fetch
        if default.image_ref is not None:
            raise ValueError(f"Default texture {default_id!r} must not reference an image.")

        self._by_id = by_id
        self._default_id = default_id

    def __iter__(self) -> Iterator[Texture]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, texture_id: object) -> bool:
        return texture_id in self._by_id

    @property
    def default(self) -> Texture:
        return self._by_id[self._default_id]

    def get(self, texture_id: str) -> Texture:
        try:
            return self._by_id[texture_id]
        except KeyError:
            raise TextureNotFoundError(texture_id) from None


def load_catalog(path: Path | None = None) -> TextureCatalog:
    """Build a catalog from a JSON file, or the built-in list when path is None."""
    if path is None:
        return TextureCatalog(list(BUILTIN_TEXTURES))

    raw = json.loads(path.read_text(encoding="utf-8"))
    textures = [Texture.model_validate(t) for t in raw["textures"]]
    catalog = TextureCatalog(textures, default_id=raw.get("default", DEFAULT_TEXTURE_ID))
    log.info("texture_catalog_loaded", path=str(path), count=len(catalog))
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> TextureCatalog:
    """Return the cached process-wide catalog."""
    return load_catalog(get_settings().texture_catalog_path)
