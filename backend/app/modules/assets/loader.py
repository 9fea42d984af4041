# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Asset Loader
Resolves texture / template refs and user uploads into decoded BGRA
bitmaps for one design session.

Refs are resolved as:
  http(s)://...            fetched with httpx
  /photos/lid1.png         fetched from ASSET_BASE_URL when configured,
                           otherwise read from STATIC_ROOT

Every load takes a ticket for its slot ("texture", "template",
"artwork"). When a load finishes after a newer one for the same slot
has started, its result is marked stale and dropped: the last load
started wins, however the completions interleave.

Failures never raise out of the loader. They come back as a LoadResult
carrying AssetLoadError (texture/template) or UnsupportedImageError
(upload), so the caller can fall back or report.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx
import numpy as np
from PIL import Image

from app.api.middleware.error_handler import AssetLoadError, UnsupportedImageError
from app.config import Settings
from app.models.design import ArtworkAsset, Texture
from app.modules.assets.validator import validate_upload_bytes
from app.utils.image_utils import data_url_to_bytes, decode_bgra
from app.utils.logger import get_logger

log = get_logger(__name__)

SLOT_TEXTURE = "texture"
SLOT_TEMPLATE = "template"
SLOT_ARTWORK = "artwork"

# Errors PIL raises for bytes it cannot turn into pixels
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)

LoadError = Union[AssetLoadError, UnsupportedImageError]


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load. Exactly one of bitmap / error / stale describes it."""
    slot: str
    bitmap: Optional[np.ndarray] = None
    error: Optional[LoadError] = None
    stale: bool = False
    cached: bool = False
    source_format: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale

    def to_artwork(self) -> ArtworkAsset:
        """Wrap a successful upload as an ArtworkAsset."""
        if self.bitmap is None:
            raise ValueError("Load result has no bitmap.")
        h, w = self.bitmap.shape[:2]
        return ArtworkAsset(
            bitmap=self.bitmap,
            natural_width=w,
            natural_height=h,
            source_format=self.source_format,
        )


class AssetLoader:
    """
    Per-session loader and decoded-texture cache.
    All cache writes happen on the event loop; only the decode itself
    runs in a worker thread.
    """

    def __init__(
        self,
        static_root: Path,
        asset_base_url: Optional[str] = None,
        template_ref: Optional[str] = None,
        fetch_timeout_s: float = 10.0,
        upload_max_bytes: int = 25 * 1024 * 1024,
    ) -> None:
        self._static_root = Path(static_root)
        self._asset_base_url = asset_base_url
        self._template_ref = template_ref
        self._timeout = fetch_timeout_s
        self._upload_max_bytes = upload_max_bytes

        self._textures: dict[str, np.ndarray] = {}
        self._template: Optional[np.ndarray] = None
        self._tickets: dict[str, int] = {}
        self._open_handles = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssetLoader":
        return cls(
            static_root=settings.static_root,
            asset_base_url=settings.asset_base_url,
            template_ref=settings.template_ref,
            fetch_timeout_s=settings.asset_fetch_timeout_s,
            upload_max_bytes=settings.upload_max_bytes,
        )

    # ─── Read Access ─────────────────────────────────────────────────────────

    @property
    def template(self) -> Optional[np.ndarray]:
        return self._template

    @property
    def open_handles(self) -> int:
        """Decode handles currently open. Zero whenever no decode is running."""
        return self._open_handles

    def texture_bitmap(self, texture: Texture) -> Optional[np.ndarray]:
        return self._textures.get(texture.id)

    def has_texture(self, texture_id: str) -> bool:
        return texture_id in self._textures

    def cached_texture_ids(self) -> list[str]:
        return list(self._textures)

    # ─── Tickets ─────────────────────────────────────────────────────────────

    def _take_ticket(self, slot: str) -> int:
        ticket = self._tickets.get(slot, 0) + 1
        self._tickets[slot] = ticket
        return ticket

    def _is_current(self, slot: str, ticket: int) -> bool:
        return self._tickets.get(slot) == ticket

    # ─── Loads ───────────────────────────────────────────────────────────────

    async def load_texture(self, texture: Texture) -> LoadResult:
        """
        Fetch and decode a texture image, caching it by texture id.
        A texture without image_ref resolves immediately with no bitmap.
        """
        ticket = self._take_ticket(SLOT_TEXTURE)

        if texture.image_ref is None:
            return LoadResult(slot=SLOT_TEXTURE)

        cached = self._textures.get(texture.id)
        if cached is not None:
            return LoadResult(slot=SLOT_TEXTURE, bitmap=cached, cached=True)

        result = await self._load_ref(SLOT_TEXTURE, texture.image_ref)

        if not self._is_current(SLOT_TEXTURE, ticket):
            log.debug("stale_texture_discarded", texture_id=texture.id)
            return LoadResult(slot=SLOT_TEXTURE, stale=True)

        if result.ok and result.bitmap is not None:
            self._textures[texture.id] = result.bitmap
            log.info(
                "texture_loaded",
                texture_id=texture.id,
                size=result.bitmap.shape[1::-1],
            )
        else:
            log.warning("texture_load_failed", texture_id=texture.id, error=str(result.error))
        return result

    async def load_template(self) -> LoadResult:
        """Fetch and decode the background template, if one is configured."""
        ticket = self._take_ticket(SLOT_TEMPLATE)
        if self._template_ref is None:
            return LoadResult(slot=SLOT_TEMPLATE)

        result = await self._load_ref(SLOT_TEMPLATE, self._template_ref)

        if not self._is_current(SLOT_TEMPLATE, ticket):
            return LoadResult(slot=SLOT_TEMPLATE, stale=True)

        if result.ok:
            self._template = result.bitmap
            log.info("template_loaded", ref=self._template_ref)
        else:
            log.warning("template_load_failed", ref=self._template_ref, error=str(result.error))
        return result

    async def load_upload(self, data: bytes) -> LoadResult:
        """
        Validate and decode user artwork. The loader keeps no copy:
        committing the bitmap to the design state is the caller's job.
        """
        ticket = self._take_ticket(SLOT_ARTWORK)

        try:
            validate_upload_bytes(data, self._upload_max_bytes)
            bitmap, fmt = await asyncio.to_thread(self._decode, data)
            result = LoadResult(slot=SLOT_ARTWORK, bitmap=bitmap, source_format=fmt)
        except UnsupportedImageError as exc:
            result = LoadResult(slot=SLOT_ARTWORK, error=exc)
        except _DECODE_ERRORS as exc:
            result = LoadResult(
                slot=SLOT_ARTWORK,
                error=UnsupportedImageError(
                    "The artwork file could not be decoded. "
                    f"The file may be corrupted or truncated ({type(exc).__name__})."
                ),
            )

        if not self._is_current(SLOT_ARTWORK, ticket):
            log.debug("stale_upload_discarded")
            return LoadResult(slot=SLOT_ARTWORK, stale=True)

        if result.ok:
            log.info(
                "artwork_decoded",
                width=result.bitmap.shape[1],
                height=result.bitmap.shape[0],
                format=result.source_format,
            )
        else:
            log.warning("artwork_rejected", error=str(result.error))
        return result

    def release(self) -> None:
        """Drop every decoded bitmap. Called when the session ends."""
        self._textures.clear()
        self._template = None
        # Invalidate in-flight loads so they cannot repopulate the cache
        for slot in (SLOT_TEXTURE, SLOT_TEMPLATE, SLOT_ARTWORK):
            self._take_ticket(slot)

    # ─── Internals ───────────────────────────────────────────────────────────

    def _decode(self, data: bytes) -> tuple[np.ndarray, Optional[str]]:
        self._open_handles += 1
        try:
            return decode_bgra(data)
        finally:
            self._open_handles -= 1

    async def _load_ref(self, slot: str, ref: str) -> LoadResult:
        try:
            data = await self._fetch(ref)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            return LoadResult(slot=slot, error=AssetLoadError(ref, str(exc) or type(exc).__name__))

        try:
            bitmap, fmt = await asyncio.to_thread(self._decode, data)
        except _DECODE_ERRORS as exc:
            return LoadResult(slot=slot, error=AssetLoadError(ref, f"decode failed: {exc}"))

        return LoadResult(slot=slot, bitmap=bitmap, source_format=fmt)

    async def _fetch(self, ref: str) -> bytes:
        if ref.startswith("data:"):
            return data_url_to_bytes(ref)
        if ref.startswith(("http://", "https://")):
            return await self._fetch_url(ref)
        if self._asset_base_url:
            return await self._fetch_url(
                self._asset_base_url.rstrip("/") + "/" + ref.lstrip("/")
            )
        path = self._resolve_static(ref)
        return await asyncio.to_thread(path.read_bytes)

    async def _fetch_url(self, url: str) -> bytes:
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content

    def _resolve_static(self, ref: str) -> Path:
        """Resolve a static ref inside static_root, rejecting traversal."""
        root = self._static_root.resolve()
        requested = (root / ref.lstrip("/")).resolve()
        try:
            requested.relative_to(root)
        except ValueError:
            raise ValueError(f"Asset path escapes the static root: {ref}") from None
        return requested
