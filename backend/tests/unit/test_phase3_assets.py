# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 — Asset tests.
Texture catalog, upload validation, image decoding, and the asset
loader's cache, fallback, and stale-result guard.
Images are generated in-memory; the static root is a temp dir.
"""

import asyncio
import io
import json

import cv2
import numpy as np
import pytest
from PIL import Image

from app.models.design import Texture


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _png(w=40, h=20, bgra=(10, 20, 30, 255)) -> bytes:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:] = bgra
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def _jpeg(w=32, h=16) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (w, h), (200, 100, 50)).save(buf, format="JPEG")
    return buf.getvalue()


def _loader(static_root, **kwargs):
    from app.modules.assets.loader import AssetLoader
    kwargs.setdefault("template_ref", None)
    return AssetLoader(static_root=static_root, **kwargs)


# ─── Catalog ─────────────────────────────────────────────────────────────────

def test_builtin_catalog_default_is_plain():
    from app.modules.assets import load_catalog
    catalog = load_catalog()
    assert catalog.default.id == "plain"
    assert catalog.default.fallback_color == "#f3f4f6"
    assert catalog.default.image_ref is None
    assert len(catalog) == 11


def test_builtin_catalog_order_and_images():
    from app.modules.assets import load_catalog
    ids = [t.id for t in load_catalog()]
    assert ids[:3] == ["plain", "cosmic-nova", "volcano-lava"]
    assert ids[-1] == "carbon"
    assert load_catalog().get("cosmic-nova").image_ref == "/photos/lid1.png"


def test_catalog_get_unknown_raises():
    from app.api.middleware.error_handler import TextureNotFoundError
    from app.modules.assets import load_catalog
    with pytest.raises(TextureNotFoundError):
        load_catalog().get("nope")
    assert "nope" not in load_catalog()


def test_catalog_rejects_duplicates():
    from app.modules.assets import TextureCatalog
    t = Texture(id="plain", display_name="Plain")
    with pytest.raises(ValueError, match="Duplicate"):
        TextureCatalog([t, t])


def test_catalog_default_must_not_have_image():
    from app.modules.assets import TextureCatalog
    with pytest.raises(ValueError):
        TextureCatalog([Texture(id="plain", display_name="P", image_ref="/x.png")])


def test_catalog_default_must_exist():
    from app.modules.assets import TextureCatalog
    with pytest.raises(ValueError):
        TextureCatalog([Texture(id="other", display_name="O")])


def test_catalog_from_json(tmp_path):
    from app.modules.assets import load_catalog
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "default": "blank",
        "textures": [
            {"id": "blank", "display_name": "Blank", "fallback_color": "#ffffff"},
            {"id": "gold", "display_name": "Gold", "price_delta": 5.0,
             "image_ref": "/photos/gold.png"},
        ],
    }))
    catalog = load_catalog(path)
    assert catalog.default.id == "blank"
    assert catalog.get("gold").price_delta == 5.0


def test_texture_fill_color_default():
    assert Texture(id="x", display_name="X").fill_color == "#eceff1"
    assert Texture(id="y", display_name="Y", fallback_color="#123456").fill_color == "#123456"


def test_texture_rejects_bad_colour():
    from pydantic import ValidationError
    with pytest.raises(ValidationError):
        Texture(id="x", display_name="X", fallback_color="red")


# ─── Validator ───────────────────────────────────────────────────────────────

def test_sniff_formats():
    from app.modules.assets import sniff_image_format
    assert sniff_image_format(_png()) == "png"
    assert sniff_image_format(_jpeg()) == "jpeg"
    assert sniff_image_format(b"GIF89a....") == "gif"
    assert sniff_image_format(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "webp"
    assert sniff_image_format(b"RIFF\x00\x00\x00\x00WAVEfmt ") is None
    assert sniff_image_format(b"hello world") is None


def test_validate_upload_rejects_empty_and_unknown():
    from app.api.middleware.error_handler import UnsupportedImageError
    from app.modules.assets import validate_upload_bytes
    with pytest.raises(UnsupportedImageError, match="empty"):
        validate_upload_bytes(b"", 1024)
    with pytest.raises(UnsupportedImageError, match="not a supported image"):
        validate_upload_bytes(b"%PDF-1.7 ...", 1024)


def test_validate_upload_rejects_oversize():
    from app.api.middleware.error_handler import UnsupportedImageError
    from app.modules.assets import validate_upload_bytes
    with pytest.raises(UnsupportedImageError, match="exceeds"):
        validate_upload_bytes(_png(), 10)


def test_is_image_content_type():
    from app.modules.assets import is_image_content_type
    assert is_image_content_type("image/png")
    assert is_image_content_type("IMAGE/JPEG")
    assert not is_image_content_type("text/plain")
    assert not is_image_content_type(None)


# ─── Decoding ────────────────────────────────────────────────────────────────

def test_decode_bgra_keeps_alpha():
    from app.utils.image_utils import decode_bgra
    bitmap, fmt = decode_bgra(_png(8, 4, (1, 2, 3, 77)))
    assert fmt == "PNG"
    assert bitmap.shape == (4, 8, 4)
    assert tuple(bitmap[0, 0]) == (1, 2, 3, 77)


def test_decode_bgra_adds_alpha_to_jpeg():
    from app.utils.image_utils import decode_bgra
    bitmap, fmt = decode_bgra(_jpeg(32, 16))
    assert fmt == "JPEG"
    assert bitmap.shape == (16, 32, 4)
    assert (bitmap[..., 3] == 255).all()


def test_decode_bgra_applies_exif_orientation():
    from app.utils.image_utils import decode_bgra
    img = Image.new("RGB", (30, 10), (0, 0, 0))
    exif = img.getexif()
    exif[0x0112] = 6   # rotate 90° clockwise to display
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())

    bitmap, _ = decode_bgra(buf.getvalue())
    assert bitmap.shape[:2] == (30, 10)


def test_parse_hex_color_is_bgr():
    from app.utils.image_utils import parse_hex_color
    assert parse_hex_color("#0b0f1a") == (0x1a, 0x0f, 0x0b)
    with pytest.raises(ValueError):
        parse_hex_color("#fff")


# ─── Loader: textures ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_load_texture_from_static_root(tmp_path):
    (tmp_path / "photos").mkdir()
    (tmp_path / "photos" / "lid1.png").write_bytes(_png(50, 25))
    loader = _loader(tmp_path)
    tex = Texture(id="cosmic-nova", display_name="Cosmic", image_ref="/photos/lid1.png")

    result = await loader.load_texture(tex)

    assert result.ok
    assert result.bitmap.shape == (25, 50, 4)
    assert loader.has_texture("cosmic-nova")
    assert loader.texture_bitmap(tex) is result.bitmap


@pytest.mark.asyncio
async def test_load_texture_from_data_url(tmp_path):
    from app.utils.image_utils import png_data_url
    loader = _loader(tmp_path)
    tex = Texture(id="inline", display_name="Inline", image_ref=png_data_url(_png(12, 6)))

    result = await loader.load_texture(tex)

    assert result.ok
    assert result.bitmap.shape == (6, 12, 4)


@pytest.mark.asyncio
async def test_load_texture_cache_hit_skips_fetch(tmp_path):
    (tmp_path / "a.png").write_bytes(_png())
    loader = _loader(tmp_path)
    tex = Texture(id="a", display_name="A", image_ref="/a.png")

    await loader.load_texture(tex)
    (tmp_path / "a.png").unlink()
    again = await loader.load_texture(tex)

    assert again.ok and again.cached


@pytest.mark.asyncio
async def test_load_texture_without_image(tmp_path):
    loader = _loader(tmp_path)
    result = await loader.load_texture(Texture(id="plain", display_name="Plain"))
    assert result.ok
    assert result.bitmap is None


@pytest.mark.asyncio
async def test_load_texture_missing_file_returns_error(tmp_path):
    from app.api.middleware.error_handler import AssetLoadError
    loader = _loader(tmp_path)
    tex = Texture(id="gone", display_name="Gone", image_ref="/photos/missing.png")

    result = await loader.load_texture(tex)

    assert not result.ok
    assert isinstance(result.error, AssetLoadError)
    assert result.error.ref == "/photos/missing.png"
    assert not loader.has_texture("gone")


@pytest.mark.asyncio
async def test_load_texture_undecodable_returns_error(tmp_path):
    from app.api.middleware.error_handler import AssetLoadError
    (tmp_path / "bad.png").write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)
    loader = _loader(tmp_path)

    result = await loader.load_texture(Texture(id="bad", display_name="Bad", image_ref="/bad.png"))

    assert isinstance(result.error, AssetLoadError)
    assert loader.open_handles == 0


@pytest.mark.asyncio
async def test_static_refs_cannot_escape_root(tmp_path):
    root = tmp_path / "static"
    root.mkdir()
    (tmp_path / "secret.png").write_bytes(_png())
    loader = _loader(root)

    result = await loader.load_texture(
        Texture(id="x", display_name="X", image_ref="/../secret.png")
    )
    assert result.error is not None


@pytest.mark.asyncio
async def test_stale_texture_is_discarded(tmp_path):
    loader = _loader(tmp_path)
    gate = asyncio.Event()
    png = _png()

    async def fake_fetch(ref):
        if ref == "/slow.png":
            await gate.wait()
        return png

    loader._fetch = fake_fetch
    slow = Texture(id="slow", display_name="Slow", image_ref="/slow.png")
    fast = Texture(id="fast", display_name="Fast", image_ref="/fast.png")

    slow_task = asyncio.create_task(loader.load_texture(slow))
    await asyncio.sleep(0)
    fast_result = await loader.load_texture(fast)
    gate.set()
    slow_result = await slow_task

    assert fast_result.ok
    assert slow_result.stale
    assert not slow_result.ok
    assert loader.cached_texture_ids() == ["fast"]


@pytest.mark.asyncio
async def test_load_template(tmp_path):
    (tmp_path / "preview.png").write_bytes(_png(64, 64))
    loader = _loader(tmp_path, template_ref="/preview.png")
    result = await loader.load_template()
    assert result.ok
    assert loader.template.shape == (64, 64, 4)


@pytest.mark.asyncio
async def test_load_template_missing_falls_back(tmp_path):
    loader = _loader(tmp_path, template_ref="/preview.png")
    result = await loader.load_template()
    assert result.error is not None
    assert loader.template is None


@pytest.mark.asyncio
async def test_asset_base_url_is_used(tmp_path):
    loader = _loader(tmp_path, asset_base_url="https://cdn.example.com/")
    seen = []

    async def fake_fetch_url(url):
        seen.append(url)
        return _png()

    loader._fetch_url = fake_fetch_url
    result = await loader.load_texture(Texture(id="t", display_name="T", image_ref="/photos/lid2.png"))

    assert result.ok
    assert seen == ["https://cdn.example.com/photos/lid2.png"]


# ─── Loader: uploads ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_load_upload_success_releases_handles(tmp_path):
    loader = _loader(tmp_path)
    result = await loader.load_upload(_png(120, 60))

    assert result.ok
    art = result.to_artwork()
    assert art.natural_size == (120, 60)
    assert art.source_format == "PNG"
    assert loader.open_handles == 0


@pytest.mark.asyncio
async def test_load_upload_rejects_non_image(tmp_path):
    from app.api.middleware.error_handler import UnsupportedImageError
    loader = _loader(tmp_path)
    result = await loader.load_upload(b"just some text")

    assert isinstance(result.error, UnsupportedImageError)
    assert loader.open_handles == 0


@pytest.mark.asyncio
async def test_load_upload_truncated_file(tmp_path):
    from app.api.middleware.error_handler import UnsupportedImageError
    loader = _loader(tmp_path)
    data = _jpeg(64, 64)
    result = await loader.load_upload(data[: len(data) // 3])

    assert isinstance(result.error, UnsupportedImageError)
    assert loader.open_handles == 0


@pytest.mark.asyncio
async def test_load_upload_size_limit(tmp_path):
    loader = _loader(tmp_path, upload_max_bytes=16)
    result = await loader.load_upload(_png())
    assert result.error is not None


@pytest.mark.asyncio
async def test_release_drops_cache(tmp_path):
    (tmp_path / "a.png").write_bytes(_png())
    (tmp_path / "preview.png").write_bytes(_png())
    loader = _loader(tmp_path, template_ref="/preview.png")
    await loader.load_template()
    await loader.load_texture(Texture(id="a", display_name="A", image_ref="/a.png"))

    loader.release()

    assert loader.template is None
    assert loader.cached_texture_ids() == []
