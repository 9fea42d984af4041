# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 6 — Snapshot export and cart hand-off tests.
Export gating, PNG dimensions, persistence into per-session storage,
and the CartItem / CheckoutRequest shapes.
"""

import base64

import cv2
import numpy as np
import pytest

from app.models.design import DesignState, Texture
from app.modules.compositor import LayerCompositor, RenderSurface, ResolvedAssets, SurfaceGeometry
from app.modules.export import SnapshotExporter

PLAIN = Texture(id="plain", display_name="Plain", fallback_color="#f3f4f6")


def _rendered_surface(pixel_ratio=1.0) -> RenderSurface:
    surface = RenderSurface(SurfaceGeometry(), pixel_ratio)
    LayerCompositor(surface).render(DesignState(chosen_texture=PLAIN), ResolvedAssets())
    return surface


def _decode(png: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_UNCHANGED)


# ─── Exporter ────────────────────────────────────────────────────────────────

def test_export_before_render_is_none():
    surface = RenderSurface(SurfaceGeometry(), 1.0)
    assert SnapshotExporter().export(surface) is None


def test_export_matches_backing_buffer():
    snap = SnapshotExporter().export(_rendered_surface(2.0))
    assert (snap.width, snap.height) == (1280, 1280)
    img = _decode(snap.png_bytes)
    assert img.shape == (1280, 1280, 4)


def test_export_is_lossless_and_opaque():
    surface = _rendered_surface()
    snap = SnapshotExporter().export(surface)
    img = _decode(snap.png_bytes)
    assert np.array_equal(img, surface.frame)
    assert (img[..., 3] == 255).all()


def test_export_after_clear_is_none():
    surface = _rendered_surface()
    surface.clear()
    assert SnapshotExporter().export(surface) is None


def test_data_url_round_trips():
    snap = SnapshotExporter().export(_rendered_surface())
    assert snap.data_url.startswith("data:image/png;base64,")
    payload = snap.data_url.split(",", 1)[1]
    assert base64.b64decode(payload) == snap.png_bytes


def test_save_numbers_snapshots(tmp_storage):
    storage, _ = tmp_storage
    exporter = SnapshotExporter()
    snap = exporter.export(_rendered_surface())

    url1 = exporter.save(snap, "sess-a")
    url2 = exporter.save(snap, "sess-a")

    assert url1 == "/assets/sess-a/snapshots/snapshot_0001.png"
    assert url2 == "/assets/sess-a/snapshots/snapshot_0002.png"
    assert (storage / "sess-a" / "snapshots" / "snapshot_0002.png").read_bytes() == snap.png_bytes


# ─── Live Preview ────────────────────────────────────────────────────────────

class _EventRecorder:
    def __init__(self):
        self.events = []

    def info(self, event, **kw):
        self.events.append(event)

    debug = info


def test_preview_is_not_logged_as_export(monkeypatch):
    import app.modules.export.snapshot as snapshot_module
    recorder = _EventRecorder()
    monkeypatch.setattr(snapshot_module, "log", recorder)
    surface = _rendered_surface()

    preview = SnapshotExporter().preview(surface)

    assert preview.png_bytes == SnapshotExporter().export(surface).png_bytes
    assert recorder.events == ["preview_encoded", "snapshot_exported"]


def test_preview_before_render_is_none():
    assert SnapshotExporter().preview(RenderSurface(SurfaceGeometry(), 1.0)) is None


# ─── Design Session ──────────────────────────────────────────────────────────

def _session(session_id):
    from app.config import get_settings
    from app.core.design_session import DesignSession
    from app.modules.assets.catalog import load_catalog
    return DesignSession(session_id, get_settings(), load_catalog())


@pytest.mark.asyncio
async def test_cart_item_carries_last_snapshot(tmp_storage):
    session = _session("sess-b")
    await session.start()
    snap = session.snapshot()

    item = session.cart_item()
    assert item.name == "Custom Box Lid"
    assert item.price == 29.99
    assert item.qty == 1
    assert item.texture_id == "plain"
    assert item.preview == snap.data_url
    assert item.preview_url == "/assets/sess-b/snapshots/snapshot_0001.png"


@pytest.mark.asyncio
async def test_cart_item_without_snapshot_takes_none(tmp_storage):
    storage, _ = tmp_storage
    session = _session("sess-d")
    await session.start()

    item = session.cart_item()

    assert session.last_snapshot is None
    assert item.preview is None
    assert item.preview_url is None
    assert not list(storage.glob("sess-d/snapshots/*.png"))


@pytest.mark.asyncio
async def test_cart_item_keeps_earlier_snapshot_after_edits(tmp_storage):
    session = _session("sess-e")
    await session.start()
    snap = session.snapshot()
    session.controller.set_rotation(30)

    item = session.cart_item()

    assert item.preview == snap.data_url
    assert len(list(tmp_storage[0].glob("sess-e/snapshots/*.png"))) == 1


@pytest.mark.asyncio
async def test_unsaved_snapshot_has_no_preview_url(tmp_storage):
    session = _session("sess-f")
    await session.start()
    session.snapshot(persist=False)

    item = session.cart_item()
    assert item.preview.startswith("data:image/png;base64,")
    assert item.preview_url is None


@pytest.mark.asyncio
async def test_cart_item_url_uses_public_base(tmp_storage, monkeypatch):
    from app.config import get_settings
    from app.models.cart import CheckoutRequest
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://shop.example.com/")
    get_settings.cache_clear()

    session = _session("sess-g")
    await session.start()
    session.snapshot()
    item = session.cart_item()

    url = "https://shop.example.com/assets/sess-g/snapshots/snapshot_0001.png"
    assert item.preview_url == url
    assert CheckoutRequest(items=[item]).line_items()[0].images == [url]


def test_session_snapshot_unavailable_before_start(tmp_storage):
    session = _session("sess-c")
    assert session.snapshot() is None
    item = session.cart_item()
    assert item.preview is None
    assert item.preview_url is None


# ─── Cart Models ─────────────────────────────────────────────────────────────

def test_unit_price_adds_texture_delta():
    from app.models.design import unit_price
    gold = Texture(id="gold", display_name="Gold", price_delta=5.0)
    assert unit_price(DesignState(chosen_texture=gold), 29.99) == 34.99


def test_build_cart_item():
    from app.models.cart import build_cart_item
    item = build_cart_item(DesignState(chosen_texture=PLAIN), 29.99, preview="data:x")
    assert item.price == 29.99
    assert item.preview == "data:x"
    assert item.id


def test_cart_item_validation():
    from pydantic import ValidationError
    from app.models.cart import CartItem
    with pytest.raises(ValidationError):
        CartItem(price=0, texture_id="plain")
    with pytest.raises(ValidationError):
        CartItem(price=10, qty=0, texture_id="plain")


def test_checkout_requires_items():
    from pydantic import ValidationError
    from app.models.cart import CheckoutRequest
    with pytest.raises(ValidationError):
        CheckoutRequest(items=[])


def test_customer_email_shape():
    from pydantic import ValidationError
    from app.models.cart import CustomerInfo
    assert CustomerInfo(email="").email == ""
    with pytest.raises(ValidationError):
        CustomerInfo(email="not-an-email")


def test_line_items_in_minor_units():
    from app.models.cart import CartItem, CheckoutRequest
    req = CheckoutRequest(items=[
        CartItem(price=29.99, qty=2, texture_id="carbon",
                 preview="data:image/png;base64,AAAA",
                 preview_url="https://shop.example.com/assets/s/snapshots/snapshot_0001.png"),
        CartItem(price=31.5, texture_id="plain", preview="data:image/png;base64,BBBB"),
        CartItem(price=29.99, texture_id="plain", preview_url="/assets/s/snapshots/snapshot_0002.png"),
    ])
    lines = req.line_items()

    assert lines[0].unit_amount == 2999
    assert lines[0].quantity == 2
    assert lines[0].currency == "gbp"
    assert lines[0].name == "STASHBOX - Custom Box Lid"
    assert "carbon" in lines[0].description
    assert lines[0].images == ["https://shop.example.com/assets/s/snapshots/snapshot_0001.png"]
    # Inline previews are never forwarded
    assert lines[1].images == []
    assert lines[1].unit_amount == 3150
    # Service-relative URLs are not reachable by the provider
    assert lines[2].images == []
