# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — /sessions endpoints
One design session per buyer. Each editor event maps to one request;
the response is the session summary after the change has been drawn.
Loads started by a request are awaited before it returns, so the
summary and render.png always reflect the settled state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Response, UploadFile, status

from app.api.middleware.error_handler import ExportUnavailableError
from app.dependencies import CatalogDep, SessionStoreDep
from app.models.cart import CartItem
from app.models.session import (
    CreateSessionRequest,
    PointerEventRequest,
    PointerKind,
    SessionSummary,
    SnapshotResponse,
    TextureChangeRequest,
    TransformUpdateRequest,
)
from app.modules.assets.loader import LoadResult
from app.modules.interaction.controller import UploadedFile
from app.utils.image_utils import PNG_MEDIA_TYPE
from app.utils.logger import get_logger, session_context

router = APIRouter(prefix="/sessions", tags=["sessions"])
log = get_logger(__name__)


async def _read_upload(upload: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type,
        data=await upload.read(),
    )


def _raise_for_upload(result: LoadResult) -> None:
    # A stale result was superseded by a newer upload; nothing to report
    if result.error is not None and not result.stale:
        raise result.error


# ─── Lifecycle ───────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=SessionSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Start a design session",
    description=(
        "Creates a session with the default texture and no artwork, and "
        "renders the first frame. pixel_ratio is clamped to [1, 2]."
    ),
)
async def create_session(
    store: SessionStoreDep,
    body: Optional[CreateSessionRequest] = None,
) -> SessionSummary:
    body = body or CreateSessionRequest()
    session = store.create_session(pixel_ratio=body.pixel_ratio, texture_id=body.texture_id)
    with session_context(session.session_id):
        await session.start()
        return session.summary()


@router.get("/{session_id}", response_model=SessionSummary, summary="Current design state")
async def get_session(session_id: str, store: SessionStoreDep) -> SessionSummary:
    session = store.require_session(session_id)
    return session.summary()


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End a design session",
    description="Releases the session's bitmaps. Saved snapshots stay available.",
)
async def delete_session(session_id: str, store: SessionStoreDep) -> Response:
    store.require_session(session_id)
    with session_context(session_id):
        store.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Texture ─────────────────────────────────────────────────────────────────

@router.put(
    "/{session_id}/texture",
    response_model=SessionSummary,
    summary="Choose the lid texture",
    description=(
        "Switches the texture. If its image cannot be loaded the lid shows the "
        "fallback colour and a warning is recorded; pass strict=true to get a "
        "502 instead."
    ),
)
async def change_texture(
    session_id: str,
    body: TextureChangeRequest,
    store: SessionStoreDep,
    catalog: CatalogDep,
    strict: bool = Query(False),
) -> SessionSummary:
    session = store.require_session(session_id)
    with session_context(session_id):
        texture = catalog.get(body.texture_id)
        task = session.controller.change_texture(texture)
        await session.controller.settle()

        if strict and task is not None:
            result: LoadResult = task.result()
            if result.error is not None and not result.stale:
                raise result.error
        return session.summary()


# ─── Artwork Import ──────────────────────────────────────────────────────────

@router.post(
    "/{session_id}/artwork",
    response_model=SessionSummary,
    summary="Upload artwork (file picker)",
    description=(
        "Any raster image the decoder recognises (PNG, JPEG, WebP, GIF, BMP, TIFF). "
        "A file that cannot be decoded leaves the current artwork unchanged and "
        "returns 422."
    ),
)
async def upload_artwork(
    session_id: str,
    file: UploadFile,
    store: SessionStoreDep,
) -> SessionSummary:
    session = store.require_session(session_id)
    with session_context(session_id):
        upload = await _read_upload(file)
        result = await session.controller.open_file(upload)
        _raise_for_upload(result)
        return session.summary()


@router.post(
    "/{session_id}/drop",
    response_model=SessionSummary,
    summary="Drop files onto the editor",
    description=(
        "The first file with an image/* content type is imported; the rest are "
        "ignored. A drop with no image file changes nothing."
    ),
)
async def drop_files(
    session_id: str,
    files: list[UploadFile],
    store: SessionStoreDep,
) -> SessionSummary:
    session = store.require_session(session_id)
    with session_context(session_id):
        uploads = [await _read_upload(f) for f in files]
        task = session.controller.drop_files(uploads)
        if task is not None:
            _raise_for_upload(await task)
        return session.summary()


# ─── Transform ───────────────────────────────────────────────────────────────

@router.patch(
    "/{session_id}/transform",
    response_model=SessionSummary,
    summary="Slider input",
    description="scale is clamped to [0.2, 3.0]; rotation is wrapped into [-180, 180].",
)
async def update_transform(
    session_id: str,
    body: TransformUpdateRequest,
    store: SessionStoreDep,
) -> SessionSummary:
    session = store.require_session(session_id)
    with session_context(session_id):
        if body.scale is not None:
            session.controller.set_scale(body.scale)
        if body.rotation_degrees is not None:
            session.controller.set_rotation(body.rotation_degrees)
        return session.summary()


@router.post(
    "/{session_id}/pointer",
    response_model=SessionSummary,
    summary="Pointer event",
    description="down / move / up / leave in logical surface coordinates.",
)
async def pointer_event(
    session_id: str,
    body: PointerEventRequest,
    store: SessionStoreDep,
) -> SessionSummary:
    session = store.require_session(session_id)
    controller = session.controller
    with session_context(session_id):
        if body.kind == PointerKind.DOWN:
            controller.pointer_down(body.x, body.y)
        elif body.kind == PointerKind.MOVE:
            controller.pointer_move(body.x, body.y)
        elif body.kind == PointerKind.UP:
            controller.pointer_up()
        else:
            controller.pointer_leave()
        return session.summary()


@router.post(
    "/{session_id}/reset",
    response_model=SessionSummary,
    summary="Reset the artwork transform",
)
async def reset_transform(session_id: str, store: SessionStoreDep) -> SessionSummary:
    session = store.require_session(session_id)
    with session_context(session_id):
        session.controller.reset()
        return session.summary()


# ─── Preview / Export ────────────────────────────────────────────────────────

@router.get(
    "/{session_id}/render.png",
    summary="Live preview",
    response_class=Response,
    responses={200: {"content": {PNG_MEDIA_TYPE: {}}}},
)
async def render_png(session_id: str, store: SessionStoreDep) -> Response:
    session = store.require_session(session_id)
    with session_context(session_id):
        snapshot = session.exporter.preview(session.surface)
        if snapshot is None:
            raise ExportUnavailableError(f"Session {session_id} has not rendered yet.")
        return Response(
            content=snapshot.png_bytes,
            media_type=PNG_MEDIA_TYPE,
            headers={"Cache-Control": "no-store"},
        )


@router.post(
    "/{session_id}/snapshot",
    response_model=SnapshotResponse,
    summary="Export a snapshot",
    description=(
        "Encodes the surface as PNG at full backing-buffer resolution, guides "
        "included. With persist=true (default) the file is also saved and its "
        "asset URL returned."
    ),
)
async def export_snapshot(
    session_id: str,
    store: SessionStoreDep,
    persist: bool = Query(True),
) -> SnapshotResponse:
    session = store.require_session(session_id)
    with session_context(session_id):
        snapshot = session.snapshot(persist=persist)
        if snapshot is None:
            raise ExportUnavailableError(f"Session {session_id} has not rendered yet.")
        return SnapshotResponse(
            session_id=session_id,
            width=snapshot.width,
            height=snapshot.height,
            preview=snapshot.data_url,
            preview_url=session.last_snapshot_url,
        )


@router.post(
    "/{session_id}/cart-item",
    response_model=CartItem,
    summary="Build the cart line for this design",
    description=(
        "Price is the base price plus the texture surcharge. The preview is the "
        "last explicit snapshot; it is omitted when none was taken."
    ),
)
async def cart_item(
    session_id: str,
    store: SessionStoreDep,
) -> CartItem:
    session = store.require_session(session_id)
    with session_context(session_id):
        item = session.cart_item()
        log.info("cart_item_built", price=item.price, texture_id=item.texture_id,
                 has_preview=item.preview is not None)
        return item
