# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Error Taxonomy + Global Error Handler
Compositor failures are recoverable: the loader and exporter return them
as typed results, and routes raise them here only to shape the HTTP
response. Registered on the FastAPI app in main.py.
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.utils.logger import get_logger

log = get_logger(__name__)


class AssetLoadError(RuntimeError):
    """Texture or template fetch/decode failed. Rendering falls back."""

    def __init__(self, ref: str, reason: str) -> None:
        super().__init__(f"Could not load asset '{ref}': {reason}")
        self.ref = ref
        self.reason = reason


class UnsupportedImageError(ValueError):
    """Uploaded or dropped file is not a decodable raster image."""


class ExportUnavailableError(RuntimeError):
    """Snapshot requested before the surface has been rendered."""


class SessionNotFoundError(KeyError):
    """Raised when a session_id does not exist in the store."""


class TextureNotFoundError(KeyError):
    """Raised when a texture id is not in the catalog."""


def _error_body(code: str, message: str, detail: str | None = None) -> dict:
    body = {"error": {"code": code, "message": message}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(UnsupportedImageError)
    async def unsupported_image_handler(
        req: Request, exc: UnsupportedImageError
    ) -> JSONResponse:
        log.warning("unsupported_image", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                code="UNSUPPORTED_IMAGE",
                message=str(exc),
            ),
        )

    @app.exception_handler(ExportUnavailableError)
    async def export_unavailable_handler(
        req: Request, exc: ExportUnavailableError
    ) -> JSONResponse:
        log.info("export_unavailable", path=str(req.url))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(
                code="EXPORT_UNAVAILABLE",
                message="No rendered preview is available yet.",
                detail=str(exc) or None,
            ),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(
        req: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        log.warning("session_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="SESSION_NOT_FOUND",
                message=f"Session not found: {exc}",
            ),
        )

    @app.exception_handler(TextureNotFoundError)
    async def texture_not_found_handler(
        req: Request, exc: TextureNotFoundError
    ) -> JSONResponse:
        log.warning("texture_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="TEXTURE_NOT_FOUND",
                message=f"Texture not found: {exc}",
            ),
        )

    @app.exception_handler(AssetLoadError)
    async def asset_load_handler(
        req: Request, exc: AssetLoadError
    ) -> JSONResponse:
        log.warning("asset_load_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_error_body(
                code="ASSET_LOAD_ERROR",
                message=str(exc),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
