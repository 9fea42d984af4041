# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Upload Validator
Cheap checks run before an uploaded file is handed to the decoder:
non-empty, within the size limit, and a recognised raster format
by magic bytes. The browser-supplied content type is not trusted.

Pixel dimensions are deliberately unconstrained; the compositor
fit-scales artwork of any size or aspect ratio.

Raises UnsupportedImageError (subclass of ValueError) on any failure
so the API error handler maps it cleanly to HTTP 422.
"""

from __future__ import annotations

from app.api.middleware.error_handler import UnsupportedImageError

# Supported formats by magic bytes (first few bytes of file)
_MAGIC_BYTES: dict[str, tuple[bytes, ...]] = {
    "jpeg": (b"\xff\xd8\xff",),
    "png":  (b"\x89PNG\r\n\x1a\n",),
    "gif":  (b"GIF87a", b"GIF89a"),
    "bmp":  (b"BM",),
    "tiff": (b"II*\x00", b"MM\x00*"),
    "webp": (b"RIFF",),          # RIFF....WEBP, checked further below
}

SUPPORTED_FORMATS = tuple(_MAGIC_BYTES)


def sniff_image_format(data: bytes) -> str | None:
    """
    Detect image format from magic bytes.
    Returns a format key from SUPPORTED_FORMATS, or None if unrecognised.
    """
    for fmt, prefixes in _MAGIC_BYTES.items():
        if fmt == "webp":
            if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
                return fmt
            continue
        if any(data.startswith(p) for p in prefixes):
            return fmt
    return None


def is_image_content_type(content_type: str | None) -> bool:
    """True for any image/* media type, as browsers report them on drop."""
    return bool(content_type) and content_type.lower().startswith("image/")


def validate_upload_bytes(
    data: bytes,
    max_bytes: int,
    label: str = "artwork",
) -> str:
    """
    Validate raw upload bytes before decoding.

    Checks performed (in order):
      1. Non-empty bytes
      2. File size within configured limit
      3. Magic byte format detection

    Returns:
        The sniffed format key.

    Raises:
        UnsupportedImageError: On any validation failure.
    """
    if not data:
        raise UnsupportedImageError(f"The {label} file is empty.")

    if len(data) > max_bytes:
        size_mb = len(data) / (1024 * 1024)
        raise UnsupportedImageError(
            f"The {label} file is {size_mb:.1f} MB, which exceeds the "
            f"maximum allowed size of {max_bytes // (1024 * 1024)} MB."
        )

    fmt = sniff_image_format(data)
    if fmt is None:
        raise UnsupportedImageError(
            f"The {label} file is not a supported image. "
            f"Please upload one of: {', '.join(f.upper() for f in SUPPORTED_FORMATS)}."
        )
    return fmt
