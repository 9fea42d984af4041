# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Image I/O and Conversion Utilities
Shared helpers used by the asset loader, compositor, and exporter.

Decoded bitmaps are BGRA uint8 numpy arrays (OpenCV channel order,
alpha kept). The compositor works on float32 BGRA in [0, 1] and
converts back to uint8 only when the frame is finished.
"""

import base64
import io
from contextlib import contextmanager
from typing import Iterator

import cv2
import numpy as np
from PIL import Image, ImageOps

PNG_MEDIA_TYPE = "image/png"


# ─── Decode ──────────────────────────────────────────────────────────────────

@contextmanager
def open_image(data: bytes) -> Iterator[Image.Image]:
    """
    Open encoded bytes as a fully loaded PIL image.
    The byte buffer and decoder are closed when the block exits,
    whether decoding succeeded or raised.
    """
    with io.BytesIO(data) as buf:
        with Image.open(buf) as img:
            img.load()
            yield img


def decode_bgra(data: bytes) -> tuple[np.ndarray, str | None]:
    """
    Decode raw image bytes to a BGRA uint8 array.
    EXIF orientation is applied so phone photos come out upright.

    Returns:
        (bitmap, PIL format name)

    Raises:
        OSError / ValueError from PIL when the bytes are not a decodable image.
    """
    with open_image(data) as img:
        fmt = img.format
        upright = ImageOps.exif_transpose(img)
        rgba = np.array(upright.convert("RGBA"))
    return cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA), fmt


def bgr_to_bgra(img: np.ndarray) -> np.ndarray:
    """Add an opaque alpha channel to a BGR array."""
    return cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)


# ─── Encode ──────────────────────────────────────────────────────────────────

def bgra_to_png_bytes(img: np.ndarray) -> bytes:
    """Encode a BGRA (or BGR) uint8 array to PNG bytes (lossless)."""
    success, buf = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


def png_data_url(png: bytes) -> str:
    """Wrap PNG bytes as a data: URL for inline previews."""
    return f"data:{PNG_MEDIA_TYPE};base64,{base64.b64encode(png).decode('ascii')}"


def data_url_to_bytes(url: str) -> bytes:
    """Inverse of png_data_url. Raises ValueError on a malformed URL."""
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URL.")
    return base64.b64decode(payload, validate=True)


# ─── Colour ──────────────────────────────────────────────────────────────────

def parse_hex_color(value: str) -> tuple[int, int, int]:
    """'#rrggbb' → (b, g, r)."""
    v = value.lstrip("#")
    if len(v) != 6:
        raise ValueError(f"Expected #rrggbb colour, got {value!r}")
    r, g, b = int(v[0:2], 16), int(v[2:4], 16), int(v[4:6], 16)
    return b, g, r


def solid_bgra(h: int, w: int, bgr: tuple[int, int, int], alpha: float = 1.0) -> np.ndarray:
    """Float32 BGRA layer filled with one colour."""
    layer = np.empty((h, w, 4), dtype=np.float32)
    layer[..., :3] = np.array(bgr, dtype=np.float32) / 255.0
    layer[..., 3] = alpha
    return layer


# ─── Float / uint8 Bridge ────────────────────────────────────────────────────

def to_float(img: np.ndarray) -> np.ndarray:
    """uint8 BGRA → float32 BGRA in [0, 1]."""
    if img.shape[2] == 3:
        img = bgr_to_bgra(img)
    return img.astype(np.float32) / 255.0


def to_uint8(img: np.ndarray) -> np.ndarray:
    """float32 [0, 1] → uint8, rounding to nearest."""
    return np.clip(np.rint(img * 255.0), 0, 255).astype(np.uint8)


# ─── Compositing ─────────────────────────────────────────────────────────────

def alpha_composite(
    dst: np.ndarray,
    src: np.ndarray,
    mask: np.ndarray | None = None,
) -> np.ndarray:
    """
    Source-over composite of src onto dst (both float32 BGRA, straight
    alpha). An optional H×W float mask in [0, 1] multiplies src alpha,
    which is how clipping is applied.

    Returns a new array; dst is left unchanged.
    """
    sa = src[..., 3:4]
    if mask is not None:
        sa = sa * mask[..., np.newaxis]
    da = dst[..., 3:4]

    out_a = sa + da * (1.0 - sa)
    premul = src[..., :3] * sa + dst[..., :3] * da * (1.0 - sa)
    safe_a = np.where(out_a > 0, out_a, 1.0)

    out = np.empty_like(dst)
    out[..., :3] = np.where(out_a > 0, premul / safe_a, 0.0)
    out[..., 3:4] = out_a
    return out
