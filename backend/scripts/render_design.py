"""
DripBox — Headless Design Render
Composites a lid design offline and writes the snapshot PNG, using the
same pipeline as the API. Handy for producing print references and for
eyeballing layout changes.

Run from backend/:
    python -m scripts.render_design --texture cosmic-nova --artwork art.png \
        --scale 1.2 --rotation 15 --offset 40 -10 --pixel-ratio 2 --out lid.png
"""

import argparse
import asyncio
import mimetypes
import sys
import uuid
from pathlib import Path

from app.config import get_settings
from app.core.design_session import DesignSession
from app.modules.assets.catalog import get_catalog
from app.modules.interaction.controller import UploadedFile
from app.utils.logger import configure_logging


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render a DripBox lid design to PNG.")
    p.add_argument("--texture", default=None, help="Texture id (default: catalog default)")
    p.add_argument("--artwork", type=Path, default=None, help="Artwork image file")
    p.add_argument("--scale", type=float, default=None)
    p.add_argument("--rotation", type=float, default=None, help="Degrees, clockwise")
    p.add_argument("--offset", type=float, nargs=2, metavar=("X", "Y"), default=None,
                   help="Artwork offset from the safe-area centre, logical px")
    p.add_argument("--pixel-ratio", type=float, default=None)
    p.add_argument("--out", type=Path, default=Path("lid.png"))
    p.add_argument("--list-textures", action="store_true")
    return p.parse_args(argv)


async def render(args: argparse.Namespace) -> int:
    settings = get_settings()
    catalog = get_catalog()

    session = DesignSession(
        session_id=f"cli-{uuid.uuid4().hex[:8]}",
        settings=settings,
        catalog=catalog,
        pixel_ratio=args.pixel_ratio,
        texture_id=args.texture,
    )
    await session.start()
    controller = session.controller

    if args.artwork is not None:
        content_type, _ = mimetypes.guess_type(str(args.artwork))
        result = await controller.open_file(UploadedFile(
            filename=args.artwork.name,
            content_type=content_type,
            data=args.artwork.read_bytes(),
        ))
        if not result.ok:
            print(f"  ✗ {result.error}")
            return 1

    if args.scale is not None:
        controller.set_scale(args.scale)
    if args.rotation is not None:
        controller.set_rotation(args.rotation)
    if args.offset is not None:
        # Drag from the surface centre by the requested offset
        centre = session.surface.geometry.size / 2.0
        controller.pointer_down(centre, centre)
        controller.pointer_move(centre + args.offset[0], centre + args.offset[1])
        controller.pointer_up()

    for warning in controller.warnings:
        print(f"  ! {warning}")

    snapshot = session.snapshot(persist=False)
    if snapshot is None:
        print("  ✗ Nothing was rendered.")
        return 1

    args.out.write_bytes(snapshot.png_bytes)
    summary = session.summary()
    print(f"  ✓ {args.out} ({snapshot.width}×{snapshot.height})")
    print(f"    texture={summary.texture_id} price={summary.unit_price:.2f} {summary.currency.upper()}")
    session.close()
    return 0


def main(argv=None) -> None:
    args = _parse_args(argv)
    configure_logging()

    if args.list_textures:
        for t in get_catalog():
            print(f"  {t.id:<14} {t.display_name:<22} +{t.price_delta:.2f}")
        return

    sys.exit(asyncio.run(render(args)))


if __name__ == "__main__":
    main()
