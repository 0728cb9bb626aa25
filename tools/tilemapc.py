#!/usr/bin/env python3
"""
tilemapc.py - Compile a PNG image made of 8x8 tiles into a tilemap for a PNG tileset.

Outputs:
  - tilemap   one byte per image tile (row-major), each the index of the
              matching tile in the tileset (row-major); no header
  - .json     Optional debug (geometry, tilemap rows, tile usage)

Usage:
  python tools/tilemapc.py -s tileset.png -i level.png -m level.tilemap
  python tools/tilemapc.py -s tileset.png -i level.png -m level.tilemap --json level.json

Notes:
- Tiles match only when all RGBA bytes are identical (no flips, no palette remap).
- When the tileset contains duplicates, the lowest index wins.
- The tileset may hold at most 256 tiles.
- Existing output files are never overwritten.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections import Counter
from typing import List, Optional

from tiled_image import MAX_TILESET_SIZE, TiledImage, load_tiled_image
from tilemap import Tilemap, generate_tilemap, remove_partial, save_tilemap
from tilemap_errors import (
    AlreadyExistsError,
    ArgumentError,
    TilemapError,
    TilesetTooLargeError,
    WriteError,
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tilemapc",
        description="Map every 8x8 tile of a PNG image to its index in a PNG tileset.",
    )
    ap.add_argument("-s", "--tileset", required=True, metavar="FILE", help="Tileset as PNG image (required)")
    ap.add_argument(
        "-i",
        "--image",
        required=True,
        metavar="FILE",
        help="PNG image made up of tiles from the tileset (required)",
    )
    ap.add_argument(
        "-m",
        "--tilemap",
        required=True,
        metavar="FILE",
        help="Destination file for the generated tilemap (required)",
    )
    ap.add_argument("--json", default="", metavar="FILE", help="Output debug JSON (.json)")
    ap.add_argument("--fast", action="store_true", help="Match tiles through a content index instead of scanning")
    return ap


def check_arguments(args: argparse.Namespace) -> None:
    if not os.path.isfile(args.tileset):
        raise ArgumentError(args.tileset, "Tileset file not found")
    if not os.path.isfile(args.image):
        raise ArgumentError(args.image, "Image file not found")
    inputs = (os.path.abspath(args.tileset), os.path.abspath(args.image))
    for flag, out in (("--tilemap", args.tilemap), ("--json", args.json)):
        if out and os.path.abspath(out) in inputs:
            raise ArgumentError(out, f"{flag} must not be one of the input files")
    if args.json and os.path.abspath(args.json) == os.path.abspath(args.tilemap):
        raise ArgumentError(args.json, "--json and --tilemap must be different files")
    for out in (args.tilemap, args.json):
        if out and os.path.lexists(out):
            raise AlreadyExistsError(out)


def image_info(img: TiledImage) -> dict:
    return {
        "path": img.path,
        "w_px": img.w_px,
        "h_px": img.h_px,
        "w_tiles": img.w_tiles,
        "h_tiles": img.h_tiles,
        "num_tiles": img.num_tiles,
    }


def build_debug(tileset: TiledImage, image: TiledImage, tilemap: Tilemap, tilemap_path: str) -> dict:
    entries = list(tilemap.data)
    usage = Counter(entries)
    rows: List[List[int]] = [
        entries[r * image.w_tiles:(r + 1) * image.w_tiles] for r in range(image.h_tiles)
    ]
    return {
        "tileset": image_info(tileset),
        "image": image_info(image),
        "tilemap": {
            "path": tilemap_path,
            "size": len(tilemap),
            "rows": rows,
        },
        "usage": {str(j): usage[j] for j in sorted(usage)},
        "unused": [j for j in range(tileset.num_tiles) if j not in usage],
    }


def write_debug_json(path: str, debug: dict) -> None:
    text = json.dumps(debug, indent=2) + "\n"
    try:
        with open(path, "x", encoding="utf-8") as f:
            f.write(text)
    except FileExistsError:
        raise AlreadyExistsError(path) from None
    except OSError as e:
        raise WriteError(path, 0, len(text), e.strerror or str(e)) from e


def report(e: TilemapError) -> None:
    path = os.path.abspath(e.path) if e.path else "tilemapc"
    print(f"{path}: error: {e.message}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    try:
        check_arguments(args)

        tileset = load_tiled_image(args.tileset)
        if tileset.num_tiles > MAX_TILESET_SIZE:
            raise TilesetTooLargeError(args.tileset, tileset.num_tiles, MAX_TILESET_SIZE)
        print(f"Tileset loaded ({tileset.describe()})")

        image = load_tiled_image(args.image)
        print(f"Tiled image loaded ({image.describe()})")

        tilemap = generate_tilemap(image, tileset, fast=args.fast)
        print(f"{image.num_tiles} tiles of image successfully mapped to tileset")

        written = save_tilemap(tilemap, args.tilemap)
        if args.json:
            try:
                write_debug_json(args.json, build_debug(tileset, image, tilemap, args.tilemap))
            except TilemapError:
                remove_partial(args.tilemap)
                raise
        print(f"Wrote {args.tilemap} ({written} bytes)")
        if args.json:
            print(f"Wrote {args.json}")
    except ArgumentError as e:
        report(e)
        ap.print_usage(sys.stderr)
        return 1
    except TilemapError as e:
        report(e)
        return 1

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
