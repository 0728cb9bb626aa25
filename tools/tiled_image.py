#!/usr/bin/env python3
"""
tiled_image.py - Decode a PNG into an RGBA buffer and address it as a grid of tiles.

A TiledImage owns one flat, read-only buffer of w_px * h_px * 4 bytes
(R,G,B,A per pixel, row-major, top row first). Tiles are addressed by a
row-major tile index; pixel_row() turns (tile_index, row) into a slice of
that buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from tilemap_errors import DecodeError, GeometryError

# Each pixel has 4 components (RGBA), 1 byte each.
COMPONENTS = 4
COMPONENT_SIZE_B = 1
PIXEL_SIZE_B = COMPONENTS * COMPONENT_SIZE_B

TILE_WIDTH_PX = 8
TILE_HEIGHT_PX = 8
TILE_ROW_SIZE_B = TILE_WIDTH_PX * PIXEL_SIZE_B
TILE_SIZE_B = TILE_ROW_SIZE_B * TILE_HEIGHT_PX

# Tilemap entries are one byte each.
MAX_TILESET_SIZE = 256


@dataclass
class TiledImage:
    path: str
    w_px: int
    h_px: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if (
            self.w_px <= 0
            or self.h_px <= 0
            or self.w_px % TILE_WIDTH_PX != 0
            or self.h_px % TILE_HEIGHT_PX != 0
        ):
            raise GeometryError(self.path, self.w_px, self.h_px, TILE_WIDTH_PX, TILE_HEIGHT_PX)
        data = np.array(self.data, dtype=np.uint8).reshape(-1)
        expected = self.w_px * self.h_px * PIXEL_SIZE_B
        if data.size != expected:
            raise ValueError(
                f"{self.path}: pixel buffer has {data.size} bytes, expected {expected}"
            )
        data.flags.writeable = False
        self.data = data

    @property
    def w_tiles(self) -> int:
        return self.w_px // TILE_WIDTH_PX

    @property
    def h_tiles(self) -> int:
        return self.h_px // TILE_HEIGHT_PX

    @property
    def num_tiles(self) -> int:
        return self.w_tiles * self.h_tiles

    def describe(self) -> str:
        return f"{self.w_px}x{self.h_px} px, {self.w_tiles}x{self.h_tiles} tiles"

    def tile_position(self, tile_index: int) -> Tuple[int, int]:
        """Return (tile_col, tile_row) of a row-major tile index."""
        tile_row, tile_col = divmod(tile_index, self.w_tiles)
        return tile_col, tile_row

    def pixel_row(self, tile_index: int, row: int) -> np.ndarray:
        """Read-only view of one pixel row (TILE_ROW_SIZE_B bytes) of a tile."""
        if not 0 <= tile_index < self.num_tiles:
            raise IndexError(
                f"tile index {tile_index} out of range 0..{self.num_tiles - 1} ({self.path})"
            )
        if not 0 <= row < TILE_HEIGHT_PX:
            raise IndexError(f"pixel row {row} out of range 0..{TILE_HEIGHT_PX - 1}")
        tile_col, tile_row = self.tile_position(tile_index)
        offset_tile_row = tile_row * self.w_px * PIXEL_SIZE_B * TILE_HEIGHT_PX
        offset_tile_col = tile_col * TILE_WIDTH_PX * PIXEL_SIZE_B
        offset_pixel_row = row * self.w_px * PIXEL_SIZE_B
        offset = offset_tile_row + offset_tile_col + offset_pixel_row
        return self.data[offset:offset + TILE_ROW_SIZE_B]

    def tile_bytes(self, tile_index: int) -> bytes:
        return b"".join(self.pixel_row(tile_index, row).tobytes() for row in range(TILE_HEIGHT_PX))


def load_tiled_image(path: str) -> TiledImage:
    try:
        with Image.open(path, formats=["PNG"]) as img:
            rgba = img.convert("RGBA")
    except FileNotFoundError:
        raise DecodeError(path, "file not found") from None
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(path, str(e) or type(e).__name__) from e

    w_px, h_px = rgba.size
    data = np.frombuffer(rgba.tobytes(), dtype=np.uint8)
    return TiledImage(path=path, w_px=w_px, h_px=h_px, data=data)


def tiles_equal(img_a: TiledImage, tile_a: int, img_b: TiledImage, tile_b: int) -> bool:
    # All four channels take part; tiles differing only in alpha are distinct.
    for row in range(TILE_HEIGHT_PX):
        if not np.array_equal(img_a.pixel_row(tile_a, row), img_b.pixel_row(tile_b, row)):
            return False
    return True
