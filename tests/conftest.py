from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pytest
from PIL import Image

from tiled_image import TILE_HEIGHT_PX, TILE_WIDTH_PX, TiledImage

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def solid_tile(rgba) -> np.ndarray:
    return np.full((TILE_HEIGHT_PX, TILE_WIDTH_PX, 4), rgba, dtype=np.uint8)


def as_tile(tile) -> np.ndarray:
    if isinstance(tile, np.ndarray):
        return tile.astype(np.uint8)
    return solid_tile(tile)


def tile_grid(tiles: Sequence, w_tiles: Optional[int] = None) -> np.ndarray:
    """Lay tiles out row-major into an (h, w, 4) RGBA array."""
    tiles = [as_tile(t) for t in tiles]
    w_tiles = w_tiles or len(tiles)
    h_tiles = (len(tiles) + w_tiles - 1) // w_tiles
    out = np.zeros((h_tiles * TILE_HEIGHT_PX, w_tiles * TILE_WIDTH_PX, 4), dtype=np.uint8)
    for i, tile in enumerate(tiles):
        ty, tx = divmod(i, w_tiles)
        out[ty * TILE_HEIGHT_PX:(ty + 1) * TILE_HEIGHT_PX, tx * TILE_WIDTH_PX:(tx + 1) * TILE_WIDTH_PX] = tile
    return out


@pytest.fixture
def write_png(tmp_path):
    def _write(name: str, pixels: np.ndarray) -> str:
        path = tmp_path / name
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(path, format="PNG")
        return str(path)

    return _write


@pytest.fixture
def tiles_png(write_png):
    def _write(name: str, tiles: Sequence, w_tiles: Optional[int] = None) -> str:
        return write_png(name, tile_grid(tiles, w_tiles))

    return _write


@pytest.fixture
def make_image():
    def _make(tiles: Sequence, w_tiles: Optional[int] = None, path: str = "mem.png") -> TiledImage:
        pixels = tile_grid(tiles, w_tiles)
        h_px, w_px = pixels.shape[:2]
        return TiledImage(path=path, w_px=w_px, h_px=h_px, data=pixels)

    return _make
