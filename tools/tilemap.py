#!/usr/bin/env python3
"""
tilemap.py - Resolve every tile of an image to its index in a tileset and persist the result.

The tilemap is one byte per image tile, row-major, each byte the index of the
first tileset tile (ascending index order) whose RGBA pixels are identical.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict

from tiled_image import MAX_TILESET_SIZE, TiledImage, tiles_equal
from tilemap_errors import AlreadyExistsError, UnmatchedTileError, WriteError


@dataclass
class Tilemap:
    data: bytearray
    filled: int = 0

    @classmethod
    def new(cls, num_tiles: int) -> "Tilemap":
        return cls(data=bytearray(num_tiles))

    def __len__(self) -> int:
        return len(self.data)

    @property
    def is_complete(self) -> bool:
        return self.filled == len(self.data)

    def set_tile(self, tilemap_idx: int, tileset_idx: int) -> None:
        if tilemap_idx != self.filled:
            raise ValueError(
                f"Tilemap entries are set in order: expected index {self.filled}, got {tilemap_idx}"
            )
        if not (0 <= tileset_idx < MAX_TILESET_SIZE):
            raise ValueError(f"Tileset index must be 0..{MAX_TILESET_SIZE - 1}: {tileset_idx}")
        self.data[tilemap_idx] = tileset_idx
        self.filled += 1

    def to_bytes(self) -> bytes:
        return bytes(self.data)


def build_tile_index(tileset: TiledImage) -> Dict[bytes, int]:
    """Map tile content to the lowest tileset index holding it."""
    index: Dict[bytes, int] = {}
    for j in range(tileset.num_tiles):
        index.setdefault(tileset.tile_bytes(j), j)
    return index


def _unmatched(image: TiledImage, i: int) -> UnmatchedTileError:
    tile_col, tile_row = image.tile_position(i)
    return UnmatchedTileError(image.path, i, tile_col, tile_row)


def generate_tilemap(image: TiledImage, tileset: TiledImage, fast: bool = False) -> Tilemap:
    """
    Scan the tileset for each image tile and keep the first exact match.

    The caller checks tileset.num_tiles <= MAX_TILESET_SIZE beforehand. The
    first image tile without a match raises UnmatchedTileError; the partial
    tilemap is dropped with it.
    """
    tilemap = Tilemap.new(image.num_tiles)

    if fast:
        index = build_tile_index(tileset)
        for i in range(image.num_tiles):
            j = index.get(image.tile_bytes(i))
            if j is None:
                raise _unmatched(image, i)
            tilemap.set_tile(i, j)
        return tilemap

    for i in range(image.num_tiles):
        for j in range(tileset.num_tiles):
            if tiles_equal(image, i, tileset, j):
                tilemap.set_tile(i, j)
                break
        else:
            raise _unmatched(image, i)
    return tilemap


def save_tilemap(tilemap: Tilemap, path: str) -> int:
    """
    Write the tilemap to a new file; an existing path is never overwritten.

    On a failed or short write the file created here is removed again.
    Returns the number of bytes written.
    """
    if not tilemap.is_complete:
        raise ValueError(f"Tilemap is incomplete ({tilemap.filled}/{len(tilemap)} tiles set)")

    blob = tilemap.to_bytes()
    try:
        f = open(path, "xb")
    except FileExistsError:
        raise AlreadyExistsError(path) from None
    except OSError as e:
        raise WriteError(path, 0, len(blob), e.strerror or str(e)) from e

    written = 0
    try:
        with f:
            written = f.write(blob) or 0
            if written != len(blob):
                raise WriteError(path, written, len(blob))
    except OSError as e:
        remove_partial(path)
        raise WriteError(path, written, len(blob), e.strerror or str(e)) from e
    except WriteError:
        remove_partial(path)
        raise
    return written


def remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
