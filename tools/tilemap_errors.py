#!/usr/bin/env python3
"""
tilemap_errors.py - Shared error types for tiled_image.py, tilemap.py and tilemapc.py.
"""

from __future__ import annotations


class TilemapError(Exception):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
        self.message = message

    def __str__(self) -> str:
        return self.message


class ArgumentError(TilemapError):
    pass


class DecodeError(TilemapError):
    def __init__(self, path: str, reason: str):
        super().__init__(path, f"Failed to load image ({reason})")
        self.reason = reason


class GeometryError(TilemapError):
    def __init__(self, path: str, w_px: int, h_px: int, tile_w: int = 8, tile_h: int = 8):
        super().__init__(
            path,
            f"Image size {w_px}x{h_px}px is not a multiple of the tile size {tile_w}x{tile_h}px",
        )
        self.w_px = w_px
        self.h_px = h_px


class TilesetTooLargeError(TilemapError):
    def __init__(self, path: str, num_tiles: int, max_tiles: int):
        super().__init__(
            path,
            f"Tileset contains too many tiles (has {num_tiles}, maximum {max_tiles} allowed)",
        )
        self.num_tiles = num_tiles
        self.max_tiles = max_tiles


class UnmatchedTileError(TilemapError):
    def __init__(self, path: str, tile_index: int, tile_col: int, tile_row: int):
        super().__init__(
            path,
            f"Tile number {tile_index} (column {tile_col}, row {tile_row}) in image "
            "is not part of the tileset",
        )
        self.tile_index = tile_index
        self.tile_col = tile_col
        self.tile_row = tile_row


class AlreadyExistsError(TilemapError):
    def __init__(self, path: str):
        super().__init__(path, "Output file already exists")


class WriteError(TilemapError):
    def __init__(self, path: str, written: int, expected: int, reason: str = ""):
        message = f"Could not write complete file (bytes written: {written}/{expected})"
        if reason:
            message += f": {reason}"
        super().__init__(path, message)
        self.written = written
        self.expected = expected
        self.reason = reason
