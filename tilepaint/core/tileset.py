"""
TileSet geometry - converts between linear tile indices and source-block coordinates
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TileSetGeometry:
    """
    Geometry of a tile-set image laid out as a row-major grid of tiles.

    Only the column count matters for index conversion; the other fields are
    carried for the renderer.
    """
    columns: int
    rows: int = 0
    tile_size: int = 16

    def tile_index(self, col: int, row: int) -> int:
        """Linear tile index of the tile at (col, row) in the tile-set"""
        return row * self.columns + col

    def coords(self, index: int) -> Tuple[int, int]:
        """
        Source-block coordinates of a linear tile index.

        Returns:
            Tuple of (column, row)
        """
        return index % self.columns, index // self.columns
