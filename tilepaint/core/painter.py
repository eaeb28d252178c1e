"""
Core painting geometry - Bresenham interpolation, square brushes and zone stamps
"""
from typing import List, Tuple

from .tileset import TileSetGeometry
from .zones import Zone


class PaintOperation:
    """Represents a single tile placement on the active layer"""

    def __init__(self, x: int, y: int, tile_id: int):
        """
        Initialize a paint operation.

        Args:
            x: Grid X coordinate
            y: Grid Y coordinate
            tile_id: Tile index to place
        """
        self.x = x
        self.y = y
        self.tile_id = tile_id

    def __eq__(self, other):
        if not isinstance(other, PaintOperation):
            return False
        return self.x == other.x and self.y == other.y and self.tile_id == other.tile_id

    def __hash__(self):
        return hash((self.x, self.y, self.tile_id))

    def __repr__(self):
        return f"PaintOp({self.x}, {self.y}, tile={self.tile_id})"


class TilePainter:
    """
    Generates paint operations for the brush and stamp tools.
    """

    @staticmethod
    def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> List[Tuple[int, int]]:
        """
        Bresenham's line algorithm for coordinate interpolation.

        Generates all grid coordinates along a line from (x0, y0) to (x1, y1)
        so fast drags leave no gaps in a stroke.

        Args:
            x0: Starting X coordinate
            y0: Starting Y coordinate
            x1: Ending X coordinate
            y1: Ending Y coordinate

        Returns:
            List of (x, y) tuples, both endpoints included
        """
        points = []

        dx = abs(x1 - x0)
        dy = abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1

        if dx > dy:
            # More horizontal than vertical
            err = dx / 2.0
            y = y0
            for x in range(x0, x1 + sx, sx):
                points.append((x, y))
                err -= dy
                if err < 0:
                    y += sy
                    err += dx
        else:
            # More vertical than horizontal
            err = dy / 2.0
            x = x0
            for y in range(y0, y1 + sy, sy):
                points.append((x, y))
                err -= dx
                if err < 0:
                    x += sx
                    err += dy

        return points

    @staticmethod
    def brush_square(x: int, y: int, tile_id: int, size: int = 1) -> List[PaintOperation]:
        """
        Paint a size x size square of one tile centered on (x, y).

        Even sizes extend one cell further left and up than right and down.
        """
        size = max(1, size)
        half = size // 2
        start_x = x - half
        start_y = y - half

        return [PaintOperation(start_x + i, start_y + j, tile_id)
                for i in range(size)
                for j in range(size)]

    @staticmethod
    def stamp_zone(x: int, y: int, zone: Zone, geometry: TileSetGeometry) -> List[PaintOperation]:
        """
        Copy a zone's whole source block onto the map with (x, y) as the
        top-left cell.
        """
        bounds = zone.bounds
        operations = []
        for src_x, src_y in bounds.tiles():
            operations.append(PaintOperation(
                x + src_x - bounds.start_x,
                y + src_y - bounds.start_y,
                geometry.tile_index(src_x, src_y),
            ))
        return operations
