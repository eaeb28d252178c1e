"""
Fill Engine - Handles fill operations for the Fill tool.

Provides:
- Viewport fill: clicking an empty cell fills every empty cell currently on screen
- Flood fill: clicking a tile replaces the 4-connected region of that tile
"""
from typing import Set, Tuple
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto

from PyQt6 import QtCore

from .document import EMPTY, Layer
from .logging import log_fill


class FillMode(Enum):
    """How a fill was carried out"""
    NONE = auto()       # Nothing to do (tile already matches)
    VIEWPORT = auto()   # Empty cells of the visible area
    FLOOD = auto()      # Connected region of one tile


@dataclass(frozen=True)
class Viewport:
    """Camera offset and surface size in pixels"""
    x: int
    y: int
    width: int
    height: int
    tile_size: int = 16

    def visible_cells(self) -> Tuple[int, int, int, int]:
        """
        Grid extent on screen, partially visible edge cells included.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y), all inclusive
        """
        ts = self.tile_size
        return (self.x // ts,
                self.y // ts,
                (self.x + max(1, self.width) - 1) // ts,
                (self.y + max(1, self.height) - 1) // ts)


@dataclass
class FillResult:
    """Result of a fill operation"""
    mode: FillMode
    positions: Set[Tuple[int, int]] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.positions)


class FillEngine(QtCore.QObject):
    """
    Engine for fill operations on one layer.

    Signals:
        fill_applied: Emitted after a fill changes cells (list of (x, y) positions)
    """

    fill_applied = QtCore.pyqtSignal(list)

    def flood_fill(self, x: int, y: int, new_tile: int, layer: Layer,
                   viewport: Viewport) -> FillResult:
        """
        Fill starting at (x, y) on a layer.

        An empty start cell fills the empty cells of the viewport; cells off
        screen stay untouched. A start cell holding a tile replaces every cell
        4-connected to it that holds the same tile, with no viewport bound.

        Args:
            x: X coordinate (grid)
            y: Y coordinate (grid)
            new_tile: Tile index to fill with
            layer: Layer to modify
            viewport: Current camera and surface size

        Returns:
            FillResult with the positions that changed
        """
        target = layer.get(x, y)

        if target == new_tile:
            return FillResult(FillMode.NONE)

        if target is EMPTY:
            positions = self._fill_viewport(new_tile, layer, viewport)
            result = FillResult(FillMode.VIEWPORT, positions)
        else:
            positions = self._flood(x, y, target, new_tile, layer)
            result = FillResult(FillMode.FLOOD, positions)

        log_fill(f"{result.mode.name} fill at ({x}, {y}) with tile {new_tile}: "
                 f"{result.count} cells")
        if positions:
            self.fill_applied.emit(sorted(positions))
        return result

    def _fill_viewport(self, new_tile: int, layer: Layer,
                       viewport: Viewport) -> Set[Tuple[int, int]]:
        min_x, min_y, max_x, max_y = viewport.visible_cells()
        filled = set()
        for cx in range(min_x, max_x + 1):
            for cy in range(min_y, max_y + 1):
                if (cx, cy) not in layer.tiles:
                    layer.tiles[(cx, cy)] = new_tile
                    filled.add((cx, cy))
        return filled

    def _flood(self, start_x: int, start_y: int, target: int, new_tile: int,
               layer: Layer) -> Set[Tuple[int, int]]:
        """
        Breadth-first flood fill over stored tiles equal to target.

        The region is bounded by cells that do not hold the target tile, so
        the walk always ends on a finite painted region.
        """
        filled = set()
        queue = deque([(start_x, start_y)])
        visited = {(start_x, start_y)}

        while queue:
            x, y = queue.popleft()
            layer.tiles[(x, y)] = new_tile
            filled.add((x, y))

            # Check 4-connected neighbors
            for dx, dy in [(0, -1), (0, 1), (-1, 0), (1, 0)]:
                nx, ny = x + dx, y + dy
                if (nx, ny) not in visited:
                    visited.add((nx, ny))
                    if layer.tiles.get((nx, ny)) == target:
                        queue.append((nx, ny))

        return filled

