"""
Stroke Engine - path and water strokes with auto-tiled borders

A stroke follows the three-call drag protocol:
- begin() on mouse down marks the first cell
- update() on every mouse move marks the cells between the last and the new
  position (Bresenham interpolation, so fast drags leave no gaps)
- finish() on mouse up resolves the marked cells and their empty neighbors
  into tile placements; cancel() drops the stroke

Marked cells always take the interior tile. Every empty cell around them takes
the transition tile chosen by the AutoTileResolver. All slots are resolved
against the layer as it was before the stroke, so placing one transition tile
never changes the slot chosen for the next.

A click without any drag goes through the same resolution: the clicked cell
becomes interior and its neighbors get edges and corners.
"""
from typing import Callable, Dict, List, Optional, Set, Tuple
from enum import Enum
from dataclasses import dataclass, field

from .autotile import AutoTileResolver, supports_autotile
from .document import EMPTY, Layer
from .painter import TilePainter, PaintOperation
from .tileset import TileSetGeometry
from .zones import Zone
from .logging import log_stroke


class StrokeState(Enum):
    """Stroke state enumeration"""
    IDLE = "idle"            # Not painting
    PAINTING = "painting"    # Mouse held, cells being marked


@dataclass
class StrokeSession:
    """Tracks the current stroke"""
    zone: Optional[Zone] = None
    start_pos: Optional[Tuple[int, int]] = None
    last_pos: Optional[Tuple[int, int]] = None
    stroke_path: List[Tuple[int, int]] = field(default_factory=list)

    def reset(self):
        """Reset the session state"""
        self.zone = None
        self.start_pos = None
        self.last_pos = None
        self.stroke_path = []


class StrokeEngine:
    """
    Turns a drag gesture into auto-tiled terrain placements.
    """

    def __init__(self, resolver: Optional[AutoTileResolver] = None):
        """Initialize the stroke engine"""
        self.state = StrokeState.IDLE
        self.session = StrokeSession()
        self.resolver = resolver or AutoTileResolver()

        # Callbacks for the editor
        self.on_outline_updated: Optional[Callable[[List[Tuple[int, int]]], None]] = None

    def is_painting(self) -> bool:
        return self.state == StrokeState.PAINTING

    def get_outline(self) -> List[Tuple[int, int]]:
        """Cells marked so far, in stroke order"""
        return list(self.session.stroke_path)

    def begin(self, pos: Tuple[int, int], zone: Zone) -> bool:
        """
        Start a stroke at a grid position.

        Args:
            pos: Starting cell (x, y)
            zone: Path or water zone holding the 5x3 source block

        Returns:
            True if the stroke started
        """
        if not supports_autotile(zone):
            log_stroke(f"Zone '{zone.name}' is {zone.bounds.width}x{zone.bounds.height}, "
                       f"too small for auto-tiling")
            return False

        if self.is_painting():
            self.cancel()

        self.state = StrokeState.PAINTING
        self.session.reset()
        self.session.zone = zone
        self.session.start_pos = pos
        self.resolver.clear_marks()
        self._mark(pos)
        self.session.last_pos = pos

        self._notify_outline()
        return True

    def update(self, pos: Tuple[int, int]) -> bool:
        """
        Extend the stroke to a new position.

        Returns:
            True if the update was processed
        """
        if not self.is_painting():
            return False
        if pos == self.session.last_pos:
            return False

        last_x, last_y = self.session.last_pos
        for point in TilePainter.bresenham_line(last_x, last_y, pos[0], pos[1]):
            self._mark(point)
        self.session.last_pos = pos

        self._notify_outline()
        return True

    def finish(self, layer: Layer, geometry: TileSetGeometry) -> List[PaintOperation]:
        """
        Resolve the stroke into tile placements for a layer.

        Returns:
            Paint operations to apply, empty if no stroke was in progress
        """
        if not self.is_painting():
            return []

        zone = self.session.zone
        operations = self._resolve(layer, zone, geometry)
        log_stroke(f"Stroke finished: {len(self.session.stroke_path)} cells marked, "
                   f"{len(operations)} tiles resolved with zone '{zone.name}'")

        self._end()
        return operations

    def cancel(self):
        """Cancel the current stroke"""
        self._end()

    def _end(self):
        self.state = StrokeState.IDLE
        self.session.reset()
        self.resolver.clear_marks()
        self._notify_outline()

    def _mark(self, pos: Tuple[int, int]):
        if not self.resolver.is_marked(*pos):
            self.resolver.mark(*pos)
            self.session.stroke_path.append(pos)

    def _affected_cells(self, layer: Layer) -> Set[Tuple[int, int]]:
        """Marked cells plus every empty cell touching one"""
        cells = set(self.session.stroke_path)
        for x, y in self.session.stroke_path:
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    neighbor = (x + dx, y + dy)
                    if neighbor not in cells and layer.get(*neighbor) is EMPTY:
                        cells.add(neighbor)
        return cells

    def _resolve(self, layer: Layer, zone: Zone,
                 geometry: TileSetGeometry) -> List[PaintOperation]:
        resolved: Dict[Tuple[int, int], int] = {}
        for x, y in self._affected_cells(layer):
            tile = self.resolver.resolve_tile(x, y, layer, zone, geometry)
            if tile is not None:
                resolved[(x, y)] = tile

        return [PaintOperation(x, y, tile)
                for (x, y), tile in sorted(resolved.items(), key=lambda item: (item[0][1], item[0][0]))]

    def _notify_outline(self):
        if self.on_outline_updated:
            self.on_outline_updated(self.get_outline())
