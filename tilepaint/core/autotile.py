"""
Auto-Tile Resolver - picks the transition tile for path and water terrain.

A terrain family is a 5-column x 3-row block of 15 pre-authored tiles inside a
zone of the tile-set:

     0  1  2  3  4      outer corner / top edge / outer corner / inner corners
     5  6  7  8  9      right edge / interior / left edge / inner corners
    10 11 12 13 14      outer corner / bottom edge / outer corner / alternates

A cell that is painted always takes the interior slot. An unpainted cell next
to painted cells takes the edge or corner slot that blends into them, decided
by its four orthogonal neighbors first and its diagonal neighbors only when no
orthogonal neighbor is painted.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Set, Tuple

from .document import EMPTY, Layer
from .tileset import TileSetGeometry
from .zones import Zone


SLOT_COLUMNS = 5
SLOT_ROWS = 3
SLOT_COUNT = SLOT_COLUMNS * SLOT_ROWS

SLOT_INTERIOR = 6


@dataclass(frozen=True)
class Neighbors:
    """Painted state of the 8 cells around a position"""
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False
    top_left: bool = False
    top_right: bool = False
    bottom_left: bool = False
    bottom_right: bool = False

    @classmethod
    def around(cls, x: int, y: int, is_painted: Callable[[int, int], bool]) -> 'Neighbors':
        return cls(
            top=is_painted(x, y - 1),
            bottom=is_painted(x, y + 1),
            left=is_painted(x - 1, y),
            right=is_painted(x + 1, y),
            top_left=is_painted(x - 1, y - 1),
            top_right=is_painted(x + 1, y - 1),
            bottom_left=is_painted(x - 1, y + 1),
            bottom_right=is_painted(x + 1, y + 1),
        )


def resolve_slot(self_painted: bool, n: Neighbors) -> Optional[int]:
    """
    Transition slot for a cell, or None if the cell gets no tile.

    Pure function of the cell's own painted flag and its neighbors. Rules are
    checked in order and the first match wins.
    """
    if self_painted:
        return SLOT_INTERIOR

    top, bottom, left, right = n.top, n.bottom, n.left, n.right

    # Inner corners
    if left and bottom and not top and not right:
        return 4
    if right and bottom and not top and not left:
        return 3
    if left and top and not bottom and not right:
        return 9
    if right and top and not bottom and not left:
        return 8

    # Terrain below: top edge of the terrain
    if bottom and not top:
        if left and not right:
            return 2
        if right and not left:
            return 0
        return 1

    # Terrain above: bottom edge of the terrain
    if top and not bottom:
        if left and not right:
            return 12
        if right and not left:
            return 10
        return 11

    if right and not left:
        return 5
    if left and not right:
        return 7

    # Outer corners, only reached through a diagonal
    if not (top or bottom or left or right):
        if n.bottom_right:
            return 0
        if n.bottom_left:
            return 2
        if n.top_right:
            return 10
        if n.top_left:
            return 12

    return None


def slot_source(slot: int, zone: Zone) -> Tuple[int, int]:
    """
    Tile-set (column, row) of a slot inside a zone's source block.
    """
    return (zone.bounds.start_x + slot % SLOT_COLUMNS,
            zone.bounds.start_y + slot // SLOT_COLUMNS)


def supports_autotile(zone: Zone) -> bool:
    """A zone can drive auto-tiling only if it holds the full 5x3 block"""
    return zone.bounds.width >= SLOT_COLUMNS and zone.bounds.height >= SLOT_ROWS


class AutoTileResolver:
    """
    Resolves slots against a layer plus the cells marked by the stroke in
    progress.

    Any existing tile on the layer counts as painted terrain, whatever family
    it belongs to.
    """

    def __init__(self):
        self._marked: Set[Tuple[int, int]] = set()

    @property
    def marked(self) -> Set[Tuple[int, int]]:
        return set(self._marked)

    def mark(self, x: int, y: int):
        """Mark a cell as painted by the current stroke"""
        self._marked.add((x, y))

    def is_marked(self, x: int, y: int) -> bool:
        return (x, y) in self._marked

    def clear_marks(self):
        self._marked.clear()

    def is_painted(self, x: int, y: int, layer: Layer) -> bool:
        if (x, y) in self._marked:
            return True
        return layer.get(x, y) is not EMPTY

    def resolve(self, x: int, y: int, layer: Layer) -> Optional[int]:
        """Slot for (x, y) on a layer, or None"""
        def painted(px, py):
            return self.is_painted(px, py, layer)

        return resolve_slot(painted(x, y), Neighbors.around(x, y, painted))

    def resolve_tile(self, x: int, y: int, layer: Layer, zone: Zone,
                     geometry: TileSetGeometry) -> Optional[int]:
        """Tile index for (x, y) from a zone's source block, or None"""
        slot = self.resolve(x, y, layer)
        if slot is None:
            return None
        col, row = slot_source(slot, zone)
        return geometry.tile_index(col, row)
