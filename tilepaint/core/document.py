"""
Layer/Document model - the authoritative map state edited by the tools.

A Document is an ordered stack of sparse layers (index 0 at the bottom). Layer 0
is the Background layer: it always exists and cannot be deleted, moved,
renamed or hidden. Commands addressing a missing layer are silently ignored.
"""
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .logging import log


BACKGROUND_LAYER_NAME = 'Background'

# Serialized tile keys look like "x12,y-3"
_TILE_KEY_RE = re.compile(r'^x(-?\d+),y(-?\d+)$')


class _Empty:
    """Sentinel type for a cell with no tile"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'EMPTY'


EMPTY = _Empty()


def tile_key(x: int, y: int) -> str:
    """Serialized key of a grid cell"""
    return f"x{x},y{y}"


def parse_tile_key(key: str) -> Tuple[int, int]:
    """
    Parse a serialized cell key.

    Raises:
        ValueError: If the key is malformed
    """
    match = _TILE_KEY_RE.match(key)
    if not match:
        raise ValueError(f"Malformed tile key: {key!r}")
    return int(match.group(1)), int(match.group(2))


class Layer:
    """A named sparse mapping from grid cell to tile index"""

    def __init__(self, name: str, tiles: Optional[Dict[Tuple[int, int], int]] = None,
                 visible: bool = True):
        self.name = name
        self.tiles: Dict[Tuple[int, int], int] = dict(tiles) if tiles else {}
        self.visible = visible

    def get(self, x: int, y: int):
        return self.tiles.get((x, y), EMPTY)

    def copy(self) -> 'Layer':
        return Layer(self.name, self.tiles, self.visible)

    def to_json(self) -> Dict:
        return {
            'name': self.name,
            'tiles': {tile_key(x, y): tile for (x, y), tile in self.tiles.items()},
            'visible': self.visible,
        }

    @classmethod
    def from_json(cls, data: Dict) -> 'Layer':
        """
        Deserialize a layer.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """
        name = data['name']
        if not isinstance(name, str):
            raise TypeError(f"Layer name must be a string, got {type(name).__name__}")

        tiles = {}
        for key, tile in data.get('tiles', {}).items():
            if not isinstance(tile, int) or isinstance(tile, bool) or tile < 0:
                raise ValueError(f"Invalid tile index {tile!r} at {key}")
            tiles[parse_tile_key(key)] = tile

        return cls(name, tiles, bool(data.get('visible', True)))

    def __eq__(self, other):
        if not isinstance(other, Layer):
            return False
        return (self.name == other.name and self.tiles == other.tiles
                and self.visible == other.visible)

    def __repr__(self):
        return f"Layer(name='{self.name}', tiles={len(self.tiles)}, visible={self.visible})"


class Document:
    """
    Ordered list of named sparse layers plus the active layer index.
    """

    def __init__(self, layers: Optional[List[Layer]] = None, active_layer_index: int = 0):
        if not layers:
            layers = [Layer(BACKGROUND_LAYER_NAME)]
        self.layers: List[Layer] = layers
        self.layers[0].name = BACKGROUND_LAYER_NAME
        self.layers[0].visible = True
        self.active_layer_index = active_layer_index if 0 <= active_layer_index < len(layers) else 0

    # =========================================================================
    # LAYER MANAGEMENT
    # =========================================================================

    @property
    def active_layer(self) -> Layer:
        return self.layers[self.active_layer_index]

    def _valid_index(self, index) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.layers)

    def add_layer(self, name: Optional[str] = None) -> int:
        """
        Append an empty layer and make it active.

        Returns:
            Index of the new layer
        """
        if name is None or not name.strip():
            name = f"Layer {len(self.layers)}"
        self.layers.append(Layer(name.strip()))
        self.active_layer_index = len(self.layers) - 1
        return self.active_layer_index

    def set_active_layer(self, index: int) -> bool:
        if not self._valid_index(index):
            return False
        self.active_layer_index = index
        return True

    def rename_layer(self, index: int, name: str) -> bool:
        if index == 0 or not self._valid_index(index):
            return False
        if not name or not name.strip():
            return False
        self.layers[index].name = name.strip()
        return True

    def reorder_layer(self, from_index: int, to_index: int) -> bool:
        """
        Move a layer within the stack. The Background layer never moves and
        nothing can be dropped below it.
        """
        if from_index == 0 or to_index == 0:
            return False
        if not self._valid_index(from_index) or not self._valid_index(to_index):
            return False
        if from_index == to_index:
            return False

        active = self.active_layer
        layer = self.layers.pop(from_index)
        self.layers.insert(to_index, layer)
        # Keep the same layer active after the move
        self.active_layer_index = next(i for i, l in enumerate(self.layers) if l is active)
        return True

    def delete_layer(self, index: int) -> bool:
        if index == 0 or not self._valid_index(index):
            return False
        del self.layers[index]
        if self.active_layer_index >= index:
            self.active_layer_index = max(0, self.active_layer_index - 1)
        return True

    def toggle_layer_visibility(self, index: int) -> bool:
        if index == 0 or not self._valid_index(index):
            return False
        layer = self.layers[index]
        layer.visible = not layer.visible
        return True

    # =========================================================================
    # TILE ACCESS
    # =========================================================================

    def get_tile(self, x: int, y: int):
        """Tile on the active layer at (x, y), or EMPTY"""
        return self.active_layer.get(x, y)

    def set_tile(self, x: int, y: int, tile_index: int):
        self.active_layer.tiles[(x, y)] = tile_index

    def remove_tile(self, x: int, y: int):
        self.active_layer.tiles.pop((x, y), None)

    def clear_active_layer(self):
        self.active_layer.tiles = {}

    def is_walkable(self, x: int, y: int, grid_width: int, grid_height: int,
                    blocked_tiles: Iterable[int] = ()) -> bool:
        """
        Whether a character may stand on (x, y).

        Cells outside the configured grid are never walkable; inside it a cell
        is blocked when any layer holds one of the blocked tile indices there.
        """
        if x < 0 or x >= grid_width or y < 0 or y >= grid_height:
            return False
        blocked = set(blocked_tiles)
        if not blocked:
            return True
        for layer in self.layers:
            tile = layer.tiles.get((x, y))
            if tile is not None and tile in blocked:
                return False
        return True

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def copy(self) -> 'Document':
        """Deep copy; the copy shares no mutable state with this document"""
        return Document([layer.copy() for layer in self.layers], self.active_layer_index)

    def to_json(self) -> Dict:
        return {
            'layers': [layer.to_json() for layer in self.layers],
            'activeLayerIndex': self.active_layer_index,
        }

    @classmethod
    def from_json(cls, data) -> 'Document':
        """
        Deserialize a document, falling back to a fresh document if the data
        is malformed.
        """
        try:
            layers = [Layer.from_json(entry) for entry in data['layers']]
            active = data.get('activeLayerIndex', 0)
            if not isinstance(active, int):
                active = 0
            return cls(layers, active)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log(f"Corrupt document data, using default document: {e}")
            return cls()

    def export_game_map(self, grid_width: int, grid_height: int) -> Dict:
        """Game runtime payload: tile positions and indices of every layer"""
        return {
            'layers': [layer.to_json() for layer in self.layers],
            'gridWidth': grid_width,
            'gridHeight': grid_height,
            'timestamp': datetime.now().isoformat(),
        }

    def __eq__(self, other):
        if not isinstance(other, Document):
            return False
        return (self.layers == other.layers
                and self.active_layer_index == other.active_layer_index)

    def __repr__(self):
        return f"Document(layers={self.layers}, active={self.active_layer_index})"
