"""
Core editing logic for TilePaint
"""

from .tileset import TileSetGeometry
from .storage import (
    KeyValueStore, MemoryStore, SettingsStore, StorageError, QuotaExceededError
)
from .settings import EditorSettings
from .document import Document, Layer, EMPTY, BACKGROUND_LAYER_NAME
from .zones import (
    Zone, ZoneBounds, ZoneCategory, CategoryKind, ZoneRegistry, TREE, PATH, WATER
)
from .autotile import AutoTileResolver, Neighbors, resolve_slot, slot_source
from .painter import TilePainter, PaintOperation
from .engine import StrokeEngine, StrokeState, StrokeSession
from .fill_engine import FillEngine, FillMode, FillResult, Viewport
from .history import HistoryManager, HistoryEntry
from .tool_manager import ToolManager, ToolType
from .editor import MapEditor

__all__ = [
    'TileSetGeometry',
    'KeyValueStore',
    'MemoryStore',
    'SettingsStore',
    'StorageError',
    'QuotaExceededError',
    'EditorSettings',
    'Document',
    'Layer',
    'EMPTY',
    'BACKGROUND_LAYER_NAME',
    'Zone',
    'ZoneBounds',
    'ZoneCategory',
    'CategoryKind',
    'ZoneRegistry',
    'TREE',
    'PATH',
    'WATER',
    'AutoTileResolver',
    'Neighbors',
    'resolve_slot',
    'slot_source',
    'TilePainter',
    'PaintOperation',
    'StrokeEngine',
    'StrokeState',
    'StrokeSession',
    'FillEngine',
    'FillMode',
    'FillResult',
    'Viewport',
    'HistoryManager',
    'HistoryEntry',
    'ToolManager',
    'ToolType',
    'MapEditor',
]
