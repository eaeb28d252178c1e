"""
Map Editor - the tool API that external UIs drive.

This module ties the editing engine together:
- Tool commands (brush, eraser, fill, stamp, path and water strokes) mutate the
  active layer of the live document
- Stroke boundaries (mouse up) record one history snapshot per gesture
- Layer commands record a snapshot when they change the document
- Undo/redo replace the live document with a fresh copy from the history log

The caller builds and passes in every collaborator; nothing here is global.
"""
import json
from typing import List, Optional, Tuple

from PyQt6 import QtCore

from .document import Document
from .engine import StrokeEngine
from .fill_engine import FillEngine, Viewport
from .history import HistoryManager
from .painter import PaintOperation, TilePainter
from .settings import EditorSettings
from .storage import KeyValueStore, StorageError
from .tileset import TileSetGeometry
from .tool_manager import ToolManager, ToolType
from .zones import PATH, WATER, Zone, ZoneRegistry
from .logging import log_editor


GAME_MAP_KEY = 'gameMap'


class MapEditor(QtCore.QObject):
    """
    Editing façade over a Document, its history and the zone registry.

    Signals:
        document_changed: Emitted after any change to the live document
        outline_updated: Emitted while a path/water stroke is dragged (list of (x, y))
    """

    document_changed = QtCore.pyqtSignal()
    outline_updated = QtCore.pyqtSignal(list)

    def __init__(self, document: Document, history: HistoryManager, zones: ZoneRegistry,
                 geometry: TileSetGeometry, settings: Optional[EditorSettings] = None,
                 store: Optional[KeyValueStore] = None,
                 tools: Optional[ToolManager] = None,
                 fill_engine: Optional[FillEngine] = None,
                 stroke_engine: Optional[StrokeEngine] = None):
        super().__init__()

        self._document = document
        self.history = history
        self.zones = zones
        self.geometry = geometry
        self.settings = settings or EditorSettings()
        self.store = store
        self.tools = tools or ToolManager()
        self.fill_engine = fill_engine or FillEngine()
        self.stroke_engine = stroke_engine or StrokeEngine()

        self.selected_tile: Optional[int] = None
        self.viewport = Viewport(0, 0, 800, 800, self.settings.tile_size)

        # Stroke state for the non auto-tiled tools
        self._stroke_tool: Optional[ToolType] = None
        self._stroke_last: Optional[Tuple[int, int]] = None
        self._stroke_dirty = False

        self.stroke_engine.on_outline_updated = self.outline_updated.emit
        for tool in ToolType:
            self.tools.register_deactivate_callback(tool, self.cancel_stroke)

    @classmethod
    def from_settings(cls, store: KeyValueStore, settings: Optional[EditorSettings] = None,
                      document: Optional[Document] = None,
                      zones: Optional[ZoneRegistry] = None) -> 'MapEditor':
        """
        Build an editor whose history and tile-set geometry follow the settings.

        Args:
            store: Store for history, zones, settings and the exported map
            settings: Editor settings, read from the store if omitted
            document: Starting document, a blank map if omitted
            zones: Zone registry, one persisted in the store if omitted
        """
        if settings is None:
            settings = EditorSettings.load(store)
        geometry = TileSetGeometry(settings.tileset_columns, settings.tileset_rows,
                                   settings.tile_size)
        history = HistoryManager(store, max_entries=settings.max_history_entries)
        if document is None:
            document = Document()
        if zones is None:
            zones = ZoneRegistry(store)
        return cls(document, history, zones, geometry, settings, store)

    @property
    def document(self) -> Document:
        return self._document

    # =========================================================================
    # SETUP
    # =========================================================================

    def load(self) -> Document:
        """
        Restore the live document from the history log.

        With no usable history the current document is kept and recorded as
        the first snapshot, so undo can always return to it.
        """
        restored = self.history.load()
        if restored is not None:
            self._document = restored
            log_editor(f"Restored document with {len(restored.layers)} layers from history")
            self.document_changed.emit()
        else:
            self.history.snapshot(self._document, 'New map')
        return self._document

    def select_tile(self, tile_index: Optional[int]):
        self.selected_tile = tile_index

    def set_tool(self, tool: ToolType):
        self.tools.activate_tool(tool)

    def set_tool_size(self, size: int):
        self.settings.tool_size = max(1, size)

    def set_viewport(self, viewport: Viewport):
        self.viewport = viewport

    # =========================================================================
    # TOOL STROKES
    # =========================================================================

    def begin_stroke(self, x: int, y: int) -> bool:
        """
        Mouse down on the map with the active tool.

        Returns:
            True if the tool started a stroke
        """
        if self.is_stroking():
            self.cancel_stroke()

        tool = self.tools.active_tool

        if self.tools.is_stroke_tool_active():
            zone = self._terrain_zone(tool)
            if zone is None:
                log_editor(f"No zone available for {self.tools.get_tool_display_name()} stroke")
                return False
            return self.stroke_engine.begin((x, y), zone)

        if tool in (ToolType.BRUSH, ToolType.FILL) and self.selected_tile is None:
            return False
        if tool == ToolType.NONE:
            return False

        self._stroke_tool = tool
        self._stroke_last = (x, y)
        self._stroke_dirty = False
        self._apply_at(x, y)
        return True

    def continue_stroke(self, x: int, y: int) -> bool:
        """
        Mouse move while the button is held.

        Returns:
            True if the move was processed
        """
        if self.stroke_engine.is_painting():
            return self.stroke_engine.update((x, y))

        if self._stroke_tool not in (ToolType.BRUSH, ToolType.ERASER):
            return False
        if (x, y) == self._stroke_last:
            return False

        last_x, last_y = self._stroke_last
        for px, py in TilePainter.bresenham_line(last_x, last_y, x, y)[1:]:
            self._apply_at(px, py)
        self._stroke_last = (x, y)
        return True

    def end_stroke(self) -> bool:
        """
        Mouse up: finish the stroke and record it in the history.

        Returns:
            True if the stroke changed the document
        """
        if self.stroke_engine.is_painting():
            operations = self.stroke_engine.finish(self._document.active_layer, self.geometry)
            changed = self._apply_operations(operations)
            label = self.tools.get_tool_display_name()
        elif self._stroke_tool is not None:
            changed = self._stroke_dirty
            label = self._stroke_label(self._stroke_tool)
            self._reset_stroke()
        else:
            return False

        if changed:
            self._commit(label)
        return changed

    def cancel_stroke(self):
        """
        Abandon the stroke in progress. Tiles a brush or eraser stroke already
        changed stay changed until the next snapshot or undo.
        """
        if self.stroke_engine.is_painting():
            self.stroke_engine.cancel()
        self._reset_stroke()

    def is_stroking(self) -> bool:
        return self.stroke_engine.is_painting() or self._stroke_tool is not None

    def click(self, x: int, y: int) -> bool:
        """Single click: a stroke without any drag"""
        if not self.begin_stroke(x, y):
            return False
        return self.end_stroke()

    def get_outline(self) -> List[Tuple[int, int]]:
        """Cells of the path/water stroke being dragged"""
        return self.stroke_engine.get_outline()

    def _reset_stroke(self):
        self._stroke_tool = None
        self._stroke_last = None
        self._stroke_dirty = False

    def _stroke_label(self, tool: ToolType) -> str:
        return {
            ToolType.BRUSH: 'Brush',
            ToolType.ERASER: 'Erase',
            ToolType.FILL: 'Fill',
            ToolType.STAMP: 'Stamp',
        }.get(tool, 'Edit')

    def _apply_at(self, x: int, y: int):
        tool = self._stroke_tool
        if tool == ToolType.BRUSH:
            operations = TilePainter.brush_square(x, y, self.selected_tile,
                                                  self.settings.tool_size)
            if self._apply_operations(operations):
                self._stroke_dirty = True
        elif tool == ToolType.ERASER:
            if (x, y) in self._document.active_layer.tiles:
                self._document.remove_tile(x, y)
                self._stroke_dirty = True
                self.document_changed.emit()
        elif tool == ToolType.FILL:
            result = self.fill_engine.flood_fill(x, y, self.selected_tile,
                                                 self._document.active_layer, self.viewport)
            if result.count:
                self._stroke_dirty = True
                self.document_changed.emit()
        elif tool == ToolType.STAMP:
            zone = self.zones.selected
            if zone is None:
                log_editor("No zone selected for stamping")
                return
            if self._apply_operations(TilePainter.stamp_zone(x, y, zone, self.geometry)):
                self._stroke_dirty = True

    def _apply_operations(self, operations: List[PaintOperation]) -> bool:
        """Write operations to the active layer; True if any cell changed"""
        changed = False
        for op in operations:
            if self._document.get_tile(op.x, op.y) != op.tile_id:
                self._document.set_tile(op.x, op.y, op.tile_id)
                changed = True
        if changed:
            self.document_changed.emit()
        return changed

    def _terrain_zone(self, tool: ToolType) -> Optional[Zone]:
        """Selected zone if it matches the tool's terrain, else the first such zone"""
        category = WATER if tool == ToolType.WATER else PATH
        selected = self.zones.selected
        if selected is not None and selected.category == category:
            return selected
        candidates = self.zones.by_category(category)
        return candidates[0] if candidates else None

    # =========================================================================
    # LAYER COMMANDS
    # =========================================================================

    def add_layer(self, name: Optional[str] = None) -> int:
        index = self._document.add_layer(name)
        self._commit(f"Add layer '{self._document.layers[index].name}'")
        return index

    def delete_layer(self, index: int) -> bool:
        return self._layer_command(self._document.delete_layer(index), f"Delete layer {index}")

    def rename_layer(self, index: int, name: str) -> bool:
        return self._layer_command(self._document.rename_layer(index, name),
                                   f"Rename layer {index}")

    def reorder_layer(self, from_index: int, to_index: int) -> bool:
        return self._layer_command(self._document.reorder_layer(from_index, to_index),
                                   f"Move layer {from_index} to {to_index}")

    def toggle_layer_visibility(self, index: int) -> bool:
        return self._layer_command(self._document.toggle_layer_visibility(index),
                                   f"Toggle layer {index}")

    def set_active_layer(self, index: int) -> bool:
        if self.is_stroking():
            self.cancel_stroke()
        changed = self._document.set_active_layer(index)
        if changed:
            self.document_changed.emit()
        return changed

    def clear_layer(self) -> bool:
        """Empty the active layer"""
        if not self._document.active_layer.tiles:
            return False
        self._document.clear_active_layer()
        self._commit('Clear layer')
        return True

    def _layer_command(self, changed: bool, label: str) -> bool:
        if changed:
            self._commit(label)
        return changed

    # =========================================================================
    # HISTORY
    # =========================================================================

    def _commit(self, label: str):
        self.history.snapshot(self._document, label)
        self.document_changed.emit()

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def navigate_to(self, index: int) -> bool:
        return self._restore(self.history.navigate_to(index))

    def _restore(self, document: Optional[Document]) -> bool:
        if document is None:
            return False
        self.cancel_stroke()
        self._document = document
        self.document_changed.emit()
        return True

    # =========================================================================
    # GAME RUNTIME
    # =========================================================================

    def export_game_map(self) -> Optional[dict]:
        """
        Write the map for the game runtime under the gameMap key.

        Returns:
            The exported payload, or None if it could not be stored
        """
        payload = self._document.export_game_map(self.settings.grid_width,
                                                  self.settings.grid_height)
        if self.store is None:
            return payload
        try:
            self.store.set(GAME_MAP_KEY, json.dumps(payload))
        except StorageError as e:
            log_editor(f"Error exporting game map: {e}")
            return None
        log_editor(f"Exported game map: {len(payload['layers'])} layers, "
                   f"{self.settings.grid_width}x{self.settings.grid_height}")
        return payload

    def is_walkable(self, x: int, y: int) -> bool:
        return self._document.is_walkable(x, y, self.settings.grid_width,
                                          self.settings.grid_height,
                                          self.settings.blocked_tiles)
