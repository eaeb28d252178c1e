"""
Tool Manager - Tracks and manages the active editing tool.
"""
from enum import Enum, auto
from typing import Callable, Dict

from PyQt6 import QtCore

from .logging import log


class ToolType(Enum):
    """Available tool types"""
    NONE = auto()
    BRUSH = auto()
    ERASER = auto()
    FILL = auto()
    # Zone tools
    STAMP = auto()
    PATH = auto()
    WATER = auto()


# Tools whose strokes are auto-tiled from a terrain zone
STROKE_TOOLS = (ToolType.PATH, ToolType.WATER)


class ToolManager(QtCore.QObject):
    """
    Manager for tracking the active editing tool.

    Signals:
        tool_changed: Emitted when the active tool changes (new_tool, old_tool)
    """

    tool_changed = QtCore.pyqtSignal(object, object)  # new_tool, old_tool

    def __init__(self, initial: ToolType = ToolType.BRUSH):
        super().__init__()

        self._active_tool: ToolType = initial

        # Callbacks for tool deactivation, e.g. cancelling an open stroke
        self._on_deactivate_callbacks: Dict[ToolType, Callable] = {}

    @property
    def active_tool(self) -> ToolType:
        """Get the currently active tool"""
        return self._active_tool

    def is_active(self, tool_type: ToolType) -> bool:
        """Check if a specific tool is active"""
        return self._active_tool == tool_type

    def is_stroke_tool_active(self) -> bool:
        """Check if an auto-tiled terrain tool is active"""
        return self._active_tool in STROKE_TOOLS

    def activate_tool(self, tool_type: ToolType) -> bool:
        """
        Activate a tool, deactivating the previous one.

        Returns:
            True if the active tool changed
        """
        if tool_type == self._active_tool:
            return False

        old_tool = self._active_tool
        callback = self._on_deactivate_callbacks.get(old_tool)
        if callback:
            callback()

        self._active_tool = tool_type
        self.tool_changed.emit(tool_type, old_tool)

        log(f"Tool changed: {old_tool.name} -> {tool_type.name}", "[ToolManager]")
        return True

    def register_deactivate_callback(self, tool_type: ToolType, callback: Callable):
        """Register a callback for when a tool is deactivated"""
        self._on_deactivate_callbacks[tool_type] = callback

    def get_tool_display_name(self) -> str:
        """Get a human-readable name for the current tool"""
        names = {
            ToolType.NONE: "No Tool",
            ToolType.BRUSH: "Brush",
            ToolType.ERASER: "Eraser",
            ToolType.FILL: "Fill",
            ToolType.STAMP: "Stamp",
            ToolType.PATH: "Path",
            ToolType.WATER: "Water",
        }
        return names.get(self._active_tool, "Unknown")
