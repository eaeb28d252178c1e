"""
Editor settings - grouped, type-converted configuration values
"""
from dataclasses import dataclass, field
from typing import FrozenSet

from .storage import KeyValueStore, StorageError
from .logging import log


# Define which group each setting belongs to
SETTING_GROUPS = {
    'Grid': ['GridWidth', 'GridHeight', 'TileSize', 'TilesetColumns', 'TilesetRows'],
    'Editor': ['ToolSize', 'BlockedTiles'],
    'History': ['MaxHistoryEntries'],
}


def _get_group_for_setting(name):
    """Determine which group a setting belongs to"""
    for group, settings in SETTING_GROUPS.items():
        if name in settings:
            return group

    # Default to Main
    return 'Main'


def setting(store: KeyValueStore, name, default=None):
    """
    Read a setting from the store, converting it to the type of the default.
    """
    full_key = f"{_get_group_for_setting(name)}/{name}"

    if store.contains(full_key):
        value = store.get(full_key)
    elif store.contains(name):
        # Fallback to old location (no group)
        value = store.get(name)
    else:
        return default

    # Handle None/null values
    if value is None or value == 'None' or value == '@Invalid()':
        return default

    if default is not None:
        target_type = type(default)

        # Stores hand back strings; bools need special handling
        if target_type is bool:
            return value in ('true', 'True', '1')

        try:
            if target_type in (int, float, str):
                return target_type(value)
        except (ValueError, TypeError):
            return default
        return default

    # No default provided - try to intelligently convert the value
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    try:
        if '.' not in value:
            return int(value)
        return float(value)
    except ValueError:
        return value


def set_setting(store: KeyValueStore, name, value):
    """Write a setting into its group"""
    if isinstance(value, bool):
        value = 'true' if value else 'false'
    store.set(f"{_get_group_for_setting(name)}/{name}", str(value))


@dataclass
class EditorSettings:
    """User-configured editor parameters"""
    grid_width: int = 100
    grid_height: int = 100
    tile_size: int = 16
    tileset_columns: int = 94
    tileset_rows: int = 157
    tool_size: int = 1
    max_history_entries: int = 50
    # Tile indices the game runtime treats as obstacles
    blocked_tiles: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def load(cls, store: KeyValueStore) -> 'EditorSettings':
        """Load settings from a store, using defaults for anything missing"""
        defaults = cls()
        blocked_raw = setting(store, 'BlockedTiles', '')
        blocked = set()
        for part in blocked_raw.split(','):
            part = part.strip()
            if part.isdigit():
                blocked.add(int(part))

        return cls(
            grid_width=max(1, setting(store, 'GridWidth', defaults.grid_width)),
            grid_height=max(1, setting(store, 'GridHeight', defaults.grid_height)),
            tile_size=max(1, setting(store, 'TileSize', defaults.tile_size)),
            tileset_columns=max(1, setting(store, 'TilesetColumns', defaults.tileset_columns)),
            tileset_rows=max(0, setting(store, 'TilesetRows', defaults.tileset_rows)),
            tool_size=max(1, setting(store, 'ToolSize', defaults.tool_size)),
            max_history_entries=max(1, setting(store, 'MaxHistoryEntries',
                                               defaults.max_history_entries)),
            blocked_tiles=frozenset(blocked),
        )

    def save(self, store: KeyValueStore) -> bool:
        """
        Persist settings to a store.

        Returns:
            True if successful, False otherwise
        """
        try:
            set_setting(store, 'GridWidth', self.grid_width)
            set_setting(store, 'GridHeight', self.grid_height)
            set_setting(store, 'TileSize', self.tile_size)
            set_setting(store, 'TilesetColumns', self.tileset_columns)
            set_setting(store, 'TilesetRows', self.tileset_rows)
            set_setting(store, 'ToolSize', self.tool_size)
            set_setting(store, 'MaxHistoryEntries', self.max_history_entries)
            set_setting(store, 'BlockedTiles', ','.join(str(t) for t in sorted(self.blocked_tiles)))
            return True
        except StorageError as e:
            log(f"Error saving settings: {e}")
            return False
