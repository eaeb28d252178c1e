import pytest

from tilepaint.core import (
    Document, EditorSettings, HistoryManager, MapEditor, MemoryStore,
    TileSetGeometry, ZoneRegistry, PATH, WATER, TREE,
)


COLUMNS = 94


@pytest.fixture
def geometry():
    return TileSetGeometry(columns=COLUMNS, rows=157, tile_size=16)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def zones(store):
    return ZoneRegistry(store)


@pytest.fixture
def path_zone(zones):
    # 5x3 auto-tile block at tile-set column 10, row 20
    return zones.create_zone((10, 20), (14, 22), 'Dirt path', PATH)


@pytest.fixture
def water_zone(zones):
    return zones.create_zone((30, 40), (34, 42), 'Pond', WATER)


@pytest.fixture
def tree_zone(zones):
    # 2x3 stamp
    return zones.create_zone((51, 7), (50, 5), 'Oak', TREE)


@pytest.fixture
def history(store):
    return HistoryManager(store, max_entries=50)


@pytest.fixture
def editor(store, history, zones, geometry):
    settings = EditorSettings(grid_width=20, grid_height=15, tile_size=16,
                              tileset_columns=COLUMNS)
    editor = MapEditor(Document(), history, zones, geometry, settings, store)
    editor.load()
    return editor


def slot_tile(zone, slot, columns=COLUMNS):
    """Tile index of an auto-tile slot inside a zone"""
    col = zone.bounds.start_x + slot % 5
    row = zone.bounds.start_y + slot // 5
    return row * columns + col
