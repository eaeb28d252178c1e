from tilepaint.core import EditorSettings, MemoryStore, SettingsStore
from tilepaint.core.settings import setting, set_setting


def test_defaults_when_store_is_empty():
    settings = EditorSettings.load(MemoryStore())
    assert settings == EditorSettings()
    assert settings.max_history_entries == 50
    assert settings.blocked_tiles == frozenset()


def test_save_then_load():
    store = MemoryStore()
    EditorSettings(grid_width=40, grid_height=30, tool_size=3,
                   blocked_tiles=frozenset({5, 12})).save(store)

    assert store.get('Grid/GridWidth') == '40'
    assert store.get('Editor/BlockedTiles') == '5,12'

    loaded = EditorSettings.load(store)
    assert (loaded.grid_width, loaded.grid_height, loaded.tool_size) == (40, 30, 3)
    assert loaded.blocked_tiles == frozenset({5, 12})


def test_values_are_converted_to_the_default_type():
    store = MemoryStore()
    set_setting(store, 'ToolSize', 4)
    set_setting(store, 'ShowGrid', True)
    assert setting(store, 'ToolSize', 1) == 4
    assert setting(store, 'ShowGrid', False) is True
    assert store.get('Main/ShowGrid') == 'true'


def test_bad_values_fall_back_to_default():
    store = MemoryStore()
    store.set('Grid/GridWidth', 'wide')
    store.set('Grid/TileSize', '@Invalid()')
    store.set('Editor/ToolSize', '0')
    loaded = EditorSettings.load(store)
    assert loaded.grid_width == 100
    assert loaded.tile_size == 16
    assert loaded.tool_size == 1


def test_ungrouped_key_is_still_read():
    store = MemoryStore()
    store.set('GridHeight', '12')
    assert EditorSettings.load(store).grid_height == 12


def test_setting_without_default_guesses_type():
    store = MemoryStore()
    store.set('Main/Ratio', '1.5')
    store.set('Main/Count', '7')
    store.set('Main/Label', 'hello')
    assert setting(store, 'Ratio') == 1.5
    assert setting(store, 'Count') == 7
    assert setting(store, 'Label') == 'hello'
    assert setting(store, 'Missing', 'x') == 'x'


def test_save_reports_storage_failure():
    assert not EditorSettings().save(MemoryStore(quota=3))


def test_settings_store_persists_to_ini(tmp_path):
    path = str(tmp_path / 'tilepaint.ini')
    store = SettingsStore(path)
    EditorSettings(grid_width=64, tool_size=2).save(store)
    store.set('history', '[{"label": "a, b"}]')

    reopened = SettingsStore(path)
    assert EditorSettings.load(reopened).grid_width == 64
    assert EditorSettings.load(reopened).tool_size == 2
    assert reopened.get('history') == '[{"label": "a, b"}]'

    reopened.remove('history')
    assert not SettingsStore(path).contains('history')
