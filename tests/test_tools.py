from tilepaint.core import TileSetGeometry, ToolManager, ToolType
from tilepaint.core import logging as tp_logging


def test_tile_index_and_coords():
    geometry = TileSetGeometry(columns=94)
    assert geometry.tile_index(10, 20) == 20 * 94 + 10
    assert geometry.coords(20 * 94 + 10) == (10, 20)
    assert geometry.coords(0) == (0, 0)


def test_activate_tool_runs_deactivate_callback():
    tools = ToolManager()
    calls = []
    changes = []
    tools.register_deactivate_callback(ToolType.BRUSH, lambda: calls.append('brush off'))
    tools.tool_changed.connect(lambda new, old: changes.append((new, old)))

    assert tools.active_tool == ToolType.BRUSH
    assert not tools.activate_tool(ToolType.BRUSH)
    assert tools.activate_tool(ToolType.PATH)
    assert calls == ['brush off']
    assert changes == [(ToolType.PATH, ToolType.BRUSH)]
    assert tools.is_active(ToolType.PATH)
    assert tools.is_stroke_tool_active()
    assert tools.get_tool_display_name() == 'Path'


def test_log_file(tmp_path):
    tp_logging.init_logging(str(tmp_path))
    try:
        tp_logging.log_history('written')
        tp_logging.set_logging_enabled(False)
        tp_logging.log_history('skipped')
    finally:
        tp_logging.set_logging_enabled(True)
        tp_logging.close_logging()

    content = (tmp_path / 'tilepaint_debug.log').read_text(encoding='utf-8')
    assert '[HistoryManager] written' in content
    assert 'skipped' not in content
