from tilepaint.core import FillEngine, FillMode, Layer, Viewport


def test_empty_click_fills_visible_grid_only():
    layer = Layer('Ground')
    result = FillEngine().flood_fill(5, 5, 7, layer, Viewport(0, 0, 160, 160, tile_size=16))

    assert result.mode == FillMode.VIEWPORT
    assert result.count == 100
    assert set(layer.tiles) == {(x, y) for x in range(10) for y in range(10)}
    assert all(tile == 7 for tile in layer.tiles.values())
    assert (10, 10) not in layer.tiles


def test_viewport_fill_includes_partially_visible_cells():
    layer = Layer('Ground')
    FillEngine().flood_fill(1, 1, 2, layer, Viewport(8, 8, 32, 16, tile_size=16))
    xs = {x for x, _ in layer.tiles}
    ys = {y for _, y in layer.tiles}
    assert xs == {0, 1, 2}
    assert ys == {0, 1}


def test_viewport_fill_skips_occupied_cells():
    layer = Layer('Ground', {(1, 1): 4})
    result = FillEngine().flood_fill(0, 0, 7, layer, Viewport(0, 0, 48, 48))
    assert layer.tiles[(1, 1)] == 4
    assert (1, 1) not in result.positions
    assert result.count == 8


def test_flood_fill_replaces_connected_region_only():
    layer = Layer('Ground', {(0, 0): 3, (1, 0): 3, (0, 1): 3, (5, 5): 9})
    result = FillEngine().flood_fill(0, 0, 8, layer, Viewport(0, 0, 160, 160))

    assert result.mode == FillMode.FLOOD
    assert result.positions == {(0, 0), (1, 0), (0, 1)}
    assert layer.tiles == {(0, 0): 8, (1, 0): 8, (0, 1): 8, (5, 5): 9}


def test_flood_fill_is_not_bounded_by_viewport():
    tiles = {(x, 0): 3 for x in range(-50, 200)}
    layer = Layer('Ground', tiles)
    result = FillEngine().flood_fill(0, 0, 5, layer, Viewport(0, 0, 16, 16))
    assert result.count == 250
    assert layer.tiles[(-50, 0)] == 5
    assert layer.tiles[(199, 0)] == 5


def test_flood_fill_is_four_connected():
    layer = Layer('Ground', {(0, 0): 3, (1, 1): 3})
    FillEngine().flood_fill(0, 0, 4, layer, Viewport(0, 0, 160, 160))
    assert layer.tiles[(1, 1)] == 3


def test_same_tile_is_noop():
    layer = Layer('Ground', {(0, 0): 3})
    result = FillEngine().flood_fill(0, 0, 3, layer, Viewport(0, 0, 160, 160))
    assert result.mode == FillMode.NONE
    assert layer.tiles == {(0, 0): 3}


def test_fill_zero_tile_on_empty_cell_is_not_noop():
    layer = Layer('Ground')
    result = FillEngine().flood_fill(0, 0, 0, layer, Viewport(0, 0, 16, 16))
    assert result.mode == FillMode.VIEWPORT
    assert layer.tiles == {(0, 0): 0}


def test_fill_is_idempotent():
    viewport = Viewport(0, 0, 160, 160)
    engine = FillEngine()

    once = Layer('Ground', {(0, 0): 3, (1, 0): 3, (4, 4): 1})
    engine.flood_fill(0, 0, 8, once, viewport)
    snapshot = dict(once.tiles)
    engine.flood_fill(0, 0, 8, once, viewport)
    assert once.tiles == snapshot

    empty = Layer('Ground')
    engine.flood_fill(2, 2, 6, empty, viewport)
    snapshot = dict(empty.tiles)
    engine.flood_fill(2, 2, 6, empty, viewport)
    assert empty.tiles == snapshot


def test_fill_applied_signal_reports_positions():
    received = []
    engine = FillEngine()
    engine.fill_applied.connect(received.append)

    layer = Layer('Ground', {(0, 0): 3, (0, 1): 3})
    engine.flood_fill(0, 0, 1, layer, Viewport(0, 0, 160, 160))
    engine.flood_fill(0, 0, 1, layer, Viewport(0, 0, 160, 160))

    assert [[tuple(p) for p in positions] for positions in received] == [[(0, 0), (0, 1)]]
