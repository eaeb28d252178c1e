from tilepaint.core import Layer, StrokeEngine, StrokeState, TilePainter

from tests.conftest import slot_tile


def tiles_by_slot(operations, zone):
    slots = {slot_tile(zone, slot): slot for slot in range(15)}
    return {(op.x, op.y): slots[op.tile_id] for op in operations}


def test_single_click_resolves_full_neighborhood(path_zone, geometry):
    engine = StrokeEngine()
    assert engine.begin((5, 5), path_zone)
    operations = engine.finish(Layer('Ground'), geometry)

    assert tiles_by_slot(operations, path_zone) == {
        (4, 4): 0, (5, 4): 1, (6, 4): 2,
        (4, 5): 5, (5, 5): 6, (6, 5): 7,
        (4, 6): 10, (5, 6): 11, (6, 6): 12,
    }
    assert engine.state == StrokeState.IDLE


def test_horizontal_drag_is_interpolated(path_zone, geometry):
    engine = StrokeEngine()
    engine.begin((0, 0), path_zone)
    engine.update((4, 0))
    assert engine.get_outline() == [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]

    slots = tiles_by_slot(engine.finish(Layer('Ground'), geometry), path_zone)
    for x in range(5):
        assert slots[(x, 0)] == 6
    # Edges above and below the line
    for x in range(5):
        assert slots[(x, -1)] == 1
        assert slots[(x, 1)] == 11
    assert slots[(-1, 0)] == 5
    assert slots[(5, 0)] == 7


def test_existing_tiles_are_not_overwritten_by_the_border(path_zone, geometry):
    layer = Layer('Ground', {(6, 5): 1234})
    engine = StrokeEngine()
    engine.begin((5, 5), path_zone)
    positions = {(op.x, op.y) for op in engine.finish(layer, geometry)}
    assert (6, 5) not in positions


def test_border_uses_state_before_the_stroke(path_zone, geometry):
    # Two separate marked cells with one empty cell between them
    engine = StrokeEngine()
    engine.begin((0, 0), path_zone)
    engine.resolver.mark(2, 0)
    engine.session.stroke_path.append((2, 0))
    slots = tiles_by_slot(engine.finish(Layer('Ground'), geometry), path_zone)
    # Painted on both sides: no tile for the gap
    assert (1, 0) not in slots


def test_zone_too_small_is_rejected(zones, geometry):
    small = zones.create_zone((0, 0), (2, 2), 'Tiny', 'path')
    engine = StrokeEngine()
    assert not engine.begin((0, 0), small)
    assert not engine.is_painting()
    assert engine.finish(Layer('Ground'), geometry) == []


def test_cancel_discards_marks(path_zone, geometry):
    engine = StrokeEngine()
    engine.begin((0, 0), path_zone)
    engine.update((3, 3))
    engine.cancel()
    assert not engine.is_painting()
    assert engine.resolver.marked == set()
    assert engine.update((4, 4)) is False


def test_outline_callback(path_zone):
    outlines = []
    engine = StrokeEngine()
    engine.on_outline_updated = outlines.append
    engine.begin((0, 0), path_zone)
    engine.update((0, 2))
    engine.cancel()
    assert outlines == [[(0, 0)], [(0, 0), (0, 1), (0, 2)], []]


def test_bresenham_line_endpoints_and_continuity():
    assert TilePainter.bresenham_line(0, 0, 0, 0) == [(0, 0)]
    line = TilePainter.bresenham_line(0, 0, 5, 2)
    assert line[0] == (0, 0) and line[-1] == (5, 2)
    assert len(line) == 6
    line = TilePainter.bresenham_line(3, 3, 1, -2)
    assert line[0] == (3, 3) and line[-1] == (1, -2)
    for (ax, ay), (bx, by) in zip(line, line[1:]):
        assert abs(ax - bx) <= 1 and abs(ay - by) <= 1


def test_brush_square_centered():
    ops = TilePainter.brush_square(5, 5, 9, size=3)
    assert {(op.x, op.y) for op in ops} == {(x, y) for x in range(4, 7) for y in range(4, 7)}
    ops = TilePainter.brush_square(5, 5, 9, size=2)
    assert {(op.x, op.y) for op in ops} == {(4, 4), (5, 4), (4, 5), (5, 5)}


def test_stamp_zone_places_whole_block(tree_zone, geometry):
    ops = TilePainter.stamp_zone(10, 10, tree_zone, geometry)
    placed = {(op.x, op.y): op.tile_id for op in ops}
    assert len(placed) == 6
    assert placed[(10, 10)] == geometry.tile_index(50, 5)
    assert placed[(11, 12)] == geometry.tile_index(51, 7)


def test_even_brush_extends_left_and_up():
    ops = TilePainter.brush_square(5, 5, 9, size=4)
    xs = {op.x for op in ops}
    assert xs == {3, 4, 5, 6}
    assert min(xs) == 5 - 2 and max(xs) == 5 + 1
