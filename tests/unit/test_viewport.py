import math

import pytest

from tileview.assets import MapSize
from tileview.config import ViewConfig
from tileview.coord import Coordinate
from tileview.viewport import CellBounds, Viewport, ViewportError


def make_viewport() -> Viewport:
    # min/max camera: x in [5, 15], y in [4, 11]
    return Viewport(160, 128, MapSize(20, 15), ViewConfig(tile_size=16))


def test_starts_uninitialized() -> None:
    viewport = make_viewport()
    assert not viewport.is_initialized
    assert math.isnan(viewport.camera.x)
    with pytest.raises(ViewportError):
        viewport.map_to_screen(0, 0)
    with pytest.raises(ViewportError):
        viewport.screen_to_map(0, 0)


def test_camera_bounds() -> None:
    assert make_viewport().camera_bounds() == (5.0, 15.0, 4.0, 11.0)


@pytest.mark.parametrize(
    "requested, expected",
    [
        ((10.0, 8.0), (10.0, 8.0)),
        ((5.0, 4.0), (5.0, 4.0)),
        ((15.0, 11.0), (15.0, 11.0)),
        ((0.0, 0.0), (5.0, 4.0)),
        ((-100.0, 100.0), (5.0, 11.0)),
        ((19.5, 2.0), (15.0, 4.0)),
    ],
)
def test_set_camera_position_clamps(
    requested: tuple[float, float], expected: tuple[float, float]
) -> None:
    viewport = make_viewport()
    applied = viewport.set_camera_position(*requested)
    assert applied == Coordinate(*expected)
    assert viewport.camera == Coordinate(*expected)
    assert viewport.is_initialized


def test_center_on_uses_tile_middle() -> None:
    viewport = make_viewport()
    viewport.center_on(Coordinate(9, 7))
    assert viewport.camera == Coordinate(9.5, 7.5)


def test_map_to_screen_floors() -> None:
    viewport = make_viewport()
    viewport.set_camera_position(10, 8)
    assert viewport.map_to_screen(10, 8) == (80, 64)
    assert viewport.map_to_screen(11, 9) == (96, 80)
    assert viewport.map_to_screen(10.03, 8) == (80, 64)
    assert viewport.map_to_screen(9.99, 7.99) == (79, 63)


def test_screen_to_map() -> None:
    viewport = make_viewport()
    viewport.set_camera_position(10, 8)
    assert viewport.screen_to_map(80, 64) == Coordinate(10, 8)
    assert viewport.screen_to_map(0, 0) == Coordinate(5, 4)
    assert viewport.screen_to_map(88, 72) == Coordinate(10.5, 8.5)


def test_transform_round_trip_within_one_pixel() -> None:
    viewport = make_viewport()
    viewport.set_camera_position(10.37, 6.81)
    for px in range(0, 160, 7):
        for py in range(0, 128, 5):
            where = viewport.screen_to_map(px, py)
            sx, sy = viewport.map_to_screen(where.x, where.y)
            assert abs(sx - px) <= 1 and abs(sy - py) <= 1


def test_visible_cells() -> None:
    viewport = make_viewport()
    viewport.set_camera_position(10, 8)
    assert viewport.visible_cells() == CellBounds(5, 4, 15, 12)
    viewport.set_camera_position(10.5, 8.25)
    assert viewport.visible_cells() == CellBounds(5, 4, 15, 12)


def test_cell_bounds_clip_and_iter() -> None:
    bounds = CellBounds(-1, -1, 1, 0).clip(MapSize(20, 15))
    assert bounds == CellBounds(0, 0, 1, 0)
    assert list(bounds) == [(0, 0), (1, 0)]
    assert (1, 0) in bounds
    assert (2, 0) not in bounds
    assert list(CellBounds(3, 3, 2, 2)) == []


@pytest.mark.parametrize(
    "px, py, visible",
    [
        (0, 0, True),
        (-15, -15, True),
        (-16, 0, False),
        (159, 127, True),
        (160, 0, False),
        (0, 128, False),
    ],
)
def test_tile_intersects_canvas(px: int, py: int, visible: bool) -> None:
    assert make_viewport().tile_intersects_canvas(px, py) is visible


def test_follow() -> None:
    viewport = make_viewport()
    assert viewport.followed is None
    viewport.follow("p1")
    assert viewport.followed == "p1"
