"""Rendering subpackage.

Turns the player collection and the map data into a composed RGBA frame. The
renderer focuses on:

* A floating point camera (see :mod:`tileview.viewport`) clamped to the map.
* Z-ordered layers: built-in ``ground`` and ``players`` plus any layer an
  extension registers.
* Best-effort passes: a failing layer is logged and the rest still draw.
* Lightweight Pillow + NumPy compositing suitable for small tile grids.

See :mod:`tileview.renderer.map_renderer` for the draw pipeline.
"""

from .map_renderer import (
    GROUND_LAYER_NAME,
    GROUND_LAYER_Z,
    PLAYER_LAYER_NAME,
    PLAYER_LAYER_Z,
    MapRenderer,
    PlayerSource,
)

__all__ = [
    "GROUND_LAYER_NAME",
    "GROUND_LAYER_Z",
    "PLAYER_LAYER_NAME",
    "PLAYER_LAYER_Z",
    "MapRenderer",
    "PlayerSource",
]
