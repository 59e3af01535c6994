import logging
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple

from PIL import Image, ImageDraw

from tileview.assets import MapData
from tileview.config import ViewConfig
from tileview.coord import Coordinate
from tileview.layers import Layer, LayerRegistry
from tileview.player import DrawPose, PlayerState
from tileview.types import Clock, DrawFn, PlayerID
from tileview.utils.clock import now_ms
from tileview.utils.image import (
    UInt8Array,
    canvas_to_array,
    composite_clipped,
    draw_label,
    load_label_font,
    region_image,
)
from tileview.viewport import Viewport

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_SIZE = (640, 480)

GROUND_LAYER_NAME = "ground"
GROUND_LAYER_Z = -100
PLAYER_LAYER_NAME = "players"
PLAYER_LAYER_Z = 0


class PlayerSource(Protocol):
    """What the renderer consumes from the player collection."""

    def get_player(self, player_id: PlayerID) -> Optional[PlayerState]: ...

    def get_all_players(self) -> Iterable[PlayerState]: ...

    def on_position_change(
        self, listener: Callable[[PlayerID, Coordinate], None]
    ) -> Callable[[], None]: ...


class MapRenderer:
    """
    Composes one frame per :meth:`draw` call onto an RGBA Pillow canvas.

    The canvas starts with two built-in layers, ``ground`` (z=-100) and
    ``players`` (z=0). Extensions add more with :meth:`register_layer`.
    """

    canvas: Image.Image
    viewport: Viewport
    layers: LayerRegistry
    config: ViewConfig

    def __init__(
        self,
        map_data: MapData,
        players: PlayerSource,
        canvas_size: Tuple[int, int] = DEFAULT_CANVAS_SIZE,
        config: Optional[ViewConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.map_data = map_data
        self.players = players
        self.config = config or ViewConfig()
        self.clock = clock or now_ms
        self.canvas = Image.new("RGBA", canvas_size, self.config.background_color)
        self.viewport = Viewport(
            canvas_size[0], canvas_size[1], map_data.get_map_size(), self.config
        )
        self.layers = LayerRegistry()
        self.layers.register(
            GROUND_LAYER_Z, GROUND_LAYER_NAME, self._draw_ground, map_data
        )
        self.layers.register(
            PLAYER_LAYER_Z, PLAYER_LAYER_NAME, self._draw_players, players
        )
        self._font = load_label_font(self.config.label_font_size)
        self._unsubscribe = players.on_position_change(self._on_position_change)

    # Camera

    def _on_position_change(self, player_id: PlayerID, position: Coordinate) -> None:
        if self.viewport.followed == player_id:
            self.viewport.center_on(position)

    def initialize_viewer_position(self, player_id: PlayerID) -> bool:
        """Follow ``player_id`` and center the camera on it.

        Returns False (camera untouched) if the player has no known position.
        """
        self.viewport.follow(player_id)
        player = self.players.get_player(player_id)
        if player is None or player.position is None:
            logger.warning("Cannot center on player without position: id=%s", player_id)
            return False
        self.viewport.center_on(player.position)
        return True

    # Layers

    def register_layer(
        self, z_index: int, name: str, draw_fn: DrawFn, data: Any = None
    ) -> Layer:
        """Add or replace a layer; it shows up on the next :meth:`draw`."""
        return self.layers.register(z_index, name, draw_fn, data)

    # Drawing

    def draw(self) -> bool:
        """
        Draw every layer in ascending z order.

        A failing layer is logged and skipped; the others still draw. Never
        raises.

        Returns:
            bool: True if every layer drew successfully.
        """
        if not self.viewport.is_initialized:
            logger.warning("Skipping draw: viewport camera is not initialized")
            return False

        self.canvas.paste(
            self.config.background_color, (0, 0, self.canvas.width, self.canvas.height)
        )
        ok = True
        for layer in self.layers:
            try:
                result = layer.draw_fn(self.canvas, self.viewport, layer.data)
            except Exception:
                logger.exception("Layer draw failed: name=%s", layer.name)
                ok = False
                continue
            if result is False:
                logger.warning("Layer reported failure: name=%s", layer.name)
                ok = False
        return ok

    def _draw_ground(
        self, canvas: Image.Image, viewport: Viewport, map_data: MapData
    ) -> bool:
        bounds = viewport.visible_cells().clip(map_data.get_map_size())
        for x, y in bounds:
            info = map_data.get_cell_render_info(GROUND_LAYER_NAME, x, y)
            if info is None:
                continue
            tile = region_image(info, viewport.tile_size)
            composite_clipped(canvas, tile, viewport.map_to_screen(x, y))
        return True

    def _draw_players(
        self, canvas: Image.Image, viewport: Viewport, players: PlayerSource
    ) -> bool:
        now = self.clock()
        poses: List[DrawPose] = []
        for player in players.get_all_players():
            if player.removed:
                continue
            pose = player.draw_pose(now, self.config)
            if pose is not None:
                poses.append(pose)

        ok = True
        for pose in poses:
            px, py = viewport.map_to_screen(pose.position.x, pose.position.y)
            if not viewport.tile_intersects_canvas(px, py):
                continue
            info = self.map_data.get_sprite(pose.display_char, pose.sprite_key)
            if info is None and pose.sprite_key != pose.facing.value:
                info = self.map_data.get_sprite(pose.display_char, pose.facing.value)
            if info is None:
                logger.warning(
                    "Missing sprite: display_char=%s key=%s",
                    pose.display_char,
                    pose.sprite_key,
                )
                ok = False
                continue
            composite_clipped(canvas, region_image(info, viewport.tile_size), (px, py))

        # Names go in a second pass so no sprite covers another player's label.
        draw = ImageDraw.Draw(canvas)
        for pose in poses:
            anchor = viewport.map_to_screen(pose.position.x + 0.5, pose.position.y)
            draw_label(draw, pose.display_name, anchor, self._font, self.config.label_color)
        return ok

    # Output

    def snapshot(self) -> UInt8Array:
        """Current canvas as an ``(H, W, 4)`` uint8 array."""
        return canvas_to_array(self.canvas)

    def close(self) -> None:
        """Stop following position changes."""
        self._unsubscribe()
