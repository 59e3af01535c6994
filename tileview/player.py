"""Per-player record and interpolated draw pose.

:class:`PlayerState` is the authoritative client-side view of one player. It
is mutated only by merging :class:`tileview.sync.SyncMessage` diffs through
:meth:`PlayerState.apply`. Rendering never touches the authoritative fields;
it asks for a :class:`DrawPose` at a given instant instead, which smooths a
discrete tile change into continuous motion over ``move_interval_ms`` and
selects a walk-cycle sprite frame.

Serialized shape (JSON object)::

    {"id": "p1", "displayName": "p1", "displayChar": "char1", "facing": "D",
     "removed": false, "position": {"x": 6, "y": 5},
     "previousPosition": {"x": 5, "y": 5}, "lastMoveTime": 1.7e12}

``position``, ``previousPosition`` and ``lastMoveTime`` are omitted while
unset.
"""

from dataclasses import dataclass
import json
import math
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from tileview.config import ViewConfig
from tileview.coord import Coordinate
from tileview.types import Facing, PlayerID, Stride
from tileview.utils.clock import now_ms

if TYPE_CHECKING:
    from tileview.sync import SyncMessage

DEFAULT_DISPLAY_CHAR = "char1"
DEFAULT_VIEW_CONFIG = ViewConfig()


@dataclass(frozen=True)
class DrawPose:
    """What the renderer needs to draw one player for one frame.

    Attributes:
        position: Possibly interpolated map position.
        facing: Base orientation.
        stride: Walk-cycle modifier; ``Stride.NONE`` when standing still.
        display_name: Label drawn above the sprite.
        display_char: Sprite-set identifier.
    """

    position: Coordinate
    facing: Facing
    stride: Stride
    display_name: str
    display_char: str

    @property
    def sprite_key(self) -> str:
        """Facing plus stride, e.g. ``"D"``, ``"DR"`` or ``"DL"``."""
        return f"{self.facing.value}{self.stride.value}"


def walk_stride(now: float, frame_ms: float) -> Stride:
    """Four-frame walk cycle: right, neutral, left, neutral."""
    phase = math.floor(now / frame_ms) % 4
    if phase == 0:
        return Stride.RIGHT
    if phase == 2:
        return Stride.LEFT
    return Stride.NONE


@dataclass
class PlayerState:
    """Authoritative record of one player.

    Attributes:
        id: Unique identity key; cannot be reassigned.
        display_name: Free text label (defaults to the id).
        display_char: Sprite-set identifier.
        position: Current map position, ``None`` until first known.
        previous_position: Position right before the last change; used only
            for interpolation.
        facing: Base orientation.
        last_move_time: Wall-clock ms of the last position change.
        removed: Tombstone; set once the player has left.
    """

    id: PlayerID
    display_name: str = ""
    display_char: str = DEFAULT_DISPLAY_CHAR
    position: Optional[Coordinate] = None
    previous_position: Optional[Coordinate] = None
    facing: Facing = Facing.DOWN
    last_move_time: Optional[float] = None
    removed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"PlayerState id must be a non-empty string: {self.id!r}")
        if not self.display_name:
            self.display_name = self.id

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("PlayerState.id cannot be reassigned")
        super().__setattr__(name, value)

    # Store keying

    @staticmethod
    def key_for(player_id: PlayerID) -> str:
        """Key of a player's record in the server-side store."""
        return f"p-{player_id}"

    @property
    def storage_key(self) -> str:
        return PlayerState.key_for(self.id)

    # Sync

    def apply(self, msg: "SyncMessage", now: Optional[float] = None) -> bool:
        """Merge a sparse update into this record.

        Arguments:
            msg: Update addressed to this player.
            now: Wall-clock ms recorded as the move time if the position
                changes. Defaults to the current time.

        Returns:
            bool: ``False`` (and no change) if ``msg`` targets another player.
        """
        if msg.id != self.id:
            return False
        if msg.position is not None and msg.position != self.position:
            if self.position is None:
                # First appearance: nothing to animate from.
                self.previous_position = msg.position
            else:
                self.previous_position = self.position
                self.last_move_time = now_ms() if now is None else now
            self.position = msg.position
        if msg.facing is not None:
            self.facing = msg.facing
        if msg.display_name is not None:
            self.display_name = msg.display_name
        if msg.display_char is not None:
            self.display_char = msg.display_char
        if msg.removed is not None:
            self.removed = msg.removed
        return True

    # Rendering

    def draw_pose(
        self, now: float, config: ViewConfig = DEFAULT_VIEW_CONFIG
    ) -> Optional[DrawPose]:
        """Pose to draw at wall-clock ``now``.

        Pure: repeated calls with the same ``now`` give the same result and
        the authoritative position is never modified.

        Returns:
            Optional[DrawPose]: ``None`` while the position is unknown.
        """
        if self.position is None:
            return None
        if self.last_move_time is not None:
            elapsed = max(0.0, now - self.last_move_time)
            if elapsed < config.move_interval_ms:
                start = self.previous_position or self.position
                return DrawPose(
                    position=start.lerp(self.position, elapsed / config.move_interval_ms),
                    facing=self.facing,
                    stride=walk_stride(now, config.animation_frame_ms),
                    display_name=self.display_name,
                    display_char=self.display_char,
                )
        return DrawPose(
            position=self.position,
            facing=self.facing,
            stride=Stride.NONE,
            display_name=self.display_name,
            display_char=self.display_char,
        )

    # Serialization

    def to_obj(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {
            "id": self.id,
            "displayName": self.display_name,
            "displayChar": self.display_char,
            "facing": self.facing.value,
            "removed": self.removed,
        }
        if self.position is not None:
            obj["position"] = self.position.to_obj()
        if self.previous_position is not None:
            obj["previousPosition"] = self.previous_position.to_obj()
        if self.last_move_time is not None:
            obj["lastMoveTime"] = self.last_move_time
        return obj

    def to_json(self) -> str:
        return json.dumps(self.to_obj())

    @staticmethod
    def from_obj(obj: Mapping[str, Any]) -> "PlayerState":
        """Rebuild a record from :meth:`to_obj` output.

        A record without ``previousPosition`` takes its position as the
        previous one, so it is drawn at rest.

        Raises:
            ValueError: If ``obj`` is not a player object.
        """
        if not isinstance(obj, Mapping) or "id" not in obj:
            raise ValueError(f"Not a player object: {obj!r}")
        state = PlayerState(id=obj["id"])
        if "displayName" in obj:
            state.display_name = str(obj["displayName"])
        if "displayChar" in obj:
            state.display_char = str(obj["displayChar"])
        if "facing" in obj:
            state.facing = Facing(obj["facing"])
        if "removed" in obj:
            state.removed = bool(obj["removed"])
        if "position" in obj:
            state.position = Coordinate.from_obj(obj["position"])
            state.previous_position = state.position
        if "previousPosition" in obj:
            state.previous_position = Coordinate.from_obj(obj["previousPosition"])
        if "lastMoveTime" in obj:
            state.last_move_time = float(obj["lastMoveTime"])
        return state

    @staticmethod
    def from_json(raw: str) -> "PlayerState":
        return PlayerState.from_obj(json.loads(raw))
