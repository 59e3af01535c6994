"""Sparse player synchronization message.

A :class:`SyncMessage` carries only the fields of a :class:`PlayerState` that
changed. It travels both ways over the transport: client -> server as a move
request (``client_time`` set) and server -> client as a broadcast
confirmation (``update_success`` set). Neither of those two fields is
interpreted here beyond being carried along.

Wire shape (absent keys mean "no change")::

    {"id": "p1", "position": {"x": 6, "y": 5}, "facing": "R",
     "displayName": "alice", "displayChar": "char2", "removed": false,
     "clientTime": 1.7e12, "updateSuccess": true}
"""

from dataclasses import dataclass
import json
from typing import Any, Dict, Mapping, Optional

from tileview.coord import Coordinate
from tileview.player import PlayerState
from tileview.types import Facing, PlayerID


class SyncMessageError(ValueError):
    """Raised for a message that cannot be built (e.g. missing ``id``)."""


@dataclass(frozen=True)
class SyncMessage:
    """Directional diff of a :class:`PlayerState`.

    ``None`` marks an absent field: it is skipped on apply and omitted on
    serialization.

    Raises:
        SyncMessageError: If ``id`` is missing or empty.
    """

    id: PlayerID
    position: Optional[Coordinate] = None
    facing: Optional[Facing] = None
    display_name: Optional[str] = None
    display_char: Optional[str] = None
    removed: Optional[bool] = None
    client_time: Optional[float] = None
    update_success: Optional[bool] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise SyncMessageError(
                f"SyncMessage requires a non-empty string id, got {self.id!r}"
            )

    @staticmethod
    def from_state(state: PlayerState, **extra: Any) -> "SyncMessage":
        """Full-state message for ``state``; ``extra`` sets the pass-through fields."""
        return SyncMessage(
            id=state.id,
            position=state.position,
            facing=state.facing,
            display_name=state.display_name,
            display_char=state.display_char,
            removed=state.removed,
            **extra,
        )

    def apply_to(self, state: PlayerState, now: Optional[float] = None) -> bool:
        """Merge into ``state``; see :meth:`PlayerState.apply`."""
        return state.apply(self, now)

    def to_obj(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {"id": self.id}
        if self.position is not None:
            obj["position"] = self.position.to_obj()
        if self.facing is not None:
            obj["facing"] = self.facing.value
        if self.display_name is not None:
            obj["displayName"] = self.display_name
        if self.display_char is not None:
            obj["displayChar"] = self.display_char
        if self.removed is not None:
            obj["removed"] = self.removed
        if self.client_time is not None:
            obj["clientTime"] = self.client_time
        if self.update_success is not None:
            obj["updateSuccess"] = self.update_success
        return obj

    def to_json(self) -> str:
        return json.dumps(self.to_obj())

    @staticmethod
    def from_obj(obj: Mapping[str, Any]) -> "SyncMessage":
        """Decode a wire object.

        Raises:
            SyncMessageError: On a non-object payload, a missing ``id`` or a
                field of the wrong type.
        """
        if not isinstance(obj, Mapping):
            raise SyncMessageError(f"SyncMessage must be a JSON object, got {obj!r}")
        try:
            return SyncMessage(
                id=obj.get("id"),  # type: ignore[arg-type]
                position=_opt(obj, "position", Coordinate.from_obj),
                facing=_opt(obj, "facing", Facing),
                display_name=_opt(obj, "displayName", _as_str),
                display_char=_opt(obj, "displayChar", _as_str),
                removed=_opt(obj, "removed", _as_bool),
                client_time=_opt(obj, "clientTime", _as_number),
                update_success=_opt(obj, "updateSuccess", _as_bool),
            )
        except SyncMessageError:
            raise
        except ValueError as exc:
            raise SyncMessageError(f"Malformed SyncMessage {obj!r}: {exc}") from exc

    @staticmethod
    def from_json(raw: str) -> "SyncMessage":
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SyncMessageError(f"SyncMessage is not valid JSON: {exc}") from exc
        return SyncMessage.from_obj(obj)


def _opt(obj: Mapping[str, Any], key: str, convert: Any) -> Any:
    value = obj.get(key)
    if value is None:
        return None
    return convert(value)


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _as_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return value
