import json

import pytest

from tileview.coord import Coordinate
from tileview.player import PlayerState
from tileview.sync import SyncMessage, SyncMessageError
from tileview.types import Facing


@pytest.mark.parametrize("bad_id", [None, "", 42])
def test_construction_requires_id(bad_id: object) -> None:
    with pytest.raises(SyncMessageError):
        SyncMessage(id=bad_id)  # type: ignore[arg-type]


def test_sync_message_error_is_value_error() -> None:
    assert issubclass(SyncMessageError, ValueError)


def test_absent_fields_are_omitted() -> None:
    assert SyncMessage(id="p1").to_obj() == {"id": "p1"}
    assert SyncMessage(id="p1", position=Coordinate(6, 5)).to_obj() == {
        "id": "p1",
        "position": {"x": 6, "y": 5},
    }


def test_wire_keys() -> None:
    msg = SyncMessage(
        id="p1",
        position=Coordinate(1.5, 2),
        facing=Facing.LEFT,
        display_name="alice",
        display_char="char2",
        removed=False,
        client_time=99.0,
        update_success=True,
    )
    assert msg.to_obj() == {
        "id": "p1",
        "position": {"x": 1.5, "y": 2},
        "facing": "L",
        "displayName": "alice",
        "displayChar": "char2",
        "removed": False,
        "clientTime": 99.0,
        "updateSuccess": True,
    }


@pytest.mark.parametrize(
    "msg",
    [
        SyncMessage(id="p1"),
        SyncMessage(id="p1", position=Coordinate(3, 4)),
        SyncMessage(id="p1", facing=Facing.UP, removed=True),
        SyncMessage(id="p1", display_name="", display_char="char9"),
        SyncMessage(id="p1", client_time=1.7e12),
        SyncMessage(id="p1", update_success=False),
    ],
)
def test_round_trip(msg: SyncMessage) -> None:
    restored = SyncMessage.from_json(msg.to_json())
    assert restored == msg
    assert restored.to_obj().keys() == msg.to_obj().keys()


def test_from_obj_null_means_absent() -> None:
    msg = SyncMessage.from_obj({"id": "p1", "facing": None})
    assert msg.facing is None


@pytest.mark.parametrize(
    "payload",
    [
        "[]",
        "not json",
        json.dumps({"position": {"x": 1, "y": 2}}),
        json.dumps({"id": "p1", "position": {"x": 1}}),
        json.dumps({"id": "p1", "facing": "Q"}),
        json.dumps({"id": "p1", "removed": "yes"}),
        json.dumps({"id": "p1", "clientTime": "soon"}),
    ],
)
def test_malformed_payloads(payload: str) -> None:
    with pytest.raises(SyncMessageError):
        SyncMessage.from_json(payload)


def test_from_state_copies_every_field() -> None:
    state = PlayerState(
        id="p1", display_name="alice", position=Coordinate(1, 2), facing=Facing.UP
    )
    msg = SyncMessage.from_state(state, update_success=True)
    target = PlayerState(id="p1")
    assert msg.apply_to(target, now=0.0)
    assert target.position == Coordinate(1, 2)
    assert target.display_name == "alice"
    assert target.facing == Facing.UP
    assert msg.update_success is True
