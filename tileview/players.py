"""Client-side player collection.

Routes incoming :class:`SyncMessage` diffs to their :class:`PlayerState`,
creates records for players seen for the first time, purges tombstoned ones
and notifies subscribers of position changes (the renderer uses this to keep
the camera on the followed player).

Records live in a persistent map and a message replaces its target record
rather than editing it, so the list from
:meth:`PlayerCollection.get_all_players` and the records in it are a snapshot
that later messages cannot reshape mid-iteration.
Applying a message never suspends, so with cooperative scheduling a message
is applied either wholly before or wholly after a draw pass.
"""

import dataclasses
import logging
from typing import AsyncIterator, Callable, List, Optional, Union

from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from tileview.coord import Coordinate
from tileview.player import PlayerState
from tileview.sync import SyncMessage, SyncMessageError
from tileview.types import PlayerID
from tileview.utils.clock import now_ms

logger = logging.getLogger(__name__)

PositionListener = Callable[[PlayerID, Coordinate], None]


class PlayerCollection:
    """All known players, keyed by id."""

    def __init__(self) -> None:
        self._players: PMap[PlayerID, PlayerState] = pmap()
        self._listeners: PVector[PositionListener] = pvector()

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def get_player(self, player_id: PlayerID) -> Optional[PlayerState]:
        return self._players.get(player_id)

    def get_all_players(self) -> List[PlayerState]:
        """Snapshot of every player that has not left."""
        return [p for p in self._players.values() if not p.removed]

    def on_position_change(self, listener: PositionListener) -> Callable[[], None]:
        """Subscribe to position changes.

        Returns:
            Callable[[], None]: Call it to unsubscribe.
        """
        self._listeners = self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners = self._listeners.remove(listener)

        return unsubscribe

    def apply(self, msg: SyncMessage, now: Optional[float] = None) -> bool:
        """Apply one message, creating or purging the target record as needed."""
        now = now_ms() if now is None else now
        state = self._players.get(msg.id)
        if state is None:
            if msg.removed:
                logger.debug("Ignoring removal of unknown player: id=%s", msg.id)
                return True
            state = PlayerState(id=msg.id)
            logger.info("Player joined: id=%s", msg.id)
        else:
            state = dataclasses.replace(state)

        old_position = state.position
        if not state.apply(msg, now):
            return False

        if state.removed:
            self._players = self._players.discard(msg.id)
            logger.info("Player left: id=%s", msg.id)
            return True

        self._players = self._players.set(msg.id, state)
        if state.position is not None and state.position != old_position:
            for listener in self._listeners:
                listener(state.id, state.position)
        return True

    def apply_json(self, raw: Union[str, bytes], now: Optional[float] = None) -> bool:
        """Decode and apply a wire message; malformed payloads report ``False``."""
        try:
            msg = SyncMessage.from_json(raw if isinstance(raw, str) else raw.decode())
        except (SyncMessageError, UnicodeDecodeError) as exc:
            logger.warning("Dropping malformed sync message: %s", exc)
            return False
        return self.apply(msg, now)

    async def consume(self, source: AsyncIterator[Union[SyncMessage, str]]) -> int:
        """Apply every message from an async transport stream.

        Returns:
            int: Number of messages applied successfully.
        """
        applied = 0
        async for item in source:
            if isinstance(item, SyncMessage):
                ok = self.apply(item)
            else:
                ok = self.apply_json(item)
            applied += int(ok)
        return applied
