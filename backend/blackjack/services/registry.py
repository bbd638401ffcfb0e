import enum
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from blackjack.exceptions import RegistryBusy
from .deck import STANDARD_DECK, deal, make_rng

logger = logging.getLogger(__name__)


class RoomState(enum.Enum):
    OPEN = 'open'
    FULL = 'full'


@dataclass(frozen=True)
class Room:
    room_id: str
    name: str
    creator_id: str
    creator_hand: Tuple[int, int]
    opponent_hand: Tuple[int, int]
    remainder: Tuple[int, ...]
    opponent_id: Optional[str] = None
    state: RoomState = RoomState.OPEN
    created_at: float = 0.0
    version: int = 1

    @property
    def participants(self) -> List[str]:
        return [cid for cid in (self.creator_id, self.opponent_id) if cid]

    def hand_for(self, connection_id: str) -> Optional[Tuple[int, int]]:
        if connection_id == self.creator_id:
            return self.creator_hand
        if self.opponent_id is not None and connection_id == self.opponent_id:
            return self.opponent_hand
        return None

    def to_dict(self):
        return {
            'room_id': self.room_id,
            'name': self.name,
            'state': self.state.value,
            'creator': self.creator_id,
            'opponent': self.opponent_id,
            'cards_remaining': len(self.remainder),
            'version': self.version,
        }


class JoinStatus(enum.Enum):
    JOINED = 'joined'
    ROOM_FULL = 'room_full'
    ROOM_NOT_FOUND = 'room_not_found'
    SELF_JOIN_REJECTED = 'self_join_rejected'


@dataclass(frozen=True)
class JoinOutcome:
    status: JoinStatus
    room: Optional[Room] = None

    @property
    def joined(self) -> bool:
        return self.status is JoinStatus.JOINED


class RoomRegistry:
    """Authoritative in-memory collection of rooms.

    Every read and write runs under one lock. Rooms are immutable
    snapshots: a mutation stores a new ``Room`` in place of the old one, so
    callers can read what they were handed without holding the lock.
    Nothing in here suspends, and callers must do their notifying only
    after a method has returned.
    """

    def __init__(
        self,
        deck=STANDARD_DECK,
        rng=None,
        lock_timeout: float = 0.5,
        lock_retries: int = 3,
    ):
        self._rooms: Dict[str, Room] = {}
        self._issued_ids = set()
        self._lock = threading.Lock()
        self._deck = tuple(deck)
        self._rng = rng or make_rng()
        self._lock_timeout = lock_timeout
        self._lock_retries = max(1, lock_retries)

    @classmethod
    def from_config(cls, config) -> 'RoomRegistry':
        return cls(
            rng=make_rng(config.get('DEAL_SEED')),
            lock_timeout=float(config.get('REGISTRY_LOCK_TIMEOUT_SEC', 0.5)),
            lock_retries=int(config.get('REGISTRY_LOCK_RETRIES', 3)),
        )

    @contextmanager
    def _exclusive(self):
        for attempt in range(1, self._lock_retries + 1):
            if self._lock.acquire(timeout=self._lock_timeout):
                break
            logger.warning(
                f"[registry-contention] attempt={attempt}/{self._lock_retries} timeout={self._lock_timeout}s"
            )
        else:
            raise RegistryBusy(self._lock_retries)
        try:
            yield
        finally:
            self._lock.release()

    def _allocate_id(self, creator_id: str) -> str:
        base = f"room_{creator_id}"
        room_id = base
        n = 1
        while room_id in self._issued_ids:
            n += 1
            room_id = f"{base}_{n}"
        self._issued_ids.add(room_id)
        return room_id

    def create_room(self, creator_id: str, name: str) -> Room:
        """Deal a fresh deck into a new open room owned by ``creator_id``.

        Both hands are dealt now; the second one is held for whoever joins.
        """
        with self._exclusive():
            room_id = self._allocate_id(creator_id)
            hand1, hand2, remainder = deal(self._deck, self._rng)
            room = Room(
                room_id=room_id,
                name=name,
                creator_id=creator_id,
                creator_hand=hand1,
                opponent_hand=hand2,
                remainder=remainder,
                created_at=time.time(),
            )
            self._rooms[room_id] = room
        logger.info(f"[room-create] room={room_id} creator={creator_id} name={name!r}")
        return room

    def find_room(self, room_id: str) -> Optional[Room]:
        with self._exclusive():
            return self._rooms.get(room_id)

    def try_join(self, room_id: str, joiner_id: str) -> JoinOutcome:
        """Seat ``joiner_id`` as the opponent if the room can take them.

        Checked in order: room exists, joiner is not the creator, room is
        still open. The whole check-and-set runs under the lock, so of two
        racing joiners exactly one gets JOINED and the other ROOM_FULL.
        """
        with self._exclusive():
            room = self._rooms.get(room_id)
            if room is None:
                return JoinOutcome(JoinStatus.ROOM_NOT_FOUND)
            if joiner_id == room.creator_id:
                return JoinOutcome(JoinStatus.SELF_JOIN_REJECTED, room)
            if room.state is not RoomState.OPEN:
                return JoinOutcome(JoinStatus.ROOM_FULL, room)
            room = replace(
                room, opponent_id=joiner_id, state=RoomState.FULL, version=room.version + 1
            )
            self._rooms[room_id] = room
        logger.info(f"[room-join] room={room_id} opponent={joiner_id}")
        return JoinOutcome(JoinStatus.JOINED, room)

    def remove_connection(self, connection_id: str) -> List[Room]:
        """Drop every room the connection created or joined."""
        with self._exclusive():
            gone = [r for r in self._rooms.values() if connection_id in r.participants]
            for room in gone:
                del self._rooms[room.room_id]
        for room in gone:
            logger.info(f"[room-teardown] room={room.room_id} connection={connection_id}")
        return gone

    def expire_open_rooms(self, max_age: float, now: Optional[float] = None) -> List[Room]:
        """Drop open rooms that have waited longer than ``max_age`` seconds."""
        now = time.time() if now is None else now
        with self._exclusive():
            stale = [
                r for r in self._rooms.values()
                if r.state is RoomState.OPEN and now - r.created_at > max_age
            ]
            for room in stale:
                del self._rooms[room.room_id]
        for room in stale:
            logger.info(f"[room-expire] room={room.room_id} age={now - room.created_at:.1f}s")
        return stale

    def open_rooms(self) -> List[Room]:
        with self._exclusive():
            rooms = [r for r in self._rooms.values() if r.state is RoomState.OPEN]
        return sorted(rooms, key=lambda r: r.created_at)

    def __len__(self):
        with self._exclusive():
            return len(self._rooms)

    def __contains__(self, room_id):
        with self._exclusive():
            return room_id in self._rooms
