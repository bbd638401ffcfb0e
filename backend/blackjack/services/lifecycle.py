import logging

from blackjack import events
from blackjack.exceptions import RegistryBusy
from .registry import JoinStatus, RoomRegistry
from .dispatcher import BroadcastDispatcher

logger = logging.getLogger(__name__)

ROOM_NOT_FOUND_MESSAGE = 'Room not found'
# Full rooms and self joins are deliberately reported the same way
ROOM_UNAVAILABLE_MESSAGE = 'Room is full or you are the creator'
SERVER_BUSY_MESSAGE = 'Server busy, please retry'


class LifecycleCoordinator:
    """Runs the create/join/teardown protocols for rooms.

    Each protocol first commits its change through the registry, which
    takes and releases the registry lock internally, and only then hands
    the resulting snapshot to the dispatcher.
    """

    def __init__(self, registry: RoomRegistry, dispatcher: BroadcastDispatcher, room_ttl: float = 0):
        self.registry = registry
        self.dispatcher = dispatcher
        self.room_ttl = room_ttl

    def handle(self, connection_id: str, event: events.InboundEvent):
        if isinstance(event, events.CreateRoom):
            return self.on_create_room(connection_id, event.name)
        if isinstance(event, events.JoinRoom):
            return self.on_join_room(connection_id, event.room_id)
        if isinstance(event, events.Message):
            return self.on_message(connection_id, event.text)
        if isinstance(event, events.Disconnect):
            return self.on_disconnect(connection_id)
        if isinstance(event, events.Connect):
            logger.info(f"[connect] connection={connection_id} auth={event.auth!r}")
            return None
        raise TypeError(f"Unhandled inbound event: {event!r}")

    def on_create_room(self, creator_id: str, name: str):
        try:
            if self.room_ttl > 0:
                self._close_rooms(self.registry.expire_open_rooms(self.room_ttl))
            room = self.registry.create_room(creator_id, name)
        except RegistryBusy as exc:
            return self._busy(creator_id, exc)

        self.dispatcher.send(creator_id, events.ROOM_CREATED, room.room_id)
        current = self._enter_group(room, creator_id)
        if current is None:
            return room
        self._send_hand(room, creator_id)
        self.dispatcher.notify_state(current, events.ROOM_READY)
        return room

    def on_join_room(self, joiner_id: str, room_id: str):
        try:
            outcome = self.registry.try_join(room_id, joiner_id)
        except RegistryBusy as exc:
            return self._busy(joiner_id, exc)

        if outcome.status is JoinStatus.ROOM_NOT_FOUND:
            logger.info(f"[join-rejected] room={room_id} joiner={joiner_id} reason=not_found")
            self.dispatcher.send(joiner_id, events.JOIN_ERROR, ROOM_NOT_FOUND_MESSAGE)
            return outcome
        if not outcome.joined:
            logger.info(f"[join-rejected] room={room_id} joiner={joiner_id} reason={outcome.status.value}")
            self.dispatcher.send(joiner_id, events.JOIN_ERROR, ROOM_UNAVAILABLE_MESSAGE)
            return outcome

        room = outcome.room
        current = self._enter_group(room, joiner_id)
        if current is None:
            return outcome
        self._send_hand(room, joiner_id)
        self.dispatcher.notify(
            room.room_id, events.PLAYER_JOINED, f"Player {joiner_id} joined room {room.room_id}"
        )
        self.dispatcher.notify_state(current, events.ROOM_READY)
        return outcome

    def on_message(self, connection_id: str, text: str):
        self.dispatcher.send(connection_id, events.MESSAGE, text)
        return text

    def on_disconnect(self, connection_id: str):
        try:
            rooms = self.registry.remove_connection(connection_id)
        except RegistryBusy as exc:
            # Room stays registered until expiry sweeps it
            logger.warning(f"[teardown-deferred] connection={connection_id}: {exc}")
            rooms = []
        self._close_rooms(rooms, exclude=(connection_id,))
        return rooms

    def reject(self, connection_id: str, event_name: str, reason: str) -> None:
        logger.info(f"[invalid-payload] connection={connection_id} event={event_name} reason={reason}")
        self.dispatcher.send(connection_id, event_name, reason)

    def _enter_group(self, room, connection_id: str):
        """Add the connection to the room's group, then re-read the room.

        Returns the room as registered now, or None when it was torn down
        since ``room`` was committed; the group is then closed and the
        connection told so.
        """
        self.dispatcher.add_member(room.room_id, connection_id)
        try:
            current = self.registry.find_room(room.room_id)
        except RegistryBusy as exc:
            logger.warning(f"[registry-busy] connection={connection_id}: {exc}")
            return room
        if current is None:
            logger.info(f"[room-gone] room={room.room_id} connection={connection_id}")
            self._close_rooms([room])
        return current

    def _close_rooms(self, rooms, exclude=()) -> None:
        for room in rooms:
            for cid in self.dispatcher.close_group(room.room_id, exclude=exclude):
                self.dispatcher.send(cid, events.ROOM_CLOSED, room.room_id)

    def _send_hand(self, room, connection_id: str) -> None:
        hand = room.hand_for(connection_id)
        self.dispatcher.send(connection_id, events.HAND_DEALT, {'room_id': room.room_id, 'hand': list(hand)})

    def _busy(self, connection_id: str, exc: RegistryBusy):
        logger.warning(f"[registry-busy] connection={connection_id}: {exc}")
        self.dispatcher.send(connection_id, events.SERVER_BUSY, SERVER_BUSY_MESSAGE)
        return None
