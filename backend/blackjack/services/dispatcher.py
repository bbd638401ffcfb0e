import logging
import threading
from typing import Dict, List

logger = logging.getLogger(__name__)


class BroadcastDispatcher:
    """Fans events out to the connections in a room's Socket.IO room.

    Membership lives in the Socket.IO server's rooms, so a connection that
    goes away drops out of every room on its own. Delivery is per
    connection and best-effort: a failed emit is logged and the rest of the
    group still gets the event. Deliveries for the same room go out one
    call at a time, in the order they were issued, and a room state
    snapshot never reaches a member that has already seen a newer one.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self._socketio = socketio
        self._namespace = namespace
        self._lock = threading.Lock()
        self._room_locks: Dict[str, threading.Lock] = {}
        # room_id -> connection_id -> last snapshot version delivered
        self._seen: Dict[str, Dict[str, int]] = {}

    def add_member(self, room_id: str, connection_id: str) -> None:
        with self._lock:
            self._room_locks.setdefault(room_id, threading.Lock())
            self._seen.setdefault(room_id, {})
        self._socketio.server.enter_room(connection_id, room_id, namespace=self._namespace)

    def members(self, room_id: str) -> List[str]:
        participants = self._socketio.server.manager.get_participants(self._namespace, room_id)
        try:
            return [sid for sid, _ in participants]
        except KeyError:
            return []

    def close_group(self, room_id: str, exclude=()) -> List[str]:
        """Close the room's Socket.IO room; returns the members it had."""
        members = [cid for cid in self.members(room_id) if cid not in exclude]
        self._socketio.close_room(room_id, namespace=self._namespace)
        with self._lock:
            self._room_locks.pop(room_id, None)
            self._seen.pop(room_id, None)
        return members

    def send(self, connection_id: str, event: str, payload) -> bool:
        try:
            self._socketio.emit(event, payload, to=connection_id, namespace=self._namespace)
        except Exception as exc:
            logger.warning(f"[emit-failed] event={event} to={connection_id}: {exc}")
            return False
        return True

    def _room_lock(self, room_id: str):
        with self._lock:
            return self._room_locks.get(room_id)

    def notify(self, room_id: str, event: str, payload) -> int:
        """Send ``payload`` to every member of the room; returns deliveries."""
        room_lock = self._room_lock(room_id)
        if room_lock is None:
            logger.debug(f"[broadcast-skip] room={room_id} event={event} group closed")
            return 0
        with room_lock:
            targets = self.members(room_id)
            delivered = sum(1 for cid in targets if self.send(cid, event, payload))
        logger.debug(f"[broadcast] room={room_id} event={event} delivered={delivered}/{len(targets)}")
        return delivered

    def notify_state(self, room, event: str) -> int:
        """Send a room snapshot to each member that has not seen a newer one."""
        room_lock = self._room_lock(room.room_id)
        if room_lock is None:
            return 0
        payload = room.to_dict()
        delivered = 0
        with room_lock:
            seen = self._seen.setdefault(room.room_id, {})
            for cid in self.members(room.room_id):
                if seen.get(cid, 0) >= room.version:
                    logger.debug(f"[broadcast-stale] room={room.room_id} to={cid} version={room.version}")
                    continue
                if self.send(cid, event, payload):
                    seen[cid] = room.version
                    delivered += 1
        return delivered
