"""Inbound Socket.IO events as a closed set of typed values.

Handlers turn raw Socket.IO data into one of these with the ``parse_*``
helpers, and the lifecycle coordinator matches on the type.
"""
from dataclasses import dataclass
from typing import Any, Optional, Union

from .exceptions import InvalidPayload

# Outbound event names
ROOM_CREATED = 'Room_Created'
ROOM_READY = 'Room_Ready'
HAND_DEALT = 'Hand_Dealt'
CREATE_ERROR = 'Create_Error'
PLAYER_JOINED = 'Player_Joined'
JOIN_ERROR = 'Join_Error'
ROOM_CLOSED = 'Room_Closed'
SERVER_BUSY = 'Server_Busy'
MESSAGE = 'message'

# Inbound event names
CREATE_ROOM = 'Create_Room'
JOIN_ROOM = 'Join_Room'


@dataclass(frozen=True)
class Connect:
    auth: Any = None


@dataclass(frozen=True)
class Disconnect:
    reason: Optional[str] = None


@dataclass(frozen=True)
class Message:
    text: str


@dataclass(frozen=True)
class CreateRoom:
    name: str


@dataclass(frozen=True)
class JoinRoom:
    room_id: str


InboundEvent = Union[Connect, Disconnect, Message, CreateRoom, JoinRoom]


def parse_create_room(data) -> CreateRoom:
    if isinstance(data, dict):
        data = data.get('name')
    if not isinstance(data, str) or not data.strip():
        raise InvalidPayload('Room name is required')
    return CreateRoom(name=data.strip())


def parse_join_room(data) -> JoinRoom:
    room_id = data.get('room_id') if isinstance(data, dict) else None
    if not isinstance(room_id, str) or not room_id:
        raise InvalidPayload('room_id is required')
    return JoinRoom(room_id=room_id)


def parse_message(data) -> Message:
    return Message(text=data if isinstance(data, str) else str(data))
