from flask import current_app, request
from blackjack import socketio
from blackjack import events
from blackjack.exceptions import InvalidPayload


def _coordinator():
    return current_app.extensions['lifecycle']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _coordinator().handle(_get_sid(), events.Connect(auth=auth))


def handle_disconnect(reason=None):
    _coordinator().handle(_get_sid(), events.Disconnect(reason=str(reason) if reason else None))


def handle_message(data):
    _coordinator().handle(_get_sid(), events.parse_message(data))


def handle_create_room(data):
    try:
        event = events.parse_create_room(data)
    except InvalidPayload as exc:
        _coordinator().reject(_get_sid(), events.CREATE_ERROR, str(exc))
        return
    _coordinator().handle(_get_sid(), event)


def handle_join_room(data):
    try:
        event = events.parse_join_room(data)
    except InvalidPayload as exc:
        _coordinator().reject(_get_sid(), events.JOIN_ERROR, str(exc))
        return
    _coordinator().handle(_get_sid(), event)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    socketio.on_event(events.CREATE_ROOM, handle_create_room, namespace=namespace)
    socketio.on_event(events.JOIN_ROOM, handle_join_room, namespace=namespace)
