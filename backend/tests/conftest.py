import os
import sys
import pytest

# Ensure the backend root (containing the `blackjack` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from blackjack import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    DEAL_SEED = 1234
    ROOM_TTL_SEC = 0
    REGISTRY_LOCK_TIMEOUT_SEC = 0.5
    REGISTRY_LOCK_RETRIES = 3


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def lifecycle(flask_app):
    return flask_app.extensions['lifecycle']


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for extra Socket.IO clients; all are disconnected on teardown."""
    created = []

    def _make(**kwargs):
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/',
            **kwargs
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/'):
                test_client.disconnect(namespace='/')
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


class FakeSocketIO:
    """Records emits and keeps Socket.IO rooms the way the server does.

    Doubles as its own ``server`` and ``server.manager``. Connection ids
    listed in ``failing`` raise on delivery; ``on_emit`` runs after each
    recorded emit.
    """

    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)
        self.rooms = {}
        self.on_emit = None
        self.server = self
        self.manager = self

    def emit(self, event, payload, to=None, namespace=None):
        if to in self.failing:
            raise ConnectionError(f"socket {to} is gone")
        self.sent.append((to, event, payload))
        if self.on_emit is not None:
            self.on_emit(to, event, payload)

    def enter_room(self, sid, room, namespace=None):
        members = self.rooms.setdefault(room, [])
        if sid not in members:
            members.append(sid)

    def get_participants(self, namespace, room):
        for sid in list(self.rooms.get(room, [])):
            yield sid, f"eio-{sid}"

    def close_room(self, room, namespace=None):
        self.rooms.pop(room, None)

    def events_for(self, connection_id):
        return [(event, payload) for to, event, payload in self.sent if to == connection_id]


@pytest.fixture()
def fake_socketio():
    return FakeSocketIO()


@pytest.fixture()
def fake_socketio_factory():
    return FakeSocketIO
