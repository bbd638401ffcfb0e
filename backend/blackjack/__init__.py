from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(config):
    raw = config.get('CORS_ALLOWED_ORIGINS', '*')
    if raw == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config)

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per application, handed to the handlers through app.extensions
    from blackjack.services.registry import RoomRegistry
    from blackjack.services.dispatcher import BroadcastDispatcher
    from blackjack.services.lifecycle import LifecycleCoordinator

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    registry = RoomRegistry.from_config(flask_app.config)
    dispatcher = BroadcastDispatcher(socketio, namespace=namespace)
    flask_app.extensions['lifecycle'] = LifecycleCoordinator(
        registry,
        dispatcher,
        room_ttl=int(flask_app.config.get('ROOM_TTL_SEC', 0)),
    )

    from blackjack.main import main
    flask_app.register_blueprint(main)

    from blackjack.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    flask_app.logger.info(f"[startup] namespace={namespace} origins={allowed_origins}")
    return flask_app
