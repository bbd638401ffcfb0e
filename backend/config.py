import os


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    HOST = os.environ.get('HOST', '127.0.0.1')
    PORT = int(os.environ.get('PORT', '9000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Fixed seed makes every deal reproducible; unset uses OS entropy
    DEAL_SEED = _optional_int('DEAL_SEED')
    # Open rooms older than this are swept on the next create (sec). 0 disables.
    ROOM_TTL_SEC = int(os.environ.get('ROOM_TTL_SEC', '0'))
    # Registry lock contention handling
    REGISTRY_LOCK_TIMEOUT_SEC = float(os.environ.get('REGISTRY_LOCK_TIMEOUT_SEC', '0.5'))
    REGISTRY_LOCK_RETRIES = int(os.environ.get('REGISTRY_LOCK_RETRIES', '3'))
