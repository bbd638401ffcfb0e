import logging

from blackjack import create_app, socketio
from config import Config

logging.basicConfig(level=Config.LOG_LEVEL)
app = create_app()

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], debug=True)
