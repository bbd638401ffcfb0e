"""Room services: dealing, the room registry, broadcast and lifecycle.

Everything here is transport-agnostic; Socket.IO handlers and HTTP routes
call into these services, and only the dispatcher touches the SocketIO
instance it is given.
"""
