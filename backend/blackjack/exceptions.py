"""Exceptions raised by the room services.

Join rejections (full room, unknown room, self join) are not exceptions:
they come back as ``JoinOutcome`` values from the registry.
"""


class RoomError(Exception):
    """Base class for room service errors."""
    pass


class RegistryBusy(RoomError):
    """The registry lock could not be acquired after every retry."""
    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"Room registry busy after {attempts} attempts")


class InvalidPayload(RoomError):
    """An inbound event carried data of the wrong shape."""
    pass
