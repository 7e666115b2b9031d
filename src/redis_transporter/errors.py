"""Transporter exception hierarchy.

None of these escape ``send()``: the dispatcher turns them into
error responses. The connection manager and disconnector log them.
"""


class TransporterError(Exception):
    """Base class for all transporter errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreConnectionError(TransporterError):
    """Redis endpoint unreachable or credentials rejected at connect time."""


class NoConnectionError(TransporterError):
    """Dispatch attempted without a live client."""

    def __init__(self, message: str = "no connection"):
        super().__init__(message)


class InvalidActionError(TransporterError):
    """Action type the transporter does not serve."""

    def __init__(self, action_type: str):
        super().__init__(f"unsupported action type: {action_type}")
        self.action_type = action_type


class InvalidPayloadError(TransporterError):
    """Payload carries neither ``id`` nor ``pattern``, or is malformed."""


class ShutdownError(TransporterError):
    """Graceful client teardown failed. Always swallowed."""


class CodecError(TransporterError):
    """Record value could not be encoded for storage."""
