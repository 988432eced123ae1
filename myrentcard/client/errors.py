"""
Exceptions raised by the MyRentCard client library.
"""


class ClientError(Exception):
    """Base class for client-side failures."""


class ApiError(ClientError):
    """The server answered with a non-2xx status. ``message`` is None when the body carried none."""

    def __init__(self, status_code, message, code=None):
        super().__init__(message or '')
        self.status_code = status_code
        self.message = message
        self.code = code


class NetworkError(ApiError):
    """The request never produced a response."""

    def __init__(self, message):
        super().__init__(None, message)


class FlowStateError(ClientError):
    """Input given to the verification flow in a state that accepts none."""
