"""Request-terminating errors and the HTTP status each one maps to."""

from __future__ import annotations


class GatewayError(Exception):
    """Base error: carries the HTTP status and the message sent to the caller."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = str(message)


class ClientRequestError(GatewayError):
    """Malformed POST body or empty command."""

    status = 400


class CommandForbidden(GatewayError):
    """Command is not in the whitelist."""

    status = 403

    def __init__(self, message: str = "command not allowed."):
        super().__init__(message)


class ExecutionError(GatewayError):
    """Process failed to start or exited abnormally."""

    status = 500
