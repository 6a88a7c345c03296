# util/errors.py


class RemoteServiceError(Exception):
    """The identity service call failed (transport, status or payload)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InfrastructureError(Exception):
    """The token store could not be reached. Not recoverable inside a call."""
