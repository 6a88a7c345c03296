# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class FlowType(str, Enum):
    register = "register"
    restore = "restore"
    reset = "reset"


class FailureKind(str, Enum):
    """Expected handshake failures, reported in result bodies rather than raised."""

    INVALID_INPUT = "invalid-input"
    NOT_PENDING = "not-pending"
    NOT_READY = "not-ready"
    ALREADY_CONSUMED = "already-consumed"
    REMOTE_SERVICE = "remote-service"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    INVALID_INPUT = ErrorInfo("Invalid input", 422)
    NOT_PENDING = ErrorInfo("No pending value", status.HTTP_409_CONFLICT)
    NOT_READY = ErrorInfo("Not found", status.HTTP_404_NOT_FOUND)
    ALREADY_CONSUMED = ErrorInfo("Already consumed", status.HTTP_409_CONFLICT)
    REMOTE_SERVICE = ErrorInfo("Identity service error", status.HTTP_502_BAD_GATEWAY)
    STORE_UNAVAILABLE = ErrorInfo(
        "Token store unavailable", status.HTTP_503_SERVICE_UNAVAILABLE
    )

    @classmethod
    def for_failure(cls, kind: FailureKind) -> ErrorInfo:
        return cls[kind.name].value
