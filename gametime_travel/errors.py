"""Error codes and exceptions for travel planning."""

from enum import Enum


class ErrorCode(Enum):
    """Reasons a plan or lookup could not be produced."""

    VENUE_NOT_FOUND = "VENUE_NOT_FOUND"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    ROUTING_UNAVAILABLE = "ROUTING_UNAVAILABLE"
    INCOMPLETE_INPUT = "INCOMPLETE_INPUT"

    # Routing provider failure modes
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    BAD_RESPONSE = "BAD_RESPONSE"


class TravelError(Exception):
    """Base error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class StoreUnavailableError(TravelError):
    """Raised when the venue store cannot be read and nothing is cached."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Venue resolution is temporarily unavailable",
        )
        self.detail = detail


class RoutingError(TravelError):
    """Raised by the routing client for network, address or quota failures."""

    def __init__(self, code: ErrorCode, message: str, status_code=None) -> None:
        super().__init__(code=code, message=message)
        self.status_code = status_code


class IncompleteInputError(TravelError):
    """Raised when required request or preference fields are missing."""

    def __init__(self, problems) -> None:
        if isinstance(problems, str):
            problems = [problems]
        super().__init__(
            code=ErrorCode.INCOMPLETE_INPUT,
            message="; ".join(problems),
        )
        self.problems = list(problems)
