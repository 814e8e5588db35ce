"""Error taxonomy and the result envelope used at the HTTP boundary."""

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Generic, TypeVar

T = TypeVar("T")

TRANSPORT_STATUS = -1

_MAX_TEXT_MESSAGE = 300


class ErrorKind(StrEnum):
    """Closed classification of backend and transport failures."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    OTHER = "other"


_STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
}


def kind_for_status(status: int) -> ErrorKind:
    """Classify an HTTP status code."""
    if status in _STATUS_KINDS:
        return _STATUS_KINDS[status]
    if status >= 500:  # noqa: PLR2004
        return ErrorKind.SERVER
    return ErrorKind.OTHER


@dataclass(frozen=True)
class BackendError:
    """Normalized failure of a backend call."""

    status: int
    message: str
    kind: ErrorKind

    @property
    def is_transport(self) -> bool:
        return self.status == TRANSPORT_STATUS

    @classmethod
    def network(cls, detail: str | None = None) -> "BackendError":
        """Build the error for an unreachable backend."""
        message = "Network unreachable"
        if detail:
            message = f"{message}: {detail}"
        return cls(status=TRANSPORT_STATUS, message=message, kind=ErrorKind.NETWORK)

    @classmethod
    def timeout(cls) -> "BackendError":
        """Build the error for a request that exceeded its timeout."""
        return cls(
            status=TRANSPORT_STATUS,
            message="Request timed out",
            kind=ErrorKind.TIMEOUT,
        )

    @classmethod
    def from_response(cls, status: int, body: object) -> "BackendError":
        """Normalize any backend error payload into a single message."""
        message = _extract_message(body) or f"Request failed with status {status}"
        return cls(status=status, message=message, kind=kind_for_status(status))


def _extract_message(body: object) -> str | None:
    if isinstance(body, str):
        text = body.strip()
        return text[:_MAX_TEXT_MESSAGE] or None
    if isinstance(body, list):
        parts = [_extract_message(entry) for entry in body]
        joined = "; ".join(part for part in parts if part)
        return joined or None
    if isinstance(body, dict):
        for key in ("detail", "message", "msg", "error"):
            if key in body:
                message = _extract_message(body[key])
                if message:
                    return message
    return None


@dataclass(frozen=True)
class ApiOk(Generic[T]):
    """Successful backend response."""

    data: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class ApiFailure:
    """Failed backend response."""

    error: BackendError
    ok: ClassVar[bool] = False

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message


ApiResult = ApiOk[T] | ApiFailure


class PantryClientError(Exception):
    """Base class for expected client failures."""


class ValidationError(PantryClientError):
    """Caller-supplied input failed a precondition."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotAuthenticatedError(PantryClientError):
    """An authenticated call was attempted without a session."""

    def __init__(self, message: str = "Not authenticated: missing access token"):
        super().__init__(message)


class AuthRequestError(PantryClientError):
    """An auth endpoint refused the request."""

    def __init__(self, error: BackendError) -> None:
        super().__init__(f"{error.message} (status {error.status})")
        self.error = error

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message


class IdentityBootstrapError(AuthRequestError):
    """Provisioning or authenticating an identity assertion failed."""

    def __init__(self, error: BackendError, stage: str) -> None:
        super().__init__(error)
        self.stage = stage


class UpstreamError(PantryClientError):
    """A pantry endpoint refused the request."""

    def __init__(self, error: BackendError) -> None:
        super().__init__(f"{error.message} (status {error.status})")
        self.error = error

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message
