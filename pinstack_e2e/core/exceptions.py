# exceptions.py
# Description: Typed error taxonomy for gateway, configuration and polling failures
#
# Imports
from enum import Enum
from typing import Any, Dict, Optional

#######################################################################################################################
#
# Error Kinds

class ErrorKind(str, Enum):
    """Classified reason for a failed gateway call."""

    # Auth
    UNAUTHENTICATED = "unauthenticated"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"

    # Users
    USER_NOT_FOUND = "user_not_found"
    USERNAME_EXISTS = "username_exists"
    EMAIL_EXISTS = "email_exists"
    USER_EXISTS = "user_exists"

    # Posts
    POST_NOT_FOUND = "post_not_found"

    # Relations
    SELF_FOLLOW = "self_follow"
    SELF_UNFOLLOW = "self_unfollow"
    ALREADY_FOLLOWING = "already_following"
    FOLLOW_NOT_FOUND = "follow_not_found"

    # Notifications
    NOTIFICATION_NOT_FOUND = "notification_not_found"
    NOTIFICATION_ACCESS_DENIED = "notification_access_denied"

    # Status-code fallbacks
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"

    # Client-side transport failures
    INVALID_URL = "invalid_url"
    REQUEST_ENCODE = "request_encode"
    REQUEST_FAILED = "request_failed"
    RESPONSE_DECODE = "response_decode"


# Messages the gateway returns in the ``message`` field of an error body.
MESSAGE_KINDS: Dict[str, ErrorKind] = {
    "unauthenticated": ErrorKind.UNAUTHENTICATED,
    "invalid token": ErrorKind.INVALID_TOKEN,
    "token expired": ErrorKind.TOKEN_EXPIRED,
    "invalid credentials": ErrorKind.INVALID_CREDENTIALS,
    "invalid refresh token": ErrorKind.INVALID_REFRESH_TOKEN,
    "forbidden": ErrorKind.FORBIDDEN,
    "insufficient rights": ErrorKind.FORBIDDEN,
    "operation not allowed": ErrorKind.FORBIDDEN,
    "validation failed": ErrorKind.VALIDATION_FAILED,
    "invalid input": ErrorKind.VALIDATION_FAILED,
    "required field is missing": ErrorKind.VALIDATION_FAILED,
    "post validation failed": ErrorKind.VALIDATION_FAILED,
    "invalid notification type": ErrorKind.VALIDATION_FAILED,
    "invalid notification payload": ErrorKind.VALIDATION_FAILED,
    "user not found": ErrorKind.USER_NOT_FOUND,
    "username already exists": ErrorKind.USERNAME_EXISTS,
    "email already exists": ErrorKind.EMAIL_EXISTS,
    "user already exists": ErrorKind.USER_EXISTS,
    "post not found": ErrorKind.POST_NOT_FOUND,
    "cannot follow yourself": ErrorKind.SELF_FOLLOW,
    "cannot unfollow yourself": ErrorKind.SELF_UNFOLLOW,
    "already following this user": ErrorKind.ALREADY_FOLLOWING,
    "follow relation already exists": ErrorKind.ALREADY_FOLLOWING,
    "follow relation not found": ErrorKind.FOLLOW_NOT_FOUND,
    "notification not found": ErrorKind.NOTIFICATION_NOT_FOUND,
    "access to notification denied": ErrorKind.NOTIFICATION_ACCESS_DENIED,
    "rate limit exceeded": ErrorKind.RATE_LIMITED,
    "too many requests": ErrorKind.RATE_LIMITED,
}

STATUS_KINDS: Dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION_FAILED,
    401: ErrorKind.UNAUTHENTICATED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION_FAILED,
    429: ErrorKind.RATE_LIMITED,
}

_PHRASES_LONGEST_FIRST = sorted(MESSAGE_KINDS, key=len, reverse=True)

TRANSIENT_KINDS = frozenset({
    ErrorKind.REQUEST_FAILED,
    ErrorKind.RATE_LIMITED,
    ErrorKind.SERVER_ERROR,
})


def classify(status_code: Optional[int], message: Optional[str]) -> ErrorKind:
    """Map a gateway error response to an ErrorKind.

    The server message wins when it is one we know, either exactly or as part
    of a longer message (the longest known phrase wins). Otherwise the status
    code decides. Unknown 4xx responses classify as UNKNOWN.
    """
    normalized = (message or "").strip().lower()
    if normalized in MESSAGE_KINDS:
        return MESSAGE_KINDS[normalized]
    for phrase in _PHRASES_LONGEST_FIRST:
        if phrase in normalized:
            return MESSAGE_KINDS[phrase]
    if status_code is None:
        return ErrorKind.UNKNOWN
    if status_code >= 500:
        return ErrorKind.SERVER_ERROR
    return STATUS_KINDS.get(status_code, ErrorKind.UNKNOWN)


#######################################################################################################################
#
# Base Exceptions

class PinstackE2EError(Exception):
    """Base exception for the harness"""
    pass


class ConfigurationError(PinstackE2EError):
    """Configuration file could not be read or validated"""
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


#######################################################################################################################
#
# Gateway Exceptions

class GatewayError(PinstackE2EError):
    """A gateway call failed, either remotely or before reaching the server"""

    def __init__(self, kind: ErrorKind, message: str, *, path: Optional[str] = None):
        self.kind = kind
        self.message = message
        self.path = path
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        return self.kind in TRANSIENT_KINDS

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r}, path={self.path!r})"


class ApiError(GatewayError):
    """The gateway answered with a non-2xx status"""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        path: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
        body: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.body = body or {}
        super().__init__(kind or classify(status_code, message), message, path=path)

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


class TransportError(GatewayError):
    """Request never produced a usable response"""
    pass


#######################################################################################################################
#
# Polling

class PollTimeoutError(AssertionError):
    """An eventually-consistent condition did not hold within its time budget"""

    def __init__(self, description: str, attempts: int, elapsed: float, last_value: Any = None):
        self.description = description
        self.attempts = attempts
        self.elapsed = elapsed
        self.last_value = last_value
        super().__init__(
            f"{description or 'condition'} not met after {attempts} attempts in {elapsed:.2f}s. "
            f"Last value: {last_value!r}"
        )

#
# End of exceptions.py
#######################################################################################################################
