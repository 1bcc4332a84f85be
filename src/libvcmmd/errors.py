"""
VCMMD error codes.

Errors come from two disjoint bands:
- Service errors (1, 2, ...): rejections reported by the VCMMD daemon
- Library errors (1000, 1001, ...): failures detected locally, before or
  instead of talking to the daemon

Both bands can grow upward without renumbering existing codes. Every code,
known or not, can be rendered with strerror().
"""

from enum import IntEnum

SUCCESS = 0


class ServiceError(IntEnum):
    """Errors returned by the VCMMD service."""

    INVALID_VE_NAME = 1
    INVALID_VE_TYPE = 2
    INVALID_VE_CONFIG = 3
    VE_NAME_ALREADY_IN_USE = 4
    VE_NOT_REGISTERED = 5
    VE_ALREADY_ACTIVE = 6
    VE_OPERATION_FAILED = 7
    NO_SPACE = 8
    VE_NOT_ACTIVE = 9
    TOO_MANY_REQUESTS = 10


class LibraryError(IntEnum):
    """Errors detected by this library."""

    NO_MEMORY = 1000
    CONNECTION_FAILED = 1001


_SERVICE_MESSAGES = {
    ServiceError.INVALID_VE_NAME: "Invalid VE name",
    ServiceError.INVALID_VE_TYPE: "Invalid VE type",
    ServiceError.INVALID_VE_CONFIG: "Conflicting VE config parameters",
    ServiceError.VE_NAME_ALREADY_IN_USE: "VE name already in use",
    ServiceError.VE_NOT_REGISTERED: "VE not registered",
    ServiceError.VE_ALREADY_ACTIVE: "VE already active",
    ServiceError.VE_OPERATION_FAILED: "VE operation failed",
    ServiceError.NO_SPACE: "Unable to meet VE requirements",
    ServiceError.VE_NOT_ACTIVE: "VE not active",
    ServiceError.TOO_MANY_REQUESTS: "Too many requests, try again later",
}

_LIBRARY_MESSAGES = {
    LibraryError.NO_MEMORY: "Failed to allocate memory",
    LibraryError.CONNECTION_FAILED: "Failed to connect to VCMMD service",
}

_SUCCESS_MESSAGE = "Success"
_UNKNOWN_MESSAGE = "Unknown error"


def classify(code: int) -> ServiceError | LibraryError | None:
    """
    Map a raw error code to its band.

    Returns:
        The ServiceError or LibraryError member for `code`, or None for
        success and for codes outside both bands.
    """
    for band in (ServiceError, LibraryError):
        try:
            return band(code)
        except (ValueError, TypeError):
            continue
    return None


def strerror(code: int) -> str:
    """
    Return a human-readable description of an error code.

    This never fails: 0 is reported as success and anything not in either
    band as an unknown error.
    """
    if code == SUCCESS:
        return _SUCCESS_MESSAGE

    kind = classify(code)
    if isinstance(kind, ServiceError):
        return _SERVICE_MESSAGES[kind]
    if isinstance(kind, LibraryError):
        return _LIBRARY_MESSAGES[kind]
    return _UNKNOWN_MESSAGE


class VCMMDError(Exception):
    """
    Exception carrying a VCMMD error code.

    The library's operations report their outcome as an integer code. Callers
    that would rather deal with exceptions can pass the code to check().

    Attributes:
        code: The raw error code
        kind: The ServiceError/LibraryError member, or None if unknown
    """

    def __init__(self, code: int):
        self.code = code
        self.kind = classify(code)
        super().__init__(f"{strerror(code)} (error {code})")


def check(code: int) -> None:
    """
    Raise VCMMDError if `code` is not a success code.

    Usage:
        check(register_ve("ct1", VEType.CT, config))
    """
    if code != SUCCESS:
        raise VCMMDError(code)
