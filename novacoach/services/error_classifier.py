"""
Maps any generation failure to a ClassifiedError.
"""
from typing import Any, Mapping

from novacoach.core.errors import ClassifiedError, ErrorKind


# Evaluated in order, first match wins.
_RULES: list[tuple[ErrorKind, tuple[str, ...], frozenset[int]]] = [
    (ErrorKind.RESOURCE_NOT_FOUND, ("requested entity was not found",), frozenset({404})),
    (ErrorKind.CREDENTIAL_INVALID, ("api key not valid", "invalid api key", "incorrect api key"), frozenset({401})),
    (ErrorKind.QUOTA_EXCEEDED, ("quota", "exhausted", "limit"), frozenset({429})),
    (ErrorKind.BILLING_REQUIRED, ("billing", "payment"), frozenset()),
]


def _status_of(raw_error: Any) -> int | None:
    if isinstance(raw_error, Mapping):
        status = raw_error.get("status", raw_error.get("status_code"))
    else:
        status = getattr(raw_error, "status_code", None)
        if status is None:
            status = getattr(raw_error, "status", None)
        if status is None:
            response = getattr(raw_error, "response", None)
            status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _message_of(raw_error: Any) -> str:
    if isinstance(raw_error, Mapping):
        return str(raw_error.get("message") or "")
    if isinstance(raw_error, str):
        return raw_error
    message = getattr(raw_error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(raw_error)


def classify(raw_error: Any) -> ClassifiedError:
    """
    Classify a raw failure.

    Args:
        raw_error: An exception, a {"status", "message"} mapping, or a message string

    Returns:
        ClassifiedError (already-classified errors are returned unchanged)
    """
    if isinstance(raw_error, ClassifiedError):
        return raw_error

    status = _status_of(raw_error)
    message = _message_of(raw_error)
    lowered = message.lower()

    for kind, needles, statuses in _RULES:
        if status in statuses or any(needle in lowered for needle in needles):
            return ClassifiedError(kind, message, status=status)

    return ClassifiedError(ErrorKind.UNKNOWN, message, status=status)
