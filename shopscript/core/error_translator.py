"""
Maps transport failures onto the ErrorRecord taxonomy.

`translate_error` is a pure function: it keeps no state and identical
inputs always produce an equal ErrorRecord.
"""

from typing import Any, Dict, List, Mapping, Optional

from shopscript.core.errors import ErrorKind, ErrorRecord

GENERIC_MESSAGE = "An error occurred"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."

_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    404: ErrorKind.NOT_FOUND,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER,
    502: ErrorKind.SERVER,
    503: ErrorKind.SERVER,
}


def extract_message(body: Any, default: str = GENERIC_MESSAGE) -> str:
    """Read `message`, then `error`, from a JSON object body."""
    if isinstance(body, Mapping):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default


def parse_field_errors(body: Any) -> Optional[Dict[str, List[str]]]:
    """Parse a 422 body's `errors` map into field -> list of messages."""
    if not isinstance(body, Mapping):
        return None
    errors = body.get("errors")
    if not isinstance(errors, Mapping):
        return None

    parsed: Dict[str, List[str]] = {}
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            parsed[str(field)] = [str(m) for m in messages]
        elif messages is not None:
            parsed[str(field)] = [str(messages)]
    return parsed


def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    """Parse a delta-seconds `Retry-After` header; other forms yield None."""
    if not headers:
        return None

    raw = None
    for key, value in headers.items():
        if key.lower() == "retry-after":
            raw = value
            break
    if raw is None:
        return None

    try:
        seconds = int(str(raw).strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def translate_error(
    status_code: Optional[int],
    body: Any = None,
    headers: Optional[Mapping[str, str]] = None,
    transport_failed: bool = False,
    detail: Optional[str] = None
) -> ErrorRecord:
    """
    Translate one failed request into an ErrorRecord.

    Args:
        status_code: HTTP status of the response, None when no response arrived
        body: Decoded response body (dict for JSON, str otherwise)
        headers: Response headers
        transport_failed: True when the request never got a response
            (timeout, DNS failure, offline)
        detail: Transport-level description used for network messages

    Returns:
        ErrorRecord classified per status code
    """
    if transport_failed:
        message = f"Network error: {detail}" if detail else "Network error"
        return ErrorRecord(kind=ErrorKind.NETWORK, message=message)

    if status_code is None:
        return ErrorRecord(kind=ErrorKind.UNKNOWN, message=detail or GENERIC_MESSAGE)

    kind = _STATUS_KINDS.get(status_code, ErrorKind.UNKNOWN)

    if kind is ErrorKind.RATE_LIMITED:
        return ErrorRecord(
            kind=kind,
            message=extract_message(body, RATE_LIMIT_MESSAGE),
            http_status=status_code,
            retry_after_seconds=parse_retry_after(headers),
        )

    field_errors = parse_field_errors(body) if status_code == 422 else None

    return ErrorRecord(
        kind=kind,
        message=extract_message(body),
        http_status=status_code,
        field_errors=field_errors,
    )
