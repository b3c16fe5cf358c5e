"""
Error taxonomy of the ShopScript client.

Every failure that crosses the request pipeline is described by one
ErrorRecord. Callers receive it wrapped in a ShopScriptError and branch on
`error.kind` instead of on exception subclasses:

    try:
        await cart_service.add_to_cart(product_id=123, quantity=2)
    except ShopScriptError as e:
        if e.kind is ErrorKind.VALIDATION:
            show_field_errors(e.field_errors)
        elif e.kind is ErrorKind.SESSION_EXPIRED:
            go_to_login()
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    SESSION_EXPIRED = "session_expired"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    UNKNOWN = "unknown"


# Default machine codes per kind, kept stable for UI copy lookup.
DEFAULT_CODES = {
    ErrorKind.NETWORK: "network_error",
    ErrorKind.AUTHENTICATION: "auth_error",
    ErrorKind.SESSION_EXPIRED: "session_expired",
    ErrorKind.VALIDATION: "validation_error",
    ErrorKind.NOT_FOUND: "not_found",
    ErrorKind.RATE_LIMITED: "rate_limit",
    ErrorKind.SERVER: "server_error",
    ErrorKind.UNKNOWN: "unknown_error",
}

SESSION_EXPIRED_MESSAGE = "Session has expired. Please login again."


class ErrorRecord(BaseModel):
    """Structured description of one failed pipeline call."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    http_status: Optional[int] = None
    retry_after_seconds: Optional[int] = None
    field_errors: Optional[Dict[str, List[str]]] = None
    code: Optional[str] = Field(default=None, description="Machine-readable code, e.g. product_not_found")

    @property
    def error_code(self) -> str:
        return self.code or DEFAULT_CODES[self.kind]

    @classmethod
    def session_expired(cls) -> "ErrorRecord":
        return cls(kind=ErrorKind.SESSION_EXPIRED, message=SESSION_EXPIRED_MESSAGE, http_status=401)

    def specialize(self, code: str, message: Optional[str] = None) -> "ErrorRecord":
        """Copy of this record with a domain-specific code (and message)."""
        update = {"code": code}
        if message is not None:
            update["message"] = message
        return self.model_copy(update=update)


class ShopScriptError(Exception):
    """The single exception type raised by the pipeline, endpoints and services."""

    def __init__(self, record: ErrorRecord):
        self.record = record
        super().__init__(record.message)

    @property
    def kind(self) -> ErrorKind:
        return self.record.kind

    @property
    def message(self) -> str:
        return self.record.message

    @property
    def http_status(self) -> Optional[int]:
        return self.record.http_status

    @property
    def retry_after_seconds(self) -> Optional[int]:
        return self.record.retry_after_seconds

    @property
    def field_errors(self) -> Optional[Dict[str, List[str]]]:
        return self.record.field_errors

    @property
    def code(self) -> str:
        return self.record.error_code

    def __str__(self) -> str:
        parts = [f"ShopScriptError[{self.kind.value}]: {self.message}"]
        if self.record.code:
            parts.append(f"Code: {self.record.code}")
        if self.http_status:
            parts.append(f"HTTP {self.http_status}")
        return " | ".join(parts)
