"""Error codes and the structured result returned by every user-facing operation.

Failures are preconditions the user can fix (wrong password, not enough
funds), so they are reported as data rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    DUPLICATE_USERNAME = "duplicate_username"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_LOGGED_IN = "not_logged_in"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    SELF_TRANSFER = "self_transfer"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_AMOUNT = "invalid_amount"


_MESSAGES = {
    ErrorCode.DUPLICATE_USERNAME: "Username already taken",
    ErrorCode.INVALID_CREDENTIALS: "Invalid credentials",
    ErrorCode.NOT_LOGGED_IN: "Not logged in",
    ErrorCode.ACCOUNT_NOT_FOUND: "User not found",
    ErrorCode.INSUFFICIENT_FUNDS: "Insufficient funds",
    ErrorCode.RECIPIENT_NOT_FOUND: "Recipient not found",
    ErrorCode.SELF_TRANSFER: "Cannot transfer to yourself",
    ErrorCode.INVALID_QUANTITY: "Quantity must be a positive whole number",
    ErrorCode.INVALID_AMOUNT: "Amount must be a non-negative number",
}


def message_for(code: ErrorCode) -> str:
    return _MESSAGES[code]


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a ledger or cart operation.

    ``value`` carries the operation's payload on success (an Account, a new
    balance, a cart summary). A failed result may still carry a value when
    the caller needs it to re-render, e.g. the unchanged cart after an
    invalid quantity.
    """

    success: bool
    value: Any = None
    code: ErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls, value: Any = None) -> OperationResult:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, code: ErrorCode, value: Any = None) -> OperationResult:
        return cls(success=False, value=value, code=code, message=message_for(code))

    def to_dict(self) -> dict[str, Any]:
        """Render in the ``{"success": ..., "error": ...}`` shape the views consume."""
        if self.success:
            return {"success": True, "value": _plain(self.value)}
        result: dict[str, Any] = {
            "success": False,
            "code": self.code.value if self.code else None,
            "error": self.message,
        }
        if self.value is not None:
            result["value"] = _plain(self.value)
        return result


def _plain(value: Any) -> Any:
    # Accounts expose a credential-free view; prefer it over the stored form.
    for attr in ("to_public_dict", "to_dict"):
        render = getattr(value, attr, None)
        if callable(render):
            return render()
    if isinstance(value, Decimal):
        return str(value)
    return value
