"""
token_ledger.errors — typed exceptions for the token ledger.

The ledger communicates every failure through a *typed exception* carrying a
stable machine code. Hosts that report results as data (RPC bridges, receipts)
can turn any of these into a JSON-safe payload with `to_dict()` or
`error_to_result()`.

Hierarchy
---------
LedgerError (base)
 ├─ Rejection               : operation refused; ledger state is untouched
 │   ├─ InvalidRecipient      : transfer target is the null identifier
 │   ├─ InvalidSpender        : approval target is the null identifier
 │   ├─ InsufficientBalance   : source balance below the requested amount
 │   └─ InsufficientAllowance : delegated allowance below the requested amount
 ├─ InvalidAddress          : identifier is not a well-formed account handle
 ├─ InvalidAmount           : amount is not an int in [0, 2**256-1]
 ├─ InvalidMetadata         : empty or non-string name/symbol
 ├─ ArithmeticOverflow      : checked add/mul exceeded the U256 envelope
 ├─ ArithmeticUnderflow     : checked subtract went below zero
 └─ InvariantViolation      : conservation or non-negativity does not hold

Notes
-----
* A `Rejection` is a caller error, not a ledger bug. Callers may retry with
  corrected inputs.
* `InvariantViolation` indicates a bug (or external tampering with ledger
  internals); it is only raised by explicit invariant checks.

This module imports nothing from the rest of the package so it can be used by
low-level helpers (address codec, uint math) without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'LEDGER/INVALID_RECIPIENT').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ledger error"
    code: str = "LEDGER/ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and result payloads."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _details(data: Optional[Dict[str, Any]], **fields: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (bytes, bytearray)):
            v = "0x" + bytes(v).hex()
        elif isinstance(v, int) and not isinstance(v, bool):
            # amounts routinely exceed 2**53; keep them exact in JSON
            v = str(v)
        d.setdefault(k, v)
    return d or None


class Rejection(LedgerError):
    """Base for precondition failures of transfer/approve/transfer_from."""


class InvalidRecipient(Rejection):
    """Recipient of a transfer (or the genesis holder) is the null identifier."""

    def __init__(
        self,
        message: str = "recipient is the null address",
        *,
        to: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="LEDGER/INVALID_RECIPIENT",
            data=_details(data, to=to),
        )


class InvalidSpender(Rejection):
    """Spender named in an approval is the null identifier."""

    def __init__(
        self,
        message: str = "spender is the null address",
        *,
        spender: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="LEDGER/INVALID_SPENDER",
            data=_details(data, spender=spender),
        )


class InsufficientBalance(Rejection):
    """
    Source account cannot cover the requested amount.

    Usage:
        raise InsufficientBalance(account=owner, balance=bal, requested=amount)
    """

    def __init__(
        self,
        message: str = "insufficient balance",
        *,
        account: Optional[bytes] = None,
        balance: Optional[int] = None,
        requested: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="LEDGER/INSUFFICIENT_BALANCE",
            data=_details(data, account=account, balance=balance, requested=requested),
        )


class InsufficientAllowance(Rejection):
    """Delegated allowance from owner to spender is below the requested amount."""

    def __init__(
        self,
        message: str = "insufficient allowance",
        *,
        owner: Optional[bytes] = None,
        spender: Optional[bytes] = None,
        allowance: Optional[int] = None,
        requested: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="LEDGER/INSUFFICIENT_ALLOWANCE",
            data=_details(
                data,
                owner=owner,
                spender=spender,
                allowance=allowance,
                requested=requested,
            ),
        )


class InvalidAddress(LedgerError):
    def __init__(self, message: str = "invalid address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LEDGER/INVALID_ADDRESS", data=data)


class InvalidAmount(LedgerError):
    def __init__(self, message: str = "invalid amount", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LEDGER/INVALID_AMOUNT", data=data)


class InvalidMetadata(LedgerError):
    def __init__(self, message: str = "invalid metadata", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LEDGER/INVALID_METADATA", data=data)


class ArithmeticOverflow(LedgerError):
    def __init__(self, message: str = "u256 overflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UINT/OVERFLOW", data=data)


class ArithmeticUnderflow(LedgerError):
    def __init__(self, message: str = "u256 underflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UINT/UNDERFLOW", data=data)


class InvariantViolation(LedgerError):
    """Conservation of supply or non-negativity failed an explicit check."""

    def __init__(self, message: str = "ledger invariant violated", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LEDGER/INVARIANT", data=data)


# -------- helper utilities --------------------------------------------------


def error_to_result(err: LedgerError) -> Dict[str, Any]:
    """
    Map a LedgerError to a result payload for hosts that return data instead
    of raising.

    Returns:
        {
          "ok":       False,
          "rejected": True if the operation was refused on a precondition,
          "error":    {code, message, data?}
        }
    """
    return {
        "ok": False,
        "rejected": isinstance(err, Rejection),
        "error": err.to_dict(),
    }


__all__ = [
    "LedgerError",
    "Rejection",
    "InvalidRecipient",
    "InvalidSpender",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidMetadata",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "InvariantViolation",
    "error_to_result",
]
