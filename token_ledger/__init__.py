"""
token_ledger — a fungible-token ledger library.

Balances, delegated allowances and the operations that move value between
holders (`transfer`, `approve`, `transfer_from`), with U256-checked arithmetic
and pluggable notification sinks.

Quick start:
    >>> from token_ledger import TokenLedger, InMemoryEventSink, parse_units
    >>> sink = InMemoryEventSink()
    >>> alice, bob = b"\\xaa" * 20, b"\\xbb" * 20
    >>> t = TokenLedger("Dapp University", "DAPP", parse_units(1_000_000), alice, sink=sink)
    >>> t.transfer(alice, bob, parse_units(100))
    True
    >>> t.balance_of(bob) == parse_units(100)
    True
"""

from .address import ADDRESS_LEN, NULL_ADDRESS, to_address, to_hex
from .errors import (ArithmeticOverflow, ArithmeticUnderflow,
                     InsufficientAllowance, InsufficientBalance,
                     InvalidAddress, InvalidAmount, InvalidMetadata,
                     InvalidRecipient, InvalidSpender, InvariantViolation,
                     LedgerError, Rejection, error_to_result)
from .events import (Approval, CallbackEventSink, EventSink,
                     InMemoryEventSink, JsonlEventSink, NullEventSink,
                     Transfer)
from .ledger import DECIMALS, TokenLedger
from .uint import U256_MAX
from .units import format_units, parse_units
from .version import __version__

__all__ = [
    "__version__",
    # ledger
    "TokenLedger",
    "DECIMALS",
    # addresses & amounts
    "ADDRESS_LEN",
    "NULL_ADDRESS",
    "to_address",
    "to_hex",
    "U256_MAX",
    "parse_units",
    "format_units",
    # events
    "Transfer",
    "Approval",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "CallbackEventSink",
    "NullEventSink",
    # errors
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
