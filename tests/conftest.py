"""
Shared pytest fixtures:
- Stable, named accounts (deployer / receiver / exchange) as 20-byte addresses
- A fresh in-memory event sink per test
- A token ledger deployed with 1,000,000 whole tokens credited to the deployer
- `tokens(n)` scaling helper (n * 10**18)
"""
from __future__ import annotations

import os
import typing as t

import pytest

from token_ledger import InMemoryEventSink, TokenLedger, parse_units

# Keep dict/set hash-iteration stable across runs.
os.environ.setdefault("PYTHONHASHSEED", "0")

NAME = "Dapp University"
SYMBOL = "DAPP"
SUPPLY_WHOLE = 1_000_000


def tokens(n: t.Union[int, str]) -> int:
    """Whole tokens → smallest units at 18 decimals."""
    return parse_units(n)


def addr(byte: int) -> bytes:
    return bytes([byte]) * 20


@pytest.fixture
def accounts() -> t.Dict[str, bytes]:
    return {
        "deployer": addr(0xD0),
        "receiver": addr(0xBE),
        "exchange": addr(0xE7),
        "carol": addr(0xCC),
    }


@pytest.fixture
def deployer(accounts: t.Dict[str, bytes]) -> bytes:
    return accounts["deployer"]


@pytest.fixture
def receiver(accounts: t.Dict[str, bytes]) -> bytes:
    return accounts["receiver"]


@pytest.fixture
def exchange(accounts: t.Dict[str, bytes]) -> bytes:
    return accounts["exchange"]


@pytest.fixture
def sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def token(sink: InMemoryEventSink, deployer: bytes) -> TokenLedger:
    return TokenLedger(NAME, SYMBOL, tokens(SUPPLY_WHOLE), deployer, sink=sink)
