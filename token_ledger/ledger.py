"""
token_ledger.ledger
===================

ERC-20–like fungible token ledger: per-holder balances, per-(owner, spender)
allowances, and the three mutating operations that move value between them.

Highlights
----------
- All state lives on the `TokenLedger` instance; no module-level storage.
- Explicit caller parameters for mutating calls (no ambient msg.sender).
- Explicit default-0 reads: absent balances/allowances are 0, and entries that
  fall back to 0 are dropped so the maps only hold live positions.
- U256-checked math via `token_ledger.uint` (no silent wrap).
- Notifications go to an injected `EventSink`:
    - Transfer { from, to, value }
    - Approval { owner, spender, value }

Public interface
----------------
# metadata (pure)
name, symbol, decimals, total_supply       (properties)
balance_of(account) -> int
allowance(owner, spender) -> int

# state-changing (explicit caller)
transfer(sender, to, amount) -> bool
approve(owner, spender, amount) -> bool
transfer_from(spender, owner, to, amount) -> bool
increase_allowance(owner, spender, added) -> bool
decrease_allowance(owner, spender, subtracted) -> bool

Atomicity
---------
Every mutating call validates fully, then writes, then notifies the sink. If
the sink raises, the writes are undone before the error propagates, so a call
either succeeds *and* delivers exactly one event, or changes nothing.

The ledger performs no locking. Hosts that accept concurrent requests must
serialize mutating calls on one instance themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, List, Optional, Tuple

from . import logging as tlog
from .address import NULL_ADDRESS, AddressLike, to_address, to_hex
from .config import LedgerConfig, get_config, make_sink
from .errors import (InsufficientAllowance, InsufficientBalance,
                     InvalidMetadata, InvalidRecipient, InvalidSpender,
                     InvariantViolation, Rejection)
from .events import Approval, EventSink, LedgerEvent, NullEventSink, Transfer
from .uint import require_amount, u256_add, u256_sub
from .units import DEFAULT_DECIMALS

log = tlog.get_logger(__name__)

DECIMALS: Final[int] = DEFAULT_DECIMALS

_BalanceKey = bytes
_AllowanceKey = Tuple[bytes, bytes]


def _require_text(value: object, field: str) -> str:
    if not isinstance(value, str) or value.strip() == "":
        raise InvalidMetadata(f"{field} must be a non-empty string", data={"field": field})
    return value


class TokenLedger:
    """
    Authoritative record of balances and allowances for one token.

    Parameters
    ----------
    name, symbol : str
        Non-empty display metadata; immutable.
    total_supply : int
        Whole supply in smallest units, credited to `initial_holder`.
    initial_holder : address
        Receives the genesis supply; must not be the null address.
    sink : EventSink, optional
        Receives Transfer/Approval notifications (default: NullEventSink).
    strict : bool
        Re-check conservation and non-negativity after every mutation.
    """

    __slots__ = (
        "_name",
        "_symbol",
        "_total_supply",
        "_balances",
        "_allowances",
        "_sink",
        "_strict",
    )

    def __init__(
        self,
        name: str,
        symbol: str,
        total_supply: int,
        initial_holder: AddressLike,
        *,
        sink: Optional[EventSink] = None,
        strict: bool = False,
    ) -> None:
        self._name = _require_text(name, "name")
        self._symbol = _require_text(symbol, "symbol")
        self._total_supply = require_amount(total_supply, name="total_supply")

        holder = to_address(initial_holder)
        if holder == NULL_ADDRESS:
            raise InvalidRecipient("initial holder is the null address", to=holder)

        self._balances: Dict[_BalanceKey, int] = {}
        self._allowances: Dict[_AllowanceKey, int] = {}
        if self._total_supply:
            self._balances[holder] = self._total_supply

        self._sink: EventSink = sink if sink is not None else NullEventSink()
        self._strict = bool(strict)

        log.info(
            "ledger created",
            extra={
                "ledger": self._symbol,
                "total_supply": self._total_supply,
                "holder": to_hex(holder),
            },
        )

    @classmethod
    def from_config(
        cls,
        name: str,
        symbol: str,
        total_supply: int,
        initial_holder: AddressLike,
        cfg: Optional[LedgerConfig] = None,
    ) -> "TokenLedger":
        """Build a ledger wired to the configured sink and strictness."""
        cfg = cfg or get_config()
        return cls(
            name,
            symbol,
            total_supply,
            initial_holder,
            sink=make_sink(cfg),
            strict=cfg.strict_invariants,
        )

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def decimals(self) -> int:
        return DECIMALS

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def sink(self) -> EventSink:
        return self._sink

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def balance_of(self, account: AddressLike) -> int:
        return self._balances.get(to_address(account), 0)

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self._allowances.get((to_address(owner), to_address(spender)), 0)

    def holders(self) -> List[bytes]:
        """Accounts currently holding a non-zero balance, sorted."""
        return sorted(self._balances)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of the whole ledger (amounts as decimal strings)."""
        return {
            "name": self._name,
            "symbol": self._symbol,
            "decimals": DECIMALS,
            "total_supply": str(self._total_supply),
            "balances": {to_hex(a): str(v) for a, v in sorted(self._balances.items())},
            "allowances": {
                f"{to_hex(o)}:{to_hex(s)}": str(v)
                for (o, s), v in sorted(self._allowances.items())
            },
        }

    def check_invariants(self) -> None:
        """
        Raise InvariantViolation unless balances sum to the total supply and
        no balance or allowance is negative.
        """
        negative = [a for a, v in self._balances.items() if v < 0]
        negative += [o for (o, _), v in self._allowances.items() if v < 0]
        if negative:
            raise InvariantViolation(
                "negative ledger entry",
                data={"accounts": sorted({to_hex(a) for a in negative})},
            )
        total = sum(self._balances.values())
        if total != self._total_supply:
            raise InvariantViolation(
                "balances do not sum to total supply",
                data={"sum": str(total), "total_supply": str(self._total_supply)},
            )

    # ------------------------------------------------------------------
    # Mutations (explicit caller)
    # ------------------------------------------------------------------

    def transfer(self, sender: AddressLike, to: AddressLike, amount: int) -> bool:
        """Move `amount` from `sender` to `to`."""
        src = to_address(sender)
        dst = to_address(to)
        require_amount(amount)
        try:
            writes = self._plan_move(src, dst, amount)
        except Rejection as e:
            self._rejected("transfer", e)
            raise
        self._commit(writes, {}, Transfer(sender=src, to=dst, value=amount))
        return True

    def approve(self, owner: AddressLike, spender: AddressLike, amount: int) -> bool:
        """Set (not add to) the amount `spender` may move out of `owner`."""
        own = to_address(owner)
        sp = to_address(spender)
        require_amount(amount)
        if sp == NULL_ADDRESS:
            err = InvalidSpender(spender=sp)
            self._rejected("approve", err)
            raise err
        self._commit({}, {(own, sp): amount}, Approval(owner=own, spender=sp, value=amount))
        return True

    def transfer_from(
        self, spender: AddressLike, owner: AddressLike, to: AddressLike, amount: int
    ) -> bool:
        """
        Spender moves `amount` from `owner` to `to`, consuming exactly `amount`
        of the owner's allowance to the spender.
        """
        sp = to_address(spender)
        own = to_address(owner)
        dst = to_address(to)
        require_amount(amount)
        try:
            writes = self._plan_move(own, dst, amount)
            current = self._allowances.get((own, sp), 0)
            if current < amount:
                raise InsufficientAllowance(
                    owner=own, spender=sp, allowance=current, requested=amount
                )
        except Rejection as e:
            self._rejected("transfer_from", e)
            raise
        self._commit(
            writes,
            {(own, sp): u256_sub(current, amount)},
            Transfer(sender=own, to=dst, value=amount),
        )
        return True

    def increase_allowance(self, owner: AddressLike, spender: AddressLike, added: int) -> bool:
        own = to_address(owner)
        sp = to_address(spender)
        require_amount(added)
        if sp == NULL_ADDRESS:
            err = InvalidSpender(spender=sp)
            self._rejected("increase_allowance", err)
            raise err
        new = u256_add(self._allowances.get((own, sp), 0), added)
        self._commit({}, {(own, sp): new}, Approval(owner=own, spender=sp, value=new))
        return True

    def decrease_allowance(self, owner: AddressLike, spender: AddressLike, subtracted: int) -> bool:
        own = to_address(owner)
        sp = to_address(spender)
        require_amount(subtracted)
        try:
            if sp == NULL_ADDRESS:
                raise InvalidSpender(spender=sp)
            current = self._allowances.get((own, sp), 0)
            if current < subtracted:
                raise InsufficientAllowance(
                    owner=own, spender=sp, allowance=current, requested=subtracted
                )
        except Rejection as e:
            self._rejected("decrease_allowance", e)
            raise
        new = u256_sub(current, subtracted)
        self._commit({}, {(own, sp): new}, Approval(owner=own, spender=sp, value=new))
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _plan_move(self, src: bytes, dst: bytes, amount: int) -> Dict[_BalanceKey, int]:
        """
        Validate a balance move and return the balance writes it needs.
        Checks run in order: recipient, then source balance.
        """
        if dst == NULL_ADDRESS:
            raise InvalidRecipient(to=dst)
        src_bal = self._balances.get(src, 0)
        if src_bal < amount:
            raise InsufficientBalance(account=src, balance=src_bal, requested=amount)
        if src == dst:
            return {src: src_bal}
        return {
            src: u256_sub(src_bal, amount),
            dst: u256_add(self._balances.get(dst, 0), amount),
        }

    def _commit(
        self,
        balances: Dict[_BalanceKey, int],
        allowances: Dict[_AllowanceKey, int],
        event: LedgerEvent,
    ) -> None:
        prev_bal = {k: self._balances.get(k, 0) for k in balances}
        prev_allow = {k: self._allowances.get(k, 0) for k in allowances}

        _write(self._balances, balances)
        _write(self._allowances, allowances)
        try:
            if self._strict:
                self.check_invariants()
            self._sink.emit(event)
        except Exception:
            _write(self._balances, prev_bal)
            _write(self._allowances, prev_allow)
            log.warning(
                "%s rolled back", event.name, extra={"ledger": self._symbol}, exc_info=True
            )
            raise

        if log.isEnabledFor(logging.DEBUG):
            log.debug("%s applied", event.name, extra={"ledger": self._symbol, **event.to_dict()})

    def _rejected(self, op: str, err: Rejection) -> None:
        log.debug(
            "%s rejected: %s",
            op,
            err.code,
            extra={"ledger": self._symbol, "op": op, "details": err.data},
        )

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return (
            f"TokenLedger(name={self._name!r}, symbol={self._symbol!r}, "
            f"total_supply={self._total_supply}, holders={len(self._balances)})"
        )


def _write(table: Dict[Any, int], values: Dict[Any, int]) -> None:
    for k, v in values.items():
        if v:
            table[k] = v
        else:
            table.pop(k, None)


__all__ = ["DECIMALS", "TokenLedger"]
