"""
token_ledger.events — ledger notifications and pluggable event sinks.

The ledger announces every successful mutation by handing exactly one event
record to an `EventSink`. It does not care how the record is delivered; the
sink is an abstract capability. This module ships four backends:

- InMemoryEventSink: fast, test/dev friendly; keeps all events in RAM.
- JsonlEventSink: append-only JSONL file; durable and simple to operate.
- CallbackEventSink: forwards each event to a callable (observer wiring).
- NullEventSink: no-op sink for hosts that ignore notifications.

Event records
-------------
- Transfer { from, to, value }    emitted by transfer / transfer_from
- Approval { owner, spender, value } emitted by approve (and the
  increase/decrease allowance helpers)

Field order matches the order the ledger announces them: from/owner first,
to/spender second, value last. Addresses are raw 20-byte `bytes`.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from typing import (Any, Callable, ClassVar, Dict, Iterable, List, Optional,
                    Protocol, Union, runtime_checkable)

# =============================================================================
# Utilities
# =============================================================================


def _b2h(b: bytes) -> str:
    return "0x" + b.hex()


def _h2b(h: str) -> bytes:
    if not isinstance(h, str):
        raise TypeError("expected hex string")
    if h.startswith("0x") or h.startswith("0X"):
        h = h[2:]
    return bytes.fromhex(h)


# =============================================================================
# Public data model
# =============================================================================


@dataclass(frozen=True)
class Transfer:
    """Value moved from `sender` to `to`."""

    name: ClassVar[str] = "Transfer"

    sender: bytes
    to: bytes
    value: int

    def to_dict(self) -> Dict[str, Any]:
        # value as a decimal string: JSON numbers lose precision past 2**53
        return {
            "event": self.name,
            "from": _b2h(self.sender),
            "to": _b2h(self.to),
            "value": str(self.value),
        }


@dataclass(frozen=True)
class Approval:
    """`owner` set the amount `spender` may move on their behalf to `value`."""

    name: ClassVar[str] = "Approval"

    owner: bytes
    spender: bytes
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "owner": _b2h(self.owner),
            "spender": _b2h(self.spender),
            "value": str(self.value),
        }


LedgerEvent = Union[Transfer, Approval]


def event_from_dict(d: Dict[str, Any]) -> LedgerEvent:
    """Parse the mapping produced by `to_dict()` back into an event."""
    kind = d.get("event")
    if kind == Transfer.name:
        return Transfer(sender=_h2b(d["from"]), to=_h2b(d["to"]), value=int(d["value"]))
    if kind == Approval.name:
        return Approval(
            owner=_h2b(d["owner"]), spender=_h2b(d["spender"]), value=int(d["value"])
        )
    raise ValueError(f"unknown event kind: {kind!r}")


def involves(event: LedgerEvent, address: bytes) -> bool:
    """True if `address` appears in either address field of `event`."""
    if isinstance(event, Transfer):
        return address in (event.sender, event.to)
    return address in (event.owner, event.spender)


# =============================================================================
# Sink interface
# =============================================================================


@runtime_checkable
class EventSink(Protocol):
    def emit(self, event: LedgerEvent) -> None:
        """Deliver one event. Raising aborts (and rolls back) the ledger call."""

    def flush(self) -> None:
        """Force persistence, if applicable."""

    def close(self) -> None:
        """Release resources (files, buffers)."""


def _matches(event: LedgerEvent, kind: Optional[str], address: Optional[bytes]) -> bool:
    if kind is not None and event.name != kind:
        return False
    if address is not None and not involves(event, address):
        return False
    return True


# =============================================================================
# In-memory sink
# =============================================================================


class InMemoryEventSink(EventSink):
    """
    A simple, thread-safe in-memory sink.

    Notes
    -----
    - Suitable for unit tests and devnets.
    - Keeps all events in RAM; call `clear()` between scenarios.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._events: List[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[LedgerEvent]:
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:  # pragma: no cover - trivial
        with self._lock:
            return len(self._events)

    def get_events(
        self,
        *,
        kind: Optional[str] = None,
        address: Optional[bytes] = None,
        limit: Optional[int] = None,
    ) -> List[LedgerEvent]:
        """Events in emission order, optionally filtered by kind and address."""
        with self._lock:
            out = [e for e in self._events if _matches(e, kind, address)]
        return out if limit is None else out[:limit]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def flush(self) -> None:
        return

    def close(self) -> None:
        self.clear()


# =============================================================================
# JSONL sink (durable)
# =============================================================================


class JsonlEventSink(EventSink):
    """
    Append-only JSONL sink. Each line is one event in its `to_dict()` form.

    Durability
    ----------
    - Line-buffered; `flush()` fsyncs the file descriptor.
    - Safe for concurrent appends from multiple threads within the process.
      (One sink instance should be shared; it serializes a single file handle.)

    Format (one object per line)
    ----------------------------
    {"event":"Transfer","from":"0x…","to":"0x…","value":"100"}
    {"event":"Approval","owner":"0x…","spender":"0x…","value":"100"}
    """

    def __init__(self, path: Union[str, "os.PathLike[str]"]) -> None:
        self._path = os.fspath(path)
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        self._fh = open(self._path, "a+", encoding="utf-8", buffering=1)
        self._lock = threading.RLock()
        self._log = logging.getLogger(__name__)

    @property
    def path(self) -> str:
        return self._path

    def emit(self, event: LedgerEvent) -> None:
        line = json.dumps(event.to_dict(), separators=(",", ":"))
        with self._lock:
            self._fh.write(line + "\n")

    def read_back(
        self, *, kind: Optional[str] = None, address: Optional[bytes] = None
    ) -> Iterable[LedgerEvent]:
        """Scan the file from the start and yield matching events."""
        with self._lock:
            self._fh.flush()
            self._fh.seek(0)
            lines = self._fh.readlines()
            self._fh.seek(0, os.SEEK_END)
        for line in lines:
            if not line.strip():
                continue
            try:
                ev = event_from_dict(json.loads(line))
            except (ValueError, KeyError, TypeError) as e:
                self._log.warning("Skipping malformed event line: %s (%r)", line[:120], e)
                continue
            if _matches(ev, kind, address):
                yield ev

    def flush(self) -> None:
        with self._lock:
            self._fh.flush()
            os.fsync(self._fh.fileno())

    def close(self) -> None:
        with self._lock:
            if self._fh.closed:
                return
            try:
                self._fh.flush()
            finally:
                self._fh.close()


# =============================================================================
# Callback sink
# =============================================================================


class CallbackEventSink(EventSink):
    """Forward every event to `callback` synchronously."""

    def __init__(self, callback: Callable[[LedgerEvent], None]) -> None:
        self._callback = callback

    def emit(self, event: LedgerEvent) -> None:
        self._callback(event)

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


# =============================================================================
# Null sink
# =============================================================================


class NullEventSink(EventSink):
    """A sink that drops everything."""

    def emit(self, event: LedgerEvent) -> None:
        return

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


__all__ = [
    "Transfer",
    "Approval",
    "LedgerEvent",
    "event_from_dict",
    "involves",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "CallbackEventSink",
    "NullEventSink",
]
