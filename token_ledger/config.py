"""
token_ledger.config — runtime configuration for hosts embedding the ledger.

This module centralizes knobs for:
  • Logging (level, format, optional JSON log file)
  • Event delivery (which EventSink backend to build, and where it writes)
  • Invariant checking (re-verify conservation after every mutation)

Configuration may be provided via environment variables. Safe defaults are chosen so a
local developer run works out of the box.

Environment variables (all optional):
  TOKEN_LEDGER_LOG_LEVEL            -> DEBUG/INFO/WARNING/... (default: INFO)
  TOKEN_LEDGER_LOG_FORMAT           -> json|text (default: auto, text on a TTY)
  TOKEN_LEDGER_LOG_FILE             -> path to tee JSON logs to (default: unset)
  TOKEN_LEDGER_EVENT_SINK           -> null|memory|jsonl (default: null)
  TOKEN_LEDGER_EVENTS_PATH          -> JSONL path, required for the jsonl sink
  TOKEN_LEDGER_STRICT_INVARIANTS    -> 0/1/true/false (default: 0)

Programmatic usage:
    from token_ledger import TokenLedger
    ledger = TokenLedger.from_config("Dapp University", "DAPP", supply, holder)

    # equivalent to
    cfg = get_config()
    TokenLedger(..., sink=make_sink(cfg), strict=cfg.strict_invariants)

Note: This module does not perform any I/O beyond reading env vars; `make_sink`
opens the JSONL file only when asked to build that backend.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .errors import LedgerError
from .events import EventSink, InMemoryEventSink, JsonlEventSink, NullEventSink
from .version import git_describe

# ----------------------------- helpers -------------------------------------


_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")
SINK_KINDS = ("null", "memory", "jsonl")


class ConfigError(LedgerError):
    def __init__(self, message: str = "invalid configuration", *, data: Optional[Dict[str, object]] = None):
        super().__init__(message=message, code="LEDGER/CONFIG", data=data)


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    # Be forgiving: non-empty → True, empty → default
    return bool(v) if v != "" else default


def _opt_path(value: Optional[Union[str, Path]]) -> Optional[Path]:
    if value is None or str(value).strip() == "":
        return None
    return Path(value).expanduser()


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    fmt: Optional[str] = None  # None = auto (json off-TTY, text on TTY)
    file: Optional[Path] = None


@dataclass(frozen=True)
class EventsConfig:
    sink: str = "null"
    path: Optional[Path] = None


@dataclass(frozen=True)
class LedgerConfig:
    logging: LoggingConfig
    events: EventsConfig
    strict_invariants: bool = False

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["logging"]["file"] = str(self.logging.file) if self.logging.file else None
        d["events"]["path"] = str(self.events.path) if self.events.path else None
        return d


# ------------------------------ loader --------------------------------------


def _validate(cfg: LedgerConfig) -> LedgerConfig:
    if cfg.logging.level not in _LEVELS:
        raise ConfigError(f"unknown log level: {cfg.logging.level}")
    if cfg.logging.fmt not in (None, "json", "text"):
        raise ConfigError(f"log format must be json or text, got {cfg.logging.fmt!r}")
    if cfg.events.sink not in SINK_KINDS:
        raise ConfigError(
            f"event sink must be one of {', '.join(SINK_KINDS)}",
            data={"sink": cfg.events.sink},
        )
    if cfg.events.sink == "jsonl" and cfg.events.path is None:
        raise ConfigError("jsonl event sink requires TOKEN_LEDGER_EVENTS_PATH")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, bool, Path]]] = None,
) -> LedgerConfig:
    """
    Build a LedgerConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys support:
          'log_level', 'log_format', 'log_file', 'event_sink', 'events_path',
          'strict_invariants'
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    fmt = overrides.get("log_format", env.get("TOKEN_LEDGER_LOG_FORMAT"))
    fmt = str(fmt).strip().lower() if fmt not in (None, "") else None

    logging_cfg = LoggingConfig(
        level=str(overrides.get("log_level", env.get("TOKEN_LEDGER_LOG_LEVEL", "INFO"))).strip().upper(),
        fmt=fmt,
        file=_opt_path(overrides.get("log_file", env.get("TOKEN_LEDGER_LOG_FILE"))),  # type: ignore[arg-type]
    )

    events_cfg = EventsConfig(
        sink=str(overrides.get("event_sink", env.get("TOKEN_LEDGER_EVENT_SINK", "null"))).strip().lower(),
        path=_opt_path(overrides.get("events_path", env.get("TOKEN_LEDGER_EVENTS_PATH"))),  # type: ignore[arg-type]
    )

    if "strict_invariants" in overrides:
        strict = bool(overrides["strict_invariants"])
    else:
        strict = _bool_env(env.get("TOKEN_LEDGER_STRICT_INVARIANTS"), False)

    return _validate(
        LedgerConfig(logging=logging_cfg, events=events_cfg, strict_invariants=strict)
    )


@lru_cache(maxsize=1)
def get_config() -> LedgerConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


def make_sink(cfg: Optional[LedgerConfig] = None) -> EventSink:
    """Build the EventSink backend selected by `cfg.events`."""
    cfg = cfg or get_config()
    kind = cfg.events.sink
    if kind == "memory":
        return InMemoryEventSink()
    if kind == "jsonl":
        if cfg.events.path is None:
            raise ConfigError("jsonl event sink requires TOKEN_LEDGER_EVENTS_PATH")
        return JsonlEventSink(cfg.events.path)
    return NullEventSink()


# ----------------------------- pretty-print ---------------------------------


def summary(cfg: Optional[LedgerConfig] = None) -> str:
    """
    Return a human-friendly one-line summary of the configuration.
    """
    cfg = cfg or get_config()
    lg = cfg.logging
    ev = cfg.events
    return (
        f"ledger[{git_describe()}]{{"
        f"log={lg.level}/{lg.fmt or 'auto'}, log_file={lg.file or '-'}, "
        f"sink={ev.sink}, events_path={ev.path or '-'}, "
        f"strict={int(cfg.strict_invariants)}"
        "}"
    )


__all__ = [
    "ConfigError",
    "LoggingConfig",
    "EventsConfig",
    "LedgerConfig",
    "SINK_KINDS",
    "load_config",
    "get_config",
    "make_sink",
    "summary",
]
