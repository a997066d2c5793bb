# models.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from errors import ErrorKind


@dataclass(frozen=True)
class Entry:
    link: str
    user: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Any) -> "Entry":
        # raises on malformed account data; callers map that to FetchFailed
        if not isinstance(raw, dict):
            raise TypeError(f"entry must be an object, got {type(raw).__name__}")
        link = raw["link"]
        user = raw.get("user", "")
        if not isinstance(link, str) or not isinstance(user, str):
            raise TypeError("entry fields must be strings")
        return cls(link=link, user=user)


class RecordStatus(str, Enum):
    NOT_FOUND = "not_found"
    INITIALIZING = "initializing"
    READY = "ready"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class RecordState:
    status: RecordStatus
    entries: tuple[Entry, ...] = ()

    @classmethod
    def not_found(cls) -> "RecordState":
        return cls(RecordStatus.NOT_FOUND)

    @classmethod
    def initializing(cls) -> "RecordState":
        return cls(RecordStatus.INITIALIZING)

    @classmethod
    def ready(cls, entries) -> "RecordState":
        return cls(RecordStatus.READY, tuple(entries))

    @classmethod
    def fetch_failed(cls) -> "RecordState":
        return cls(RecordStatus.FETCH_FAILED)


class UiMode(str, Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING_WALLET = "ConnectingWallet"
    ACCOUNT_UNKNOWN = "Connected/AccountUnknown"
    UNINITIALIZED = "Connected/Uninitialized"
    INITIALIZING = "Connected/Initializing"
    READY = "Connected/Ready"
    FETCH_ERROR = "Connected/FetchError"


_MODE_BY_STATUS = {
    RecordStatus.NOT_FOUND: UiMode.UNINITIALIZED,
    RecordStatus.INITIALIZING: UiMode.INITIALIZING,
    RecordStatus.READY: UiMode.READY,
    RecordStatus.FETCH_FAILED: UiMode.FETCH_ERROR,
}


def derive_mode(identity: str | None, connecting: bool, record: RecordState | None) -> UiMode:
    if identity is None:
        return UiMode.CONNECTING_WALLET if connecting else UiMode.DISCONNECTED
    if record is None:
        return UiMode.ACCOUNT_UNKNOWN
    return _MODE_BY_STATUS[record.status]


@dataclass(frozen=True)
class ViewState:
    ui_mode: UiMode
    entries: tuple[str, ...] = ()
    draft_input: str = ""
    last_error: ErrorKind | None = None
    identity: str | None = None
    error_message: str = ""
    provisional: tuple[bool, ...] = field(default=())
    submitted_by: tuple[str, ...] = field(default=())
