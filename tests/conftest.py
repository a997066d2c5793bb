from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any

import pytest

from errors import AlreadyInitialized, NotFound, ProviderUnavailable, SubmitFailed, UserRejected


@dataclass
class HeldCall:
    op: str
    owner: str
    payload: str | None
    future: asyncio.Future
    ledger: "FakeLedger" = field(repr=False)

    def release(self, error: Exception | None = None, result: Any = None) -> None:
        """Answer now. Without arguments the ledger's current data decides."""
        if error is not None:
            self.future.set_exception(error)
            return
        if result is not None:
            self.future.set_result(result)
            return
        try:
            self.future.set_result(self.ledger._perform(self.op, self.owner, self.payload))
        except Exception as ex:
            self.future.set_exception(ex)


class FakeLedger:
    """
    In-memory ledger. With hold=True every call waits until the test
    releases it, which lets tests complete requests in any order.
    """

    def __init__(self, hold: bool = False):
        self.accounts: dict[str, list[dict[str, str]]] = {}
        self.calls: list[tuple[str, str, str | None]] = []
        self.errors: dict[str, Exception] = {}
        self.hold = hold
        self.held: list[HeldCall] = []

    def held_calls(self, op: str) -> list[HeldCall]:
        return [c for c in self.held if c.op == op and not c.future.done()]

    async def _call(self, op: str, owner: str, payload: str | None = None):
        self.calls.append((op, owner, payload))
        if self.hold:
            call = HeldCall(op, owner, payload, asyncio.get_running_loop().create_future(), self)
            self.held.append(call)
            return await call.future
        await asyncio.sleep(0)
        if op in self.errors:
            raise self.errors.pop(op)
        return self._perform(op, owner, payload)

    def _perform(self, op: str, owner: str, payload: str | None):
        if op == "fetch":
            if owner not in self.accounts:
                raise NotFound()
            return {"owner": owner, "entries": copy.deepcopy(self.accounts[owner])}
        if op == "create":
            if owner in self.accounts:
                raise AlreadyInitialized()
            self.accounts[owner] = []
            return None
        if op == "append":
            if owner not in self.accounts:
                raise SubmitFailed()
            self.accounts[owner].append({"link": payload, "user": owner})
            return None
        raise AssertionError(op)

    async def fetch_record(self, owner: str) -> dict[str, Any]:
        return await self._call("fetch", owner)

    async def create_record(self, owner: str) -> None:
        await self._call("create", owner)

    async def append_entry(self, owner: str, payload: str) -> None:
        await self._call("append", owner, payload)

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)


class FakeWallet:
    def __init__(self, public_key: str = "A", *, trusted: bool = False, available: bool = True, approve: bool = True):
        self.public_key = public_key
        self.trusted = trusted
        self.available = available
        self.approve = approve
        self.connect_calls: list[bool] = []
        self.disconnects = 0

    def is_available(self) -> bool:
        return self.available

    async def connect(self, only_if_trusted: bool = False) -> str:
        self.connect_calls.append(only_if_trusted)
        await asyncio.sleep(0)
        if not self.available:
            raise ProviderUnavailable()
        if only_if_trusted and not self.trusted:
            raise UserRejected()
        if not only_if_trusted and not self.trusted:
            if not self.approve:
                raise UserRejected()
            self.trusted = True
        return self.public_key

    async def disconnect(self) -> None:
        self.disconnects += 1
        self.trusted = False


async def settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch, tmp_path):
    monkeypatch.setenv("LINKBOARD_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("LINKBOARD_LATENCY_MS", "0")
    monkeypatch.delenv("LINKBOARD_FAIL_RATE", raising=False)
    monkeypatch.delenv("LINKBOARD_WALLET", raising=False)
