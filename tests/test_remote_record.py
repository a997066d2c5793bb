import asyncio

import pytest

from conftest import FakeLedger
from errors import AlreadyInitialized, FetchFailed, SubmitFailed
from models import Entry, RecordStatus
from remote_record import RemoteRecordClient


class _ScriptedLedger:
    """Returns (or raises) whatever the test put in `answer`."""

    def __init__(self, answer):
        self.answer = answer
        self.calls = 0

    async def _reply(self):
        self.calls += 1
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer

    async def fetch_record(self, owner):
        return await self._reply()

    async def create_record(self, owner):
        await self._reply()

    async def append_entry(self, owner, payload):
        await self._reply()


def _fetch(ledger, identity="A"):
    return asyncio.run(RemoteRecordClient(ledger).fetch(identity))


def test_fetch_ready_keeps_remote_order() -> None:
    ledger = FakeLedger()
    ledger.accounts["A"] = [{"link": "b", "user": "A"}, {"link": "a", "user": "Z"}]

    state = _fetch(ledger)
    assert state.status is RecordStatus.READY
    assert state.entries == (Entry("b", "A"), Entry("a", "Z"))


def test_fetch_missing_account_is_not_found_not_an_error() -> None:
    state = _fetch(FakeLedger())
    assert state.status is RecordStatus.NOT_FOUND


def test_fetch_failure_is_reported_as_state() -> None:
    state = _fetch(_ScriptedLedger(FetchFailed()))
    assert state.status is RecordStatus.FETCH_FAILED


def test_fetch_unexpected_exception_becomes_fetch_failed() -> None:
    state = _fetch(_ScriptedLedger(ConnectionResetError("peer gone")))
    assert state.status is RecordStatus.FETCH_FAILED


@pytest.mark.parametrize(
    "account",
    [
        {"owner": "A"},
        {"owner": "A", "entries": [42]},
        {"owner": "A", "entries": [{"user": "A"}]},
        {"owner": "A", "entries": [{"link": 7, "user": "A"}]},
        None,
    ],
)
def test_fetch_malformed_account_is_fetch_failed(account) -> None:
    state = _fetch(_ScriptedLedger(account))
    assert state.status is RecordStatus.FETCH_FAILED


def test_initialize_already_initialized_propagates() -> None:
    ledger = FakeLedger()
    ledger.accounts["A"] = []
    with pytest.raises(AlreadyInitialized):
        asyncio.run(RemoteRecordClient(ledger).initialize("A"))


def test_initialize_unexpected_failure_is_submit_failed() -> None:
    with pytest.raises(SubmitFailed):
        asyncio.run(RemoteRecordClient(_ScriptedLedger(OSError("disk"))).initialize("A"))


def test_submit_failure_is_not_retried() -> None:
    ledger = _ScriptedLedger(SubmitFailed())
    with pytest.raises(SubmitFailed):
        asyncio.run(RemoteRecordClient(ledger).submit_entry("A", "https://x"))
    assert ledger.calls == 1


def test_submit_unexpected_failure_is_submit_failed() -> None:
    ledger = _ScriptedLedger(RuntimeError("boom"))
    with pytest.raises(SubmitFailed):
        asyncio.run(RemoteRecordClient(ledger).submit_entry("A", "https://x"))
    assert ledger.calls == 1
