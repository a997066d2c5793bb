# ledger.py
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Protocol

import storage
from errors import AlreadyInitialized, FetchFailed, NotFound, SubmitFailed

logger = logging.getLogger(__name__)


class LedgerCapability(Protocol):
    async def fetch_record(self, owner: str) -> dict[str, Any]: ...

    async def create_record(self, owner: str) -> None: ...

    async def append_entry(self, owner: str, payload: str) -> None: ...


class LocalLedger:
    """
    Ledger kept in one JSON file per network/program, with the same rules the
    on-chain program enforces: one record per owner, appends only to an
    existing record, entries kept in append order.
    """

    def __init__(
        self,
        path: str | None = None,
        *,
        network: str = storage.NETWORK,
        program_id: str = storage.PROGRAM_ID,
        latency: float | None = None,
        failure_rate: float | None = None,
        rng: random.Random | None = None,
    ):
        self.network = network
        self.program_id = program_id
        self.path = path or storage.ledger_path(network, program_id)
        self._latency = storage.simulated_latency() if latency is None else latency
        self._failure_rate = storage.simulated_failure_rate() if failure_rate is None else failure_rate
        self._rng = rng or random.Random()

    # ---------------- Capability ----------------

    async def fetch_record(self, owner: str) -> dict[str, Any]:
        await self._round_trip("fetch", FetchFailed)
        try:
            accounts = self._load()["accounts"]
        except (OSError, ValueError) as ex:
            raise FetchFailed(f"Could not read the ledger: {ex}") from ex

        account = accounts.get(owner)
        if account is None:
            raise NotFound()
        return account

    async def create_record(self, owner: str) -> None:
        await self._round_trip("create", SubmitFailed)
        data = self._load_for_write()
        if owner in data["accounts"]:
            raise AlreadyInitialized()

        data["accounts"][owner] = {
            "owner": owner,
            "created": storage.now_local_str(),
            "entries": [],
        }
        self._save(data)
        logger.info("created record for %s on %s", owner, self.network)

    async def append_entry(self, owner: str, payload: str) -> None:
        await self._round_trip("append", SubmitFailed)
        payload = (payload or "").strip()
        if not payload:
            raise SubmitFailed("Empty links are not accepted.")

        data = self._load_for_write()
        account = data["accounts"].get(owner)
        if account is None:
            raise SubmitFailed("No record exists for this wallet.")

        account["entries"].append({"link": payload, "user": owner})
        self._save(data)

    # ---------------- File ----------------

    def _empty(self) -> dict[str, Any]:
        return {
            "schema_version": storage.SCHEMA_VERSION,
            "network": self.network,
            "program_id": self.program_id,
            "commitment": storage.COMMITMENT,
            "accounts": {},
        }

    def _load(self) -> dict[str, Any]:
        data = storage.load_json(self.path)
        if data is None:
            return self._empty()
        if not isinstance(data.get("accounts"), dict):
            raise ValueError("ledger file has no accounts table")
        return data

    def _load_for_write(self) -> dict[str, Any]:
        try:
            return self._load()
        except (OSError, ValueError) as ex:
            raise SubmitFailed(f"Could not read the ledger: {ex}") from ex

    def _save(self, data: dict[str, Any]) -> None:
        try:
            storage.save_json(self.path, data)
        except OSError as ex:
            raise SubmitFailed(f"Could not write the ledger: {ex}") from ex

    async def _round_trip(self, op: str, error: type) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._failure_rate and self._rng.random() < self._failure_rate:
            logger.info("simulated %s failure", op)
            raise error(f"Network error during {op}.")
