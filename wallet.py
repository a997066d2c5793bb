# wallet.py
from __future__ import annotations

import asyncio
import inspect
import logging
import secrets
from typing import Awaitable, Callable, Optional, Protocol, Union

import storage
from errors import ProviderUnavailable, UserRejected

logger = logging.getLogger(__name__)

ApproveCallback = Callable[[str], Union[bool, Awaitable[bool]]]


class WalletCapability(Protocol):
    def is_available(self) -> bool: ...

    async def connect(self, only_if_trusted: bool = False) -> str: ...

    async def disconnect(self) -> None: ...


class LocalWallet:
    """
    File-backed wallet: one key per data directory plus a "trusted" flag that
    lets the app reconnect without asking.

    `approve` is called with the public key for interactive connects and may
    return a bool or an awaitable bool. None approves automatically.
    """

    def __init__(
        self,
        path: str | None = None,
        *,
        approve: Optional[ApproveCallback] = None,
        available: bool | None = None,
        latency: float | None = None,
    ):
        self.path = path or storage.wallet_path()
        self.approve = approve
        self._available = storage.wallet_enabled() if available is None else available
        self._latency = storage.simulated_latency() if latency is None else latency

    def is_available(self) -> bool:
        return self._available

    async def connect(self, only_if_trusted: bool = False) -> str:
        if not self.is_available():
            raise ProviderUnavailable()

        state = self._load_state()
        if self._latency:
            await asyncio.sleep(self._latency)

        if only_if_trusted:
            if not state.get("trusted"):
                raise UserRejected("Wallet has not authorized this app yet.")
            return state["public_key"]

        if state.get("trusted"):
            return state["public_key"]

        if not await self._ask(state["public_key"]):
            raise UserRejected()

        state["trusted"] = True
        storage.save_json(self.path, state)
        logger.info("wallet %s approved this app", state["public_key"])
        return state["public_key"]

    async def disconnect(self) -> None:
        state = self._load_state()
        if state.get("trusted"):
            state["trusted"] = False
            storage.save_json(self.path, state)

    async def _ask(self, public_key: str) -> bool:
        if self.approve is None:
            return True
        answer = self.approve(public_key)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    def _load_state(self) -> dict:
        try:
            state = storage.load_json(self.path)
        except (OSError, ValueError) as ex:
            logger.warning("wallet file unreadable, creating a new key: %s", ex)
            state = None

        if state and isinstance(state.get("public_key"), str) and state["public_key"]:
            return state

        state = {
            "schema_version": storage.SCHEMA_VERSION,
            "public_key": secrets.token_hex(16),
            "trusted": False,
            "created": storage.now_local_str(),
        }
        storage.save_json(self.path, state)
        return state
