# session.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from errors import ProviderUnavailable, UserRejected
from wallet import WalletCapability

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class SessionStore:
    """Owns the connected wallet identity. At most one at a time."""

    def __init__(self, wallet: WalletCapability):
        self.wallet = wallet
        self._identity: str | None = None
        self._listeners: list[IdentityListener] = []
        self._connecting: asyncio.Task | None = None

    @property
    def identity(self) -> str | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---------------- Acquisition ----------------

    async def try_restore_silently(self) -> str | None:
        """
        Reconnects only if the wallet already trusts this app. Never prompts.
        Without a provider, or without trust, the session just stays absent.
        """
        if self._identity is not None:
            return self._identity
        if not self.wallet.is_available():
            logger.info("silent restore: no wallet provider")
            return None

        try:
            identity = await self.wallet.connect(only_if_trusted=True)
        except UserRejected:
            logger.info("silent restore: wallet has not trusted this app")
            return None

        self._set_identity(identity)
        return identity

    async def connect_interactively(self) -> str:
        if self._identity is not None:
            return self._identity
        if not self.wallet.is_available():
            raise ProviderUnavailable()

        # share one prompt between concurrent callers
        if self._connecting is None or self._connecting.done():
            self._connecting = asyncio.ensure_future(self.wallet.connect(only_if_trusted=False))
        task = self._connecting

        identity = await task
        if self._identity is None:
            self._set_identity(identity)
        return self._identity

    async def disconnect(self) -> None:
        if self._identity is None:
            return
        try:
            await self.wallet.disconnect()
        finally:
            self._set_identity(None)

    def _set_identity(self, identity: str | None) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        logger.info("wallet identity: %s", identity or "(none)")
        for listener in list(self._listeners):
            listener(identity)
