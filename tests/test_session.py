import asyncio

import pytest

from conftest import FakeWallet
from errors import ProviderUnavailable, UserRejected
from session import SessionStore


def test_silent_restore_with_trusted_wallet_publishes_identity() -> None:
    async def scenario():
        store = SessionStore(FakeWallet("A", trusted=True))
        seen = []
        store.subscribe(seen.append)

        assert await store.try_restore_silently() == "A"
        assert store.identity == "A"
        assert seen == ["A"]

    asyncio.run(scenario())


def test_silent_restore_never_prompts() -> None:
    async def scenario():
        wallet = FakeWallet("A", trusted=False)
        store = SessionStore(wallet)
        seen = []
        store.subscribe(seen.append)

        assert await store.try_restore_silently() is None
        assert store.identity is None
        assert seen == []
        assert wallet.connect_calls == [True]

    asyncio.run(scenario())


def test_silent_restore_without_provider() -> None:
    async def scenario():
        store = SessionStore(FakeWallet("A", available=False))
        assert await store.try_restore_silently() is None
        assert store.identity is None

    asyncio.run(scenario())


def test_connect_is_idempotent() -> None:
    async def scenario():
        wallet = FakeWallet("A")
        store = SessionStore(wallet)
        seen = []
        store.subscribe(seen.append)

        assert await store.connect_interactively() == "A"
        assert await store.connect_interactively() == "A"
        assert wallet.connect_calls == [False]
        assert seen == ["A"]

    asyncio.run(scenario())


def test_concurrent_connects_share_one_prompt() -> None:
    async def scenario():
        wallet = FakeWallet("A")
        store = SessionStore(wallet)

        first, second = await asyncio.gather(store.connect_interactively(), store.connect_interactively())
        assert first == second == "A"
        assert wallet.connect_calls == [False]

    asyncio.run(scenario())


def test_rejected_connect_leaves_session_absent() -> None:
    async def scenario():
        store = SessionStore(FakeWallet("A", approve=False))
        with pytest.raises(UserRejected):
            await store.connect_interactively()
        assert store.identity is None

    asyncio.run(scenario())


def test_connect_without_provider() -> None:
    async def scenario():
        wallet = FakeWallet("A", available=False)
        store = SessionStore(wallet)
        with pytest.raises(ProviderUnavailable):
            await store.connect_interactively()
        assert wallet.connect_calls == []

    asyncio.run(scenario())


def test_disconnect_publishes_absent_and_revokes_trust() -> None:
    async def scenario():
        wallet = FakeWallet("A", trusted=True)
        store = SessionStore(wallet)
        seen = []
        store.subscribe(seen.append)

        await store.try_restore_silently()
        await store.disconnect()

        assert store.identity is None
        assert seen == ["A", None]
        assert wallet.disconnects == 1
        assert await store.try_restore_silently() is None

    asyncio.run(scenario())


def test_unsubscribe_stops_notifications() -> None:
    async def scenario():
        store = SessionStore(FakeWallet("A"))
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        await store.connect_interactively()
        assert seen == []

    asyncio.run(scenario())
