# sync_controller.py
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from errors import (
    AlreadyInitialized,
    FetchFailed,
    OperationInProgress,
    ProviderUnavailable,
    StaleResponse,
    SyncError,
)
from models import Entry, RecordState, RecordStatus, UiMode, ViewState, derive_mode
from remote_record import RemoteRecordClient
from session import SessionStore

logger = logging.getLogger(__name__)

ViewListener = Callable[[ViewState], None]


@dataclass
class _Optimistic:
    local_id: int
    entry: Entry
    confirmed: bool = False


class SyncController:
    """
    Keeps the local view of a wallet's link record in step with the ledger.

    The UI mode is computed from (identity, connecting, record) and never
    stored. Every fetch carries a sequence number and every identity change
    bumps the epoch; results from an older epoch or an older fetch are dropped.
    At most one initialize / submit per identity is in flight.

    Submissions are optimistic: the entry shows up immediately as provisional,
    is removed again if the ledger refuses it, and is replaced by the ledger's
    own copy on the next successful fetch once confirmed.
    """

    def __init__(self, session: SessionStore, records: RemoteRecordClient):
        self.session = session
        self.records = records

        self._identity: str | None = session.identity
        self._connecting = False
        self._record: RecordState | None = None
        self._draft = ""
        self._error: SyncError | None = None

        self._epoch = 0
        self._fetch_seq = 0
        self._busy: set[str] = set()
        self._optimistic: list[_Optimistic] = []
        self._local_ids = itertools.count(1)

        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[ViewListener] = []
        self._last_mode: UiMode | None = None
        self._unsubscribe_session: Optional[Callable[[], None]] = session.subscribe(self._on_identity)

    # ---------------- View ----------------

    @property
    def mode(self) -> UiMode:
        return derive_mode(self._identity, self._connecting, self._record)

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._busy)

    def view_state(self) -> ViewState:
        shown: list[Entry] = []
        provisional: list[bool] = []
        if self._identity is not None and self._record is not None and self._record.status is RecordStatus.READY:
            shown.extend(self._record.entries)
            provisional.extend(False for _ in self._record.entries)
            for o in self._optimistic:
                shown.append(o.entry)
                provisional.append(not o.confirmed)

        err = self._error
        return ViewState(
            ui_mode=self.mode,
            entries=tuple(e.link for e in shown),
            draft_input=self._draft,
            last_error=err.kind if err else None,
            identity=self._identity,
            error_message=str(err) if err else "",
            provisional=tuple(provisional),
            submitted_by=tuple(e.user for e in shown),
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        view = self.view_state()
        if view.ui_mode != self._last_mode:
            logger.info("mode: %s -> %s", self._last_mode.value if self._last_mode else "-", view.ui_mode.value)
            self._last_mode = view.ui_mode
        for listener in list(self._listeners):
            listener(view)

    def _fail(self, err: SyncError) -> None:
        logger.warning("%s: %s", err.kind.value, err)
        self._error = err
        self._emit()

    def _drop_stale(self, what: str) -> None:
        # never shown to the user
        logger.debug("%s: %s", StaleResponse.kind.value, what)

    # ---------------- Session ----------------

    async def start(self) -> None:
        """Silent reconnect, called once by the composition root."""
        if self._identity is not None:
            await self._issue_fetch()
            return

        self._connecting = True
        self._emit()
        if not self.session.wallet.is_available():
            self._error = ProviderUnavailable()
        try:
            await self.session.try_restore_silently()
        except (SyncError, OSError) as ex:
            logger.warning("silent restore failed: %s", ex)
        finally:
            self._connecting = False
            self._emit()

    async def connect(self) -> None:
        if self._identity is not None or self._connecting:
            return

        self._connecting = True
        self._error = None
        self._emit()
        try:
            await self.session.connect_interactively()
        except SyncError as ex:
            self._error = ex
            logger.warning("connect failed: %s", ex)
        finally:
            self._connecting = False
            self._emit()

    async def disconnect(self) -> None:
        await self.session.disconnect()

    def _on_identity(self, identity: str | None) -> None:
        self._epoch += 1
        self._identity = identity
        self._record = None
        self._optimistic.clear()
        self._draft = ""
        self._error = None
        if identity is not None:
            self._issue_fetch()
        self._emit()

    # ---------------- Reads ----------------

    async def refresh(self) -> None:
        """Retry affordance; fetches are idempotent so this may be called freely."""
        if self._identity is None:
            return
        if self._record is not None and self._record.status is RecordStatus.INITIALIZING:
            # the create call re-fetches when it finishes
            logger.info("refresh ignored while the record is being created")
            return
        if self._record is not None and self._record.status is RecordStatus.FETCH_FAILED:
            self._record = None
        self._error = None
        self._emit()
        await self._issue_fetch()

    def _issue_fetch(self) -> asyncio.Task:
        self._fetch_seq += 1
        return self._spawn(self._fetch(self._identity, self._epoch, self._fetch_seq))

    async def _fetch(self, identity: str, epoch: int, seq: int) -> None:
        logger.info("fetch #%d for %s", seq, identity)
        state = await self.records.fetch(identity)
        if epoch != self._epoch or seq != self._fetch_seq:
            self._drop_stale(f"fetch #{seq} for {identity} (current #{self._fetch_seq})")
            return

        if state.status is RecordStatus.READY:
            # ledger copy replaces confirmed entries; unresolved ones stay provisional
            self._optimistic = [o for o in self._optimistic if not o.confirmed]
        elif state.status is RecordStatus.FETCH_FAILED:
            self._error = FetchFailed()
            if self._record is not None and self._record.status is RecordStatus.READY:
                # a failed read leaves the last good list in place
                self._emit()
                return
        self._record = state
        self._emit()

    # ---------------- Writes ----------------

    async def initialize_record(self) -> None:
        identity = self._identity
        if identity is None:
            return
        if identity in self._busy:
            self._fail(OperationInProgress())
            return
        if self.mode is not UiMode.UNINITIALIZED:
            logger.info("initialize ignored in mode %s", self.mode.value)
            return

        epoch = self._epoch
        self._busy.add(identity)
        # older NotFound answers must not undo the Initializing state
        self._fetch_seq += 1
        self._record = RecordState.initializing()
        self._error = None
        self._emit()

        try:
            await self.records.initialize(identity)
        except SyncError as ex:
            if epoch != self._epoch:
                self._drop_stale(f"initialize for {identity}")
                return
            self._record = RecordState.not_found()
            self._fail(ex)
            if isinstance(ex, AlreadyInitialized):
                self._issue_fetch()
            return
        finally:
            self._busy.discard(identity)

        if epoch != self._epoch:
            self._drop_stale(f"initialize for {identity}")
            return
        logger.info("record created for %s", identity)
        await self._issue_fetch()

    def set_draft(self, text: str) -> None:
        if text == self._draft:
            return
        self._draft = text
        self._emit()

    async def submit(self) -> None:
        identity = self._identity
        payload = self._draft.strip()
        if not payload:
            logger.info("empty input, nothing to submit")
            return
        if identity is None or self.mode is not UiMode.READY:
            logger.info("submit ignored in mode %s", self.mode.value)
            return
        if identity in self._busy:
            self._fail(OperationInProgress())
            return

        epoch = self._epoch
        self._busy.add(identity)
        optimistic = _Optimistic(next(self._local_ids), Entry(link=payload, user=identity))
        self._optimistic.append(optimistic)
        # cleared exactly once, at submission time
        self._draft = ""
        self._error = None
        self._emit()

        try:
            await self.records.submit_entry(identity, payload)
        except SyncError as ex:
            if epoch != self._epoch:
                self._drop_stale(f"submit for {identity}")
                return
            self._optimistic = [o for o in self._optimistic if o.local_id != optimistic.local_id]
            self._fail(ex)
            return
        finally:
            self._busy.discard(identity)

        if epoch != self._epoch:
            self._drop_stale(f"submit for {identity}")
            return
        optimistic.confirmed = True
        self._emit()
        await self._issue_fetch()

    # ---------------- Tasks ----------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background task failed", exc_info=exc)

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        for task in list(self._tasks):
            task.cancel()
        self._listeners.clear()
