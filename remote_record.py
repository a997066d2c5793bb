# remote_record.py
from __future__ import annotations

import logging

from errors import AlreadyInitialized, FetchFailed, NotFound, SubmitFailed
from ledger import LedgerCapability
from models import Entry, RecordState

logger = logging.getLogger(__name__)


class RemoteRecordClient:
    """All reads and writes of an identity's record go through here."""

    def __init__(self, ledger: LedgerCapability):
        self.ledger = ledger

    async def fetch(self, identity: str) -> RecordState:
        # NotFound is a normal answer here, not an error
        try:
            account = await self.ledger.fetch_record(identity)
        except NotFound:
            return RecordState.not_found()
        except FetchFailed as ex:
            logger.warning("fetch for %s failed: %s", identity, ex)
            return RecordState.fetch_failed()
        except Exception:
            logger.exception("fetch for %s failed unexpectedly", identity)
            return RecordState.fetch_failed()

        try:
            entries = [Entry.from_dict(raw) for raw in account["entries"]]
        except (KeyError, TypeError) as ex:
            logger.warning("record for %s is malformed: %r", identity, ex)
            return RecordState.fetch_failed()

        logger.info("fetched %d entries for %s", len(entries), identity)
        return RecordState.ready(entries)

    async def initialize(self, identity: str) -> None:
        """Callers must re-fetch afterwards; nothing is returned."""
        try:
            await self.ledger.create_record(identity)
        except (AlreadyInitialized, SubmitFailed):
            raise
        except Exception as ex:
            logger.exception("create_record for %s failed unexpectedly", identity)
            raise SubmitFailed() from ex

    async def submit_entry(self, identity: str, payload: str) -> None:
        # at most once: a failure is reported, never retried here
        try:
            await self.ledger.append_entry(identity, payload)
        except SubmitFailed:
            raise
        except Exception as ex:
            logger.exception("append_entry for %s failed unexpectedly", identity)
            raise SubmitFailed() from ex
