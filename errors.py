# errors.py
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    USER_REJECTED = "UserRejected"
    NOT_FOUND = "NotFound"
    FETCH_FAILED = "FetchFailed"
    ALREADY_INITIALIZED = "AlreadyInitialized"
    SUBMIT_FAILED = "SubmitFailed"
    OPERATION_IN_PROGRESS = "OperationInProgress"
    STALE_RESPONSE = "StaleResponse"


class SyncError(Exception):
    """
    Base for every failure the wallet / ledger layers report.
    `kind` is what the controller stores; `str(err)` is what the window shows.
    """

    kind: ErrorKind
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ProviderUnavailable(SyncError):
    kind = ErrorKind.PROVIDER_UNAVAILABLE
    default_message = "No wallet found. Install or enable a wallet and try again."


class UserRejected(SyncError):
    kind = ErrorKind.USER_REJECTED
    default_message = "The wallet connection request was rejected."


class NotFound(SyncError):
    # expected outcome: the record has not been created yet
    kind = ErrorKind.NOT_FOUND
    default_message = "No record exists for this wallet yet."


class FetchFailed(SyncError):
    kind = ErrorKind.FETCH_FAILED
    default_message = "Could not load the link list."


class AlreadyInitialized(SyncError):
    kind = ErrorKind.ALREADY_INITIALIZED
    default_message = "This wallet already has a record."


class SubmitFailed(SyncError):
    kind = ErrorKind.SUBMIT_FAILED
    default_message = "The ledger did not accept the request."


class OperationInProgress(SyncError):
    kind = ErrorKind.OPERATION_IN_PROGRESS
    default_message = "Another request is still pending. Wait for it to finish."


class StaleResponse(SyncError):
    # internal only, never shown
    kind = ErrorKind.STALE_RESPONSE
    default_message = "Response no longer matches the current session."
