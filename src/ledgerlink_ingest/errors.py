"""Error types raised by the ingestion pipeline."""

from enum import Enum

from ledgerlink_ingest.models import RejectionReason


class IngestionError(Exception):
    """Base class for errors that abort an ingestion attempt.

    Every subclass carries a ``user_message`` that can be shown as-is to a
    non-technical user.
    """

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class FileFormatError(IngestionError):
    """The uploaded file cannot be used at all (wrong type, too short, unreadable)."""


class MissingColumnsError(IngestionError):
    """Required CSV columns could not be found in the header row."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        names = " and ".join(", ".join(self.missing).rsplit(", ", 1))
        if len(self.missing) > 1:
            message = f"This file is missing the {names} columns."
        else:
            article = "an" if names[:1] in "aeiou" else "a"
            message = f"This file is missing {article} {names} column."
        super().__init__(message)


class NetworkErrorCause(str, Enum):
    """Why a call to the accounting provider failed."""

    TIMEOUT = "timeout"
    AUTH_EXPIRED = "auth_expired"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CONNECTION = "connection"
    BAD_RESPONSE = "bad_response"


_NETWORK_MESSAGES = {
    NetworkErrorCause.TIMEOUT: "Xero took too long to respond. Please try again.",
    NetworkErrorCause.AUTH_EXPIRED: (
        "Your Xero connection has expired. Please reconnect Xero and try again."
    ),
    NetworkErrorCause.RATE_LIMITED: (
        "Xero is limiting requests right now. Please wait a minute and try again."
    ),
    NetworkErrorCause.SERVER_ERROR: (
        "Xero is having problems at the moment. Please try again later."
    ),
    NetworkErrorCause.CONNECTION: (
        "Could not reach Xero. Please check your internet connection."
    ),
    NetworkErrorCause.BAD_RESPONSE: "Xero returned a response we could not read.",
}


class NetworkError(IngestionError):
    """A provider call failed; ``cause`` tells the caller what to suggest."""

    def __init__(self, cause: NetworkErrorCause, detail: str = "") -> None:
        self.cause = cause
        self.detail = detail
        super().__init__(_NETWORK_MESSAGES[cause])


class EmptyResultError(IngestionError):
    """The input was readable but produced no records.

    ``kind`` is ``"no_items"`` when the provider returned nothing, and
    ``"no_usable_records"`` when every row or item was rejected. In the
    second case ``errors`` holds the reason for each rejection.
    """

    NO_ITEMS = "no_items"
    NO_USABLE_RECORDS = "no_usable_records"

    def __init__(
        self,
        kind: str,
        user_message: str,
        errors: list[RejectionReason] | None = None,
    ) -> None:
        self.kind = kind
        self.errors = list(errors or [])
        super().__init__(user_message)
