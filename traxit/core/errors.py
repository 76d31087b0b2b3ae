"""
Error taxonomy for the API boundary.

Every failure that reaches a client is a ``TraxitError`` subclass; the
exception handler in ``traxit.main`` renders it as JSON. Extraction
adapters raise ``ExtractorFailure`` instead, which never crosses the
API boundary: the metadata fetcher and the download orchestrator turn
it into a classified ``TraxitError``.
"""
import re
from enum import Enum
from typing import Any, Dict, Optional, Pattern, Tuple

DETAIL_MAX_CHARS = 300


class ExtractionCause(str, Enum):
    GONE = "gone"
    FORBIDDEN = "forbidden"
    PRIVATE = "private"
    REQUIRES_SIGN_IN = "requires_sign_in"
    COPYRIGHT = "copyright"
    GENERIC = "generic"


# Ordered: first match wins. Messages come from yt-dlp (library or CLI)
# and only ever arrive as free text.
FAILURE_PATTERNS: Tuple[Tuple[Pattern[str], ExtractionCause, str], ...] = (
    (re.compile(r"\b410\b", re.IGNORECASE), ExtractionCause.GONE, "error.video_gone"),
    (re.compile(r"\b403\b", re.IGNORECASE), ExtractionCause.FORBIDDEN, "error.video_forbidden"),
    (re.compile(r"private", re.IGNORECASE), ExtractionCause.PRIVATE, "error.video_private"),
    (re.compile(r"sign in", re.IGNORECASE), ExtractionCause.REQUIRES_SIGN_IN, "error.video_sign_in"),
    (re.compile(r"copyright", re.IGNORECASE), ExtractionCause.COPYRIGHT, "error.video_copyright"),
    (re.compile(r"extract", re.IGNORECASE), ExtractionCause.GENERIC, "error.extractor_outdated"),
)

DEFAULT_FAILURE = (ExtractionCause.GENERIC, "error.fetch_info_failed")


def classify_failure(message: Optional[str]) -> Tuple[ExtractionCause, str]:
    """Map a free-text extractor message to (cause, message key)"""
    if message:
        for pattern, cause, message_key in FAILURE_PATTERNS:
            if pattern.search(message):
                return cause, message_key
    return DEFAULT_FAILURE


class ExtractorFailure(Exception):
    """Raised by an extraction strategy; internal to the service layer"""

    def __init__(self, strategy: str, message: str):
        super().__init__(f"{strategy}: {message}")
        self.strategy = strategy
        self.message = message


class TraxitError(Exception):
    """Base for every failure that is reported to the client"""

    kind = "InternalError"
    status_code = 500
    message_key = "error.internal"

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        message_key: Optional[str] = None,
        **params: Any
    ):
        super().__init__(detail or self.kind)
        self.detail = detail
        if message_key:
            self.message_key = message_key
        self.params = params

    @property
    def title_key(self) -> str:
        return f"kind.{self.kind}"

    def extra_fields(self) -> Dict[str, Any]:
        return {}

    def headers(self) -> Dict[str, str]:
        return {}

    def to_dict(self, translate, include_detail: bool = False) -> Dict[str, Any]:
        body = {
            "error": translate(self.title_key),
            "kind": self.kind,
            "message": translate(self.message_key, **self.params),
        }
        body.update(self.extra_fields())
        if include_detail and self.detail:
            body["detail"] = self.detail[:DETAIL_MAX_CHARS]
        return body


class InvalidUrlError(TraxitError):
    kind = "InvalidUrl"
    status_code = 400
    message_key = "error.invalid_url"


class UnsupportedPlatformError(TraxitError):
    kind = "UnsupportedPlatform"
    status_code = 400
    message_key = "error.unsupported_platform"


class NotYetImplementedError(TraxitError):
    kind = "NotYetImplemented"
    status_code = 501
    message_key = "error.not_implemented"


class ExtractionFailedError(TraxitError):
    kind = "ExtractionFailed"
    status_code = 500
    message_key = "error.fetch_info_failed"

    def __init__(self, detail: Optional[str] = None, *, cause: ExtractionCause = ExtractionCause.GENERIC, **kwargs: Any):
        super().__init__(detail, **kwargs)
        self.cause = cause

    @classmethod
    def from_failure(cls, failure: ExtractorFailure) -> "ExtractionFailedError":
        cause, message_key = classify_failure(failure.message)
        return cls(str(failure), cause=cause, message_key=message_key)

    def extra_fields(self) -> Dict[str, Any]:
        return {"cause": self.cause.value}


class TemporarilyUnavailableError(TraxitError):
    kind = "TemporarilyUnavailable"
    status_code = 503
    message_key = "error.shorts_unavailable"


class TranscodeFailedError(TraxitError):
    kind = "TranscodeFailed"
    status_code = 500
    message_key = "error.transcode_failed"


class ConfigurationError(TraxitError):
    kind = "ConfigurationError"
    status_code = 500
    message_key = "error.storage_unwritable"


class DeliveryFailedError(TraxitError):
    kind = "DeliveryFailed"
    status_code = 500
    message_key = "error.read_failed"


class ClientDisconnectedError(TraxitError):
    kind = "ClientDisconnected"
    # nginx convention; nobody is listening anymore
    status_code = 499
    message_key = "error.client_disconnected"


class RateLimitedError(TraxitError):
    kind = "RateLimited"
    status_code = 429
    message_key = "error.rate_limit"

    def __init__(self, retry_after: int, **kwargs: Any):
        super().__init__(f"retry after {retry_after}s", seconds=retry_after, **kwargs)
        self.retry_after = retry_after

    def headers(self) -> Dict[str, str]:
        return {"Retry-After": str(self.retry_after)}
