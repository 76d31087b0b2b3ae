from .errors import (
    ClientDisconnectedError,
    ConfigurationError,
    DeliveryFailedError,
    ExtractionCause,
    ExtractionFailedError,
    ExtractorFailure,
    InvalidUrlError,
    NotYetImplementedError,
    RateLimitedError,
    TemporarilyUnavailableError,
    TranscodeFailedError,
    TraxitError,
    UnsupportedPlatformError,
)

__all__ = [
    "ClientDisconnectedError",
    "ConfigurationError",
    "DeliveryFailedError",
    "ExtractionCause",
    "ExtractionFailedError",
    "ExtractorFailure",
    "InvalidUrlError",
    "NotYetImplementedError",
    "RateLimitedError",
    "TemporarilyUnavailableError",
    "TranscodeFailedError",
    "TraxitError",
    "UnsupportedPlatformError",
]
