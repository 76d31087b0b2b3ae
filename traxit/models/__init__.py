from .internal import AudioQuality, QualityKind, RequestDescriptor
from .request import AudioDownloadQuery, ProcessRequest
from .response import MediaMetadata, ProcessResponse

__all__ = [
    "AudioDownloadQuery",
    "AudioQuality",
    "MediaMetadata",
    "ProcessRequest",
    "ProcessResponse",
    "QualityKind",
    "RequestDescriptor",
]
