from .internal import AuthConfig, Invocation
from .request import DownloadRequest, InfoRequest
from .response import DownloadResult, ErrorResponse, InfoResponse, VideoInfo

__all__ = [
    "AuthConfig",
    "DownloadRequest",
    "DownloadResult",
    "ErrorResponse",
    "InfoRequest",
    "InfoResponse",
    "Invocation",
    "VideoInfo",
]
