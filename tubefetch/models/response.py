from typing import Any, List, Optional

from pydantic import BaseModel


class VideoInfo(BaseModel):
    """Video information response"""
    title: str
    duration: Optional[float] = None
    thumbnail: Optional[str] = None
    formats: List[str] = []


class DownloadResult(BaseModel):
    filename: str
    filepath: str


class InfoResponse(BaseModel):
    success: bool = True
    data: VideoInfo


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[Any]] = None
