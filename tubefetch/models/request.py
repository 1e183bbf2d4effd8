import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional
from urllib.parse import urlparse

YOUTUBE_URL_RE = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+")

Quality = Literal["best", "1080", "720", "480", "360"]
OutputFormat = Literal["mp4", "mp3"]


class InfoRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(..., description="YouTube URL")

    @field_validator("url")
    @classmethod
    def validate_youtube_url(cls, v: str) -> str:
        """Require a well-formed http(s) URL on a YouTube domain"""
        v = v.strip()
        if any(c.isspace() or not c.isprintable() for c in v):
            raise ValueError("Invalid URL")
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL")
        if not YOUTUBE_URL_RE.match(v):
            raise ValueError("Invalid YouTube URL")
        return v


class DownloadRequest(InfoRequest):
    quality: Quality = Field("best", description="Video quality: best, 1080, 720, 480, 360")
    format: OutputFormat = Field("mp4", description="Output format: mp4, mp3")
    start_time: Optional[str] = Field(None, alias="startTime", description="Start time in seconds or HH:MM:SS")
    end_time: Optional[str] = Field(None, alias="endTime", description="End time in seconds or HH:MM:SS")

    @property
    def extension(self) -> str:
        return "mp3" if self.format == "mp3" else "mp4"

    @property
    def has_time_range(self) -> bool:
        return bool(self.start_time or self.end_time)
