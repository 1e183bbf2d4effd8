import time
from dataclasses import dataclass, field
from typing import Optional

from tubefetch.models.internal import AuthConfig


@dataclass
class RuntimeState:
    """Centralized runtime state"""
    auth: AuthConfig = field(default_factory=AuthConfig)
    ytdlp_version: str = "unknown"
    started_at: float = field(default_factory=time.monotonic)
    active_downloads: int = 0
    js_runtime: Optional[str] = None

state = RuntimeState()
