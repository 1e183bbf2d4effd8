import os
import re
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

SUPPORTED_BROWSERS = ("chrome", "firefox", "edge", "opera", "safari", "brave")

PO_TOKEN_RE = re.compile(r"(po_token=web\+)[^;\s]+")


class AuthConfig(BaseModel):
    """Process-wide yt-dlp authentication settings, built once at startup"""
    model_config = ConfigDict(frozen=True)

    po_token: Optional[str] = None
    cookies_file: Optional[str] = None
    cookies_browser: Optional[str] = None

    @classmethod
    def from_settings(cls, ytdlp_config) -> "AuthConfig":
        def clean(value: Optional[str]) -> Optional[str]:
            if value is None:
                return None
            return value.strip() or None

        return cls(
            po_token=clean(ytdlp_config.po_token),
            cookies_file=clean(ytdlp_config.cookies_file),
            cookies_browser=clean(ytdlp_config.cookies_browser),
        )

    @property
    def browser(self) -> Optional[str]:
        """Normalized browser name, or None when unset or unsupported"""
        if not self.cookies_browser:
            return None
        name = self.cookies_browser.lower()
        return name if name in SUPPORTED_BROWSERS else None

    def cookies_file_exists(self) -> bool:
        return bool(self.cookies_file and os.path.isfile(self.cookies_file))

    def describe(self, cookies_available: bool) -> str:
        """Name of the mechanism the command builder will use"""
        if cookies_available:
            return "cookies_file"
        if self.browser:
            return "cookies_browser"
        if self.po_token:
            return "po_token"
        return "none"


class Invocation(BaseModel):
    """A concrete yt-dlp command line"""
    command: str
    args: List[str]

    def argv(self) -> List[str]:
        return [self.command, *self.args]

    def __str__(self) -> str:
        """Command line for logs, with the PO token masked"""
        return PO_TOKEN_RE.sub(r"\1***", " ".join(self.argv()))
