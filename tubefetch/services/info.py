import json
import logging
from typing import Optional

from pydantic import ValidationError

from tubefetch.core.errors import ParseError
from tubefetch.models.internal import AuthConfig
from tubefetch.models.response import VideoInfo
from tubefetch.services.auth import scratch_cookies
from tubefetch.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder, YTDLPResultResolver
from tubefetch.utils.locale import safe_url_for_log

logger = logging.getLogger("tubefetch.info")


class VideoInfoService:
    """Video info fetching service"""

    def __init__(
        self,
        auth: AuthConfig,
        builder: YTDLPCommandBuilder,
        scratch_dir: str,
        timeout: Optional[float] = None
    ):
        self.auth = auth
        self.builder = builder
        self.scratch_dir = scratch_dir
        self.timeout = timeout

    async def fetch(self, url: str) -> VideoInfo:
        """Run an info probe and extract title, duration, thumbnail and format labels"""
        async with scratch_cookies(self.auth, self.scratch_dir) as cookie_path:
            cmd = self.builder.build_info_command(url, self.auth, cookie_path)
            logger.debug("Fetching info: %s", cmd)
            result = await SubprocessExecutor.run(cmd, timeout=self.timeout)

        stdout = YTDLPResultResolver.resolve(
            result,
            self.auth,
            cookies_available=cookie_path is not None,
            allow_partial=True,
        )
        video_info = self.parse(stdout)
        logger.info("Info retrieved for %s: %s", safe_url_for_log(url), video_info.title)
        return video_info

    @staticmethod
    def parse(stdout: str) -> VideoInfo:
        try:
            info = json.loads(stdout)
        except json.JSONDecodeError:
            raise ParseError() from None

        if not isinstance(info, dict) or not isinstance(info.get("title"), str):
            raise ParseError()

        formats = info.get("formats") or []
        if not isinstance(formats, list):
            raise ParseError()

        try:
            return VideoInfo(
                title=info["title"],
                duration=info.get("duration"),
                thumbnail=info.get("thumbnail"),
                formats=[
                    f["format_note"]
                    for f in formats
                    if isinstance(f, dict) and f.get("format_note")
                ],
            )
        except ValidationError:
            raise ParseError() from None
