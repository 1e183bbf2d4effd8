import asyncio
import logging
import os
from typing import Optional

from tubefetch.core.errors import OutputMissingError
from tubefetch.models.request import DownloadRequest
from tubefetch.models.response import DownloadResult
from tubefetch.services.auth import scratch_cookies
from tubefetch.services.info import VideoInfoService
from tubefetch.services.ytdlp import SubprocessExecutor, YTDLPResultResolver
from tubefetch.utils.filename import unique_filename
from tubefetch.utils.locale import safe_url_for_log

logger = logging.getLogger("tubefetch.download")


def log_tool_output(stream: str, text: str) -> None:
    for line in text.splitlines():
        line = line.strip()
        if line:
            logger.debug("yt-dlp %s: %s", stream, line)


class DownloadService:
    """Video download service"""

    def __init__(
        self,
        info_service: VideoInfoService,
        downloads_dir: str,
        timeout: Optional[float] = None
    ):
        self.info_service = info_service
        self.downloads_dir = downloads_dir
        self.timeout = timeout

    async def download(self, request: DownloadRequest) -> DownloadResult:
        """
        Probe the title, then download into the downloads directory.
        Returns the generated filename and its absolute path.
        """
        await asyncio.to_thread(os.makedirs, self.downloads_dir, exist_ok=True)

        # The probe is only used for naming
        info = await self.info_service.fetch(request.url)
        filename = unique_filename(info.title, request.extension)
        output_path = os.path.abspath(os.path.join(self.downloads_dir, filename))

        auth = self.info_service.auth
        async with scratch_cookies(auth, self.info_service.scratch_dir) as cookie_path:
            cmd = self.info_service.builder.build_download_command(
                request, output_path, auth, cookie_path
            )
            logger.info("Starting download: %s", cmd)
            result = await SubprocessExecutor.run(
                cmd,
                timeout=self.timeout,
                on_output=log_tool_output
            )

        YTDLPResultResolver.resolve(
            result,
            auth,
            cookies_available=cookie_path is not None,
            allow_partial=False,
        )

        if not os.path.isfile(output_path):
            raise OutputMissingError(output_path)

        logger.info("Download finished for %s: %s", safe_url_for_log(request.url), filename)
        return DownloadResult(filename=filename, filepath=output_path)
