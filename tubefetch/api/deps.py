from tubefetch.config.settings import config
from tubefetch.core.state import state
from tubefetch.services.download import DownloadService
from tubefetch.services.info import VideoInfoService
from tubefetch.services.ytdlp import YTDLPCommandBuilder


def get_info_service() -> VideoInfoService:
    """Info service bound to the startup AuthConfig"""
    builder = YTDLPCommandBuilder(
        binary=config.ytdlp.binary,
        js_runtime=state.js_runtime or config.ytdlp.js_runtime
    )
    return VideoInfoService(
        auth=state.auth,
        builder=builder,
        scratch_dir=config.paths.scratch_dir,
        timeout=config.download.timeout_seconds
    )


def get_download_service() -> DownloadService:
    return DownloadService(
        info_service=get_info_service(),
        downloads_dir=config.paths.downloads_dir,
        timeout=config.download.timeout_seconds
    )
