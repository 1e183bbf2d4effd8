import os
import aiofiles
from urllib.parse import quote
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import StreamingResponse
from tubefetch.api.deps import get_download_service
from tubefetch.core.errors import MediaError
from tubefetch.core.logging import log_info, log_error
from tubefetch.infra.concurrency import concurrency_limiter
from tubefetch.models.request import DownloadRequest
from tubefetch.models.response import DownloadResult
from tubefetch.services.download import DownloadService
from tubefetch.utils.locale import safe_url_for_log
from tubefetch.i18n import i18n

CHUNK_SIZE = 4 * 1024 * 1024

MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
}

router = APIRouter()


def file_response(request: Request, result: DownloadResult) -> StreamingResponse:
    """Stream a finished download back as an attachment"""
    file_size = os.path.getsize(result.filepath)
    ext = os.path.splitext(result.filename)[1].lstrip(".")

    async def generate():
        try:
            async with aiofiles.open(result.filepath, "rb") as f:
                while True:
                    chunk = await f.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            log_error(request, f"Error sending file: {str(e)}")
            raise

    encoded_filename = quote(result.filename)
    headers = {
        "Content-Disposition": f"attachment; filename=\"{result.filename}\"; filename*=UTF-8''{encoded_filename}",
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-cache",
        "Content-Length": str(file_size),
    }

    log_info(request, f"Sending {result.filename} ({file_size / 1024 / 1024:.1f} MB)")

    return StreamingResponse(
        generate(),
        media_type=MEDIA_TYPES.get(ext, "application/octet-stream"),
        headers=headers
    )


@router.post("/api/download", dependencies=[Depends(concurrency_limiter)])
async def download_video(
    request: Request,
    download_request: DownloadRequest,
    service: DownloadService = Depends(get_download_service)
):
    """Download a YouTube video or audio extract"""

    _ = i18n.translator(request.headers.get("accept-language"))

    log_info(request, _("log.processing_download", url=safe_url_for_log(download_request.url)))

    try:
        result = await service.download(download_request)
    except MediaError as e:
        log_error(request, f"Download error: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail=_("error.download_failed", reason=e.message)
        )

    try:
        return file_response(request, result)
    except OSError as e:
        log_error(request, f"Error sending file: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.send_failed"))
