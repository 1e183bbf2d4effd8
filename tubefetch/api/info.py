from fastapi import APIRouter, Request, Depends, HTTPException
from tubefetch.api.deps import get_info_service
from tubefetch.core.errors import MediaError
from tubefetch.core.logging import log_info, log_error
from tubefetch.models.request import InfoRequest
from tubefetch.models.response import InfoResponse
from tubefetch.services.info import VideoInfoService
from tubefetch.utils.locale import safe_url_for_log
from tubefetch.i18n import i18n

router = APIRouter()

@router.post("/api/download/info", response_model=InfoResponse)
async def get_video_info(
    request: Request,
    info_request: InfoRequest,
    service: VideoInfoService = Depends(get_info_service)
):
    """Get video information"""
    
    _ = i18n.translator(request.headers.get("accept-language"))
    
    log_info(request, _("log.fetching_info", url=safe_url_for_log(info_request.url)))
    
    try:
        video_info = await service.fetch(info_request.url)
    except MediaError as e:
        log_error(request, f"Info error: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail=_("error.info_failed", reason=e.message)
        )

    log_info(request, _("log.info_retrieved", title=video_info.title))
    return InfoResponse(data=video_info)
