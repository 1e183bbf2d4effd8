from fastapi import HTTPException, Request
from tubefetch.config.settings import config
from tubefetch.core.state import state
from tubefetch.i18n import i18n

class ConcurrencyLimiter:
    """
    Counts in-flight downloads and caps them when
    download.max_concurrent is configured (unbounded otherwise).
    """

    async def __call__(self, request: Request):
        limit = config.download.max_concurrent
        if limit and state.active_downloads >= limit:
            _ = i18n.translator(request.headers.get("accept-language"))
            raise HTTPException(
                status_code=503,
                detail=_("error.server_busy", max=limit)
            )

        state.active_downloads += 1
        try:
            yield
        finally:
            state.active_downloads -= 1

concurrency_limiter = ConcurrencyLimiter()
