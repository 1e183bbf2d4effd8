import time
from datetime import datetime, timezone

from fastapi import APIRouter

from tubefetch.config.settings import config
from tubefetch.core.state import state
from tubefetch.i18n import i18n

router = APIRouter()


@router.get("/")
async def root():
    """API description"""
    return {
        "name": i18n.get("response.service"),
        "version": config.api.version,
        "endpoints": {
            "POST /api/download": {
                "description": "Download a YouTube video or audio",
                "body": {
                    "url": "YouTube URL (required)",
                    "quality": "Video quality: best, 1080, 720, 480, 360 (default: best)",
                    "format": "Output format: mp4, mp3 (default: mp4)",
                    "startTime": "Start time in seconds or HH:MM:SS format (optional)",
                    "endTime": "End time in seconds or HH:MM:SS format (optional)",
                },
            },
            "POST /api/download/info": {
                "description": "Get video information",
                "body": {"url": "YouTube URL (required)"},
            },
            "GET /files/{filename}": {
                "description": "Direct access to finished downloads",
            },
            "GET /health": {
                "description": "Health check endpoint",
            },
        },
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("response.status_ok"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - state.started_at, 3),
        "environment": config.api.environment,
    }


@router.get("/health/full")
async def health_check_full():
    """Detailed health check"""
    return {
        "status": i18n.get("response.status_ok"),
        "ytdlp_version": state.ytdlp_version,
        "js_runtime": state.js_runtime or config.ytdlp.js_runtime,
        "auth_method": state.auth.describe(state.auth.cookies_file_exists()),
        "active_downloads": state.active_downloads,
        "downloads_dir": config.paths.downloads_dir,
    }
