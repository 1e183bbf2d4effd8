import logging
import os
import uuid
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, List, Optional

import aiofiles

from tubefetch.models.internal import AuthConfig, SUPPORTED_BROWSERS

logger = logging.getLogger("tubefetch.auth")

CLIENTS_WEB = "youtube:player_client=web"
CLIENTS_FALLBACK = "youtube:player_client=web,ios,android"


def cookie_args(auth: AuthConfig, cookie_path: Optional[str]) -> List[str]:
    """
    Cookie flags, cookies file first, then browser cookies.
    cookie_path is the scratch copy, None when no usable file exists.
    """
    if cookie_path:
        return ["--cookies", cookie_path]
    if auth.browser:
        return ["--cookies-from-browser", auth.browser]
    return []


def client_args(auth: AuthConfig, cookie_path: Optional[str]) -> List[str]:
    # ios/android clients reject injected cookies
    if cookie_path or auth.browser:
        return ["--extractor-args", CLIENTS_WEB]
    if auth.po_token:
        return ["--extractor-args", f"{CLIENTS_WEB};po_token=web+{auth.po_token}"]
    return ["--extractor-args", CLIENTS_FALLBACK]


def auth_status(auth: AuthConfig, cookies_available: bool) -> List[str]:
    """Human-readable lines describing the active auth configuration"""
    lines = []
    if cookies_available:
        lines.append("Cookies file is in use (YT_DLP_COOKIES_FILE); it may be expired or from a logged-out session")
    elif auth.cookies_file:
        lines.append(f"Cookies file is configured but was not found: {auth.cookies_file}")

    if auth.browser and not cookies_available:
        lines.append(f"Browser cookies are read from {auth.browser} (YT_DLP_COOKIES_BROWSER)")
    elif auth.cookies_browser and not auth.browser:
        lines.append(
            f"YT_DLP_COOKIES_BROWSER={auth.cookies_browser} is not supported "
            f"(use one of: {', '.join(SUPPORTED_BROWSERS)})"
        )

    if auth.po_token:
        lines.append("PO token is set")
    else:
        lines.append("PO token is NOT set (YT_DLP_PO_TOKEN)")
    return lines


def remediation_steps(auth: AuthConfig, cookies_available: bool) -> List[str]:
    if cookies_available or auth.browser:
        return [
            "1. Log in to YouTube in your browser and play any video",
            "2. Export fresh cookies in Netscape format (e.g. with a cookies.txt extension)",
            "3. Set them as: export YT_DLP_COOKIES_FILE=/path/to/cookies.txt",
            f"   or read them directly: export YT_DLP_COOKIES_BROWSER=<{'|'.join(SUPPORTED_BROWSERS)}>",
        ]
    return [
        "1. Open YouTube in browser, press F12 -> Network tab",
        "2. Filter by 'v1/player', play a video",
        "3. Find 'serviceIntegrityDimensions.poToken' in the request payload",
        "4. Set it as: export YT_DLP_PO_TOKEN=your_token",
        "   or provide cookies with YT_DLP_COOKIES_FILE / YT_DLP_COOKIES_BROWSER",
    ]


@asynccontextmanager
async def scratch_cookies(auth: AuthConfig, scratch_dir: str) -> AsyncIterator[Optional[str]]:
    """
    Copy the configured cookies file to a private scratch path for one invocation.

    yt-dlp rewrites the cookie jar on exit, which fails on read-only mounts,
    so it always gets a writable copy. Each invocation has its own copy and the
    copy is removed afterwards. Yields None when no usable cookies file exists.
    """
    if not auth.cookies_file:
        yield None
        return

    if not os.path.isfile(auth.cookies_file):
        logger.warning("Cookies file not found: %s", auth.cookies_file)
        yield None
        return

    os.makedirs(scratch_dir, exist_ok=True)
    scratch_path = os.path.join(scratch_dir, f"cookies_{uuid.uuid4().hex}.txt")

    try:
        async with aiofiles.open(auth.cookies_file, "rb") as src:
            content = await src.read()
        async with aiofiles.open(scratch_path, "wb") as dst:
            await dst.write(content)
    except OSError as e:
        logger.warning("Could not copy cookies file %s: %s", auth.cookies_file, e)
        with suppress(OSError):
            os.remove(scratch_path)
        yield None
        return

    try:
        yield scratch_path
    finally:
        with suppress(OSError):
            os.remove(scratch_path)
