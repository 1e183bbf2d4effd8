from typing import List, Optional
from tubefetch.models.request import DownloadRequest

QUALITY_HEIGHTS = {
    "best": None,
    "1080": 1080,
    "720": 720,
    "480": 480,
    "360": 360,
}


class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def selector(quality: Optional[str]) -> str:
        """
        yt-dlp format expression for an mp4 download.
        Prefers an mp4+m4a pair under the height cap, then a progressive mp4,
        then whatever is best. Unknown qualities get the uncapped selector.
        """
        height = QUALITY_HEIGHTS.get(quality or "best")
        cap = f"[height<={height}]" if height else ""
        return (
            f"bestvideo{cap}[ext=mp4]+bestaudio[ext=m4a]/"
            f"best{cap}[ext=mp4]/best"
        )

    @staticmethod
    def decide(request: DownloadRequest) -> List[str]:
        """Format/audio arguments for a download"""
        if request.format == "mp3":
            return ["-x", "--audio-format", "mp3", "--audio-quality", "0"]

        return [
            "-f", FormatDecision.selector(request.quality),
            "--merge-output-format", "mp4",
        ]

    @staticmethod
    def time_range(request: DownloadRequest) -> List[str]:
        """Download-section arguments; empty when no bound is set"""
        if not request.has_time_range:
            return []

        section = f"*{request.start_time or '0'}-{request.end_time or 'inf'}"
        return ["--download-sections", section, "--force-keyframes-at-cuts"]
