from typing import Optional


class MediaError(Exception):
    """Base class for failures raised while driving yt-dlp"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SpawnError(MediaError):
    """The yt-dlp executable could not be launched"""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"Failed to start {command}: {reason}. Make sure {command} is installed."
        )
        self.command = command
        self.reason = reason


class ToolError(MediaError):
    """yt-dlp exited with a nonzero status for an unclassified reason"""

    status_code = 502

    def __init__(self, exit_code: Optional[int], stderr: str):
        super().__init__(stderr or f"yt-dlp exited with code {exit_code}")
        self.exit_code = exit_code
        self.stderr = stderr


class OutputMissingError(ToolError):
    """yt-dlp reported success but the expected file is absent"""

    status_code = 500

    def __init__(self, path: str):
        super().__init__(0, f"Output file not found after download: {path}")
        self.path = path


class BlockedError(MediaError):
    """YouTube bot detection rejected the request"""

    status_code = 403

    def __init__(self, message: str, stderr: str):
        super().__init__(message)
        self.stderr = stderr


class ToolTimeoutError(MediaError):
    status_code = 504

    def __init__(self, timeout: float):
        super().__init__(f"yt-dlp did not finish within {timeout:g} seconds")
        self.timeout = timeout


class ParseError(MediaError):
    """yt-dlp succeeded but its output was not the expected JSON document"""

    def __init__(self, detail: str = "Failed to parse video info"):
        super().__init__(detail)
