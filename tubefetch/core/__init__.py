from .errors import (
    BlockedError,
    MediaError,
    OutputMissingError,
    ParseError,
    SpawnError,
    ToolError,
    ToolTimeoutError,
)

__all__ = [
    "BlockedError",
    "MediaError",
    "OutputMissingError",
    "ParseError",
    "SpawnError",
    "ToolError",
    "ToolTimeoutError",
]
