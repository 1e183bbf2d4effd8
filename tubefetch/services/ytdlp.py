import asyncio
import codecs
import logging
import re
from contextlib import suppress
from typing import Callable, List, NamedTuple, Optional

from tubefetch.core.errors import BlockedError, SpawnError, ToolError, ToolTimeoutError
from tubefetch.models.internal import AuthConfig, Invocation
from tubefetch.models.request import DownloadRequest
from tubefetch.services.auth import auth_status, client_args, cookie_args, remediation_steps
from tubefetch.services.format import FormatDecision

logger = logging.getLogger("tubefetch.ytdlp")

READ_CHUNK_SIZE = 64 * 1024

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
REFERER = "https://www.youtube.com/"
EXTRA_HEADERS = (
    "Accept-Language:en-US,en;q=0.9",
    "Accept:text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
)

BLOCKED_SIGNATURES = (
    "Sign in to confirm you're not a bot",
    "Only images are available",
    "Requested format is not available",
)

# yt-dlp complains when it cannot write back the cookie jar; harmless
BENIGN_STDERR_RE = re.compile(
    r"^(?=.*cookie)(?=.*(?:permission denied|errno 13|read-only file system|not writable))",
    re.IGNORECASE,
)


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: str
    stderr: str


class SubprocessExecutor:
    """Execute yt-dlp with incremental output capture"""

    @staticmethod
    async def run(
        invocation: Invocation,
        timeout: Optional[float] = None,
        on_output: Optional[Callable[[str, str], None]] = None,
    ) -> CompletedProcess:
        """
        Run a command and collect its stdout and stderr.

        Both pipes are drained concurrently while the process runs, so a chatty
        child never blocks on a full pipe. on_output receives (stream, text)
        for every chunk read. The child is killed and reaped on every early
        exit (timeout, cancellation, error).
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *invocation.argv(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL
            )
        except (OSError, ValueError) as e:
            raise SpawnError(invocation.command, getattr(e, "strerror", None) or str(e)) from e

        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []

        async def drain(stream: asyncio.StreamReader, sink: List[bytes], name: str):
            # multibyte characters may straddle chunk boundaries
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            while True:
                chunk = await stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                sink.append(chunk)
                if on_output:
                    text = decoder.decode(chunk)
                    if text:
                        on_output(name, text)
            if on_output:
                tail = decoder.decode(b"", final=True)
                if tail:
                    on_output(name, tail)

        async def communicate() -> int:
            await asyncio.gather(
                drain(process.stdout, stdout_chunks, "stdout"),
                drain(process.stderr, stderr_chunks, "stderr"),
            )
            return await process.wait()

        try:
            returncode = await asyncio.wait_for(communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            raise ToolTimeoutError(timeout) from None
        finally:
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        return CompletedProcess(
            returncode=returncode,
            stdout=b"".join(stdout_chunks).decode(errors="replace"),
            stderr=b"".join(stderr_chunks).decode(errors="replace"),
        )


class YTDLPResultResolver:
    """Turn a finished yt-dlp run into output text or a typed error"""

    @staticmethod
    def filter_stderr(stderr: str) -> str:
        lines = [line for line in stderr.splitlines() if not BENIGN_STDERR_RE.search(line)]
        return "\n".join(lines).strip()

    @staticmethod
    def is_blocked(stderr: str) -> bool:
        return any(signature in stderr for signature in BLOCKED_SIGNATURES)

    @staticmethod
    def blocked_message(auth: AuthConfig, cookies_available: bool, stderr: str) -> str:
        status = "\n".join(f"- {line}" for line in auth_status(auth, cookies_available))
        steps = "\n".join(remediation_steps(auth, cookies_available))
        return (
            "YouTube is blocking access to this video. This may be due to:\n"
            f"{status}\n"
            "- Bot detection (YouTube may require valid cookies or a PO token)\n"
            "- Age-restricted or region-locked content\n"
            "- Video may be unavailable\n\n"
            "To fix it:\n"
            f"{steps}\n\n"
            f"Original error: {stderr}"
        )

    @staticmethod
    def resolve(
        result: CompletedProcess,
        auth: AuthConfig,
        cookies_available: bool = False,
        allow_partial: bool = True,
    ) -> str:
        """
        Return stdout of a usable run, raise otherwise.

        With allow_partial, a nonzero exit that still produced stdout is
        treated as a warning (yt-dlp does this on partial-format problems).
        """
        if result.returncode == 0:
            return result.stdout

        stderr = YTDLPResultResolver.filter_stderr(result.stderr)

        if YTDLPResultResolver.is_blocked(stderr):
            raise BlockedError(
                YTDLPResultResolver.blocked_message(auth, cookies_available, stderr),
                stderr,
            )

        if allow_partial and result.stdout.strip():
            logger.warning(
                "yt-dlp exited with code %s but produced output, continuing: %s",
                result.returncode,
                stderr[:200],
            )
            return result.stdout

        raise ToolError(result.returncode, stderr or result.stderr.strip())


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    def __init__(self, binary: str = "yt-dlp", js_runtime: Optional[str] = None):
        self.binary = binary
        self.js_runtime = js_runtime

    def _common_args(self, auth: AuthConfig, cookie_path: Optional[str]) -> List[str]:
        args = cookie_args(auth, cookie_path)

        if self.js_runtime:
            args.extend(["--js-runtimes", self.js_runtime])

        args.extend(["--user-agent", USER_AGENT, "--referer", REFERER])
        for header in EXTRA_HEADERS:
            args.extend(["--add-header", header])

        args.extend(client_args(auth, cookie_path))
        return args

    def build_info_command(
        self,
        url: str,
        auth: AuthConfig,
        cookie_path: Optional[str] = None
    ) -> Invocation:
        """Build command for fetching video info (JSON on stdout, no download)"""
        args = ["-j", "--no-playlist"]
        args.extend(self._common_args(auth, cookie_path))
        args.append(url)
        return Invocation(command=self.binary, args=args)

    def build_download_command(
        self,
        request: DownloadRequest,
        output_path: str,
        auth: AuthConfig,
        cookie_path: Optional[str] = None
    ) -> Invocation:
        """Build command for downloading to output_path"""
        args = FormatDecision.decide(request)
        args.extend(FormatDecision.time_range(request))
        args.extend(self._common_args(auth, cookie_path))
        args.extend([
            "-o", output_path,
            "--no-playlist",
            "--restrict-filenames",
        ])
        args.append(request.url)
        return Invocation(command=self.binary, args=args)

    def build_version_command(self) -> Invocation:
        return Invocation(command=self.binary, args=["--version"])
