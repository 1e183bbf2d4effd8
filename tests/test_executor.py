import os
import sys

import pytest

from tubefetch.core.errors import BlockedError, SpawnError, ToolError, ToolTimeoutError
from tubefetch.models.internal import AuthConfig, Invocation
from tubefetch.services.ytdlp import CompletedProcess, SubprocessExecutor, YTDLPResultResolver


def python(code):
    return Invocation(command=sys.executable, args=["-c", code])


@pytest.mark.asyncio
async def test_run_captures_both_streams():
    result = await SubprocessExecutor.run(python(
        "import sys; print('out'); sys.stderr.write('err\\n'); sys.exit(3)"
    ))

    assert result.returncode == 3
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"


@pytest.mark.asyncio
async def test_run_handles_single_long_line():
    # yt-dlp -j prints the whole document on one line
    result = await SubprocessExecutor.run(python("print('x' * 300000)"))

    assert result.returncode == 0
    assert len(result.stdout.strip()) == 300000


@pytest.mark.asyncio
async def test_run_reports_chunks_incrementally():
    seen = []
    await SubprocessExecutor.run(
        python("import sys; print('progress'); sys.stderr.write('warn\\n')"),
        on_output=lambda stream, text: seen.append((stream, text)),
    )

    assert "".join(t for s, t in seen if s == "stdout").strip() == "progress"
    assert "".join(t for s, t in seen if s == "stderr").strip() == "warn"


@pytest.mark.asyncio
async def test_missing_executable_is_spawn_error():
    with pytest.raises(SpawnError) as exc_info:
        await SubprocessExecutor.run(Invocation(command="/nonexistent/yt-dlp", args=["--version"]))

    assert "Make sure /nonexistent/yt-dlp is installed" in exc_info.value.message


@pytest.mark.asyncio
async def test_timeout_kills_child(tmp_path):
    pid_file = tmp_path / "child.pid"
    code = (
        "import os, time\n"
        f"with open({str(pid_file)!r}, 'w') as f:\n"
        "    f.write(str(os.getpid()))\n"
        "time.sleep(30)\n"
    )

    with pytest.raises(ToolTimeoutError) as exc_info:
        await SubprocessExecutor.run(python(code), timeout=2)

    assert exc_info.value.timeout == 2
    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.asyncio
async def test_null_byte_in_argument_is_spawn_error():
    with pytest.raises(SpawnError):
        await SubprocessExecutor.run(Invocation(
            command=sys.executable,
            args=["-c", "print(1)", "https://youtu.be/a\x00b"],
        ))


@pytest.mark.asyncio
async def test_multibyte_output_split_across_chunks():
    seen = []
    # 3-byte characters do not line up with the 64 KiB read size
    result = await SubprocessExecutor.run(
        python("import sys; sys.stdout.buffer.write('日'.encode() * 30000)"),
        on_output=lambda stream, text: seen.append((stream, text)),
    )

    streamed = "".join(t for s, t in seen if s == "stdout")
    assert streamed == "日" * 30000
    assert result.stdout == streamed


BOT_STDERR = (
    "WARNING: [youtube] dQw4w9WgXcQ: unable to extract player\n"
    "ERROR: [youtube] dQw4w9WgXcQ: Sign in to confirm you're not a bot. "
    "Use --cookies-from-browser or --cookies for the authentication."
)


def test_success_returns_stdout():
    result = CompletedProcess(0, '{"title": "x"}', "WARNING: something")
    assert YTDLPResultResolver.resolve(result, AuthConfig()) == '{"title": "x"}'


@pytest.mark.parametrize("stderr", [
    BOT_STDERR,
    "ERROR: [youtube] abc: Only images are available for download.",
    "ERROR: [youtube] abc: Requested format is not available. Use --list-formats",
])
def test_bot_detection_is_blocked_error(stderr):
    result = CompletedProcess(1, "", stderr)

    with pytest.raises(BlockedError) as exc_info:
        YTDLPResultResolver.resolve(result, AuthConfig())

    assert not isinstance(exc_info.value, ToolError)
    assert exc_info.value.message.startswith("YouTube is blocking access to this video")
    assert "Original error: " in exc_info.value.message


def test_blocked_wins_over_partial_stdout():
    result = CompletedProcess(1, '{"title": "x"}', BOT_STDERR)

    with pytest.raises(BlockedError):
        YTDLPResultResolver.resolve(result, AuthConfig(), allow_partial=True)


def test_blocked_message_reflects_token_status():
    unset = YTDLPResultResolver.blocked_message(AuthConfig(), False, BOT_STDERR)
    token = YTDLPResultResolver.blocked_message(AuthConfig(po_token="abc"), False, BOT_STDERR)

    assert "PO token is NOT set (YT_DLP_PO_TOKEN)" in unset
    assert "export YT_DLP_PO_TOKEN=your_token" in unset
    assert "- PO token is set" in token


def test_blocked_message_reflects_cookie_status():
    in_use = YTDLPResultResolver.blocked_message(AuthConfig(cookies_file="/c.txt"), True, BOT_STDERR)
    missing = YTDLPResultResolver.blocked_message(AuthConfig(cookies_file="/c.txt"), False, BOT_STDERR)
    browser = YTDLPResultResolver.blocked_message(AuthConfig(cookies_browser="brave"), False, BOT_STDERR)
    bogus = YTDLPResultResolver.blocked_message(AuthConfig(cookies_browser="lynx"), False, BOT_STDERR)

    assert "Cookies file is in use" in in_use
    assert "Export fresh cookies" in in_use
    assert "Cookies file is configured but was not found: /c.txt" in missing
    assert "Browser cookies are read from brave" in browser
    assert "YT_DLP_COOKIES_BROWSER=lynx is not supported" in bogus


def test_partial_stdout_is_accepted_for_probe():
    result = CompletedProcess(1, '{"title": "x"}', "ERROR: unable to download thumbnail")
    assert YTDLPResultResolver.resolve(result, AuthConfig(), allow_partial=True) == '{"title": "x"}'


def test_partial_stdout_is_rejected_for_download():
    result = CompletedProcess(1, "[download] 42.0%", "ERROR: fragment 3 not found")

    with pytest.raises(ToolError) as exc_info:
        YTDLPResultResolver.resolve(result, AuthConfig(), allow_partial=False)

    assert exc_info.value.exit_code == 1
    assert exc_info.value.stderr == "ERROR: fragment 3 not found"


def test_benign_cookie_noise_is_filtered():
    stderr = (
        "WARNING: [Errno 13] Permission denied: '/run/secrets/cookies.txt'\n"
        "ERROR: [youtube] abc: Video unavailable"
    )
    result = CompletedProcess(1, "", stderr)

    with pytest.raises(ToolError) as exc_info:
        YTDLPResultResolver.resolve(result, AuthConfig())

    assert exc_info.value.stderr == "ERROR: [youtube] abc: Video unavailable"


def test_only_benign_noise_keeps_raw_stderr():
    stderr = "WARNING: cookie file is not writable"
    with pytest.raises(ToolError) as exc_info:
        YTDLPResultResolver.resolve(CompletedProcess(2, "", stderr), AuthConfig())

    assert exc_info.value.message == stderr
