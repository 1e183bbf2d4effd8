import json

import pytest

from tubefetch.api.deps import get_download_service, get_info_service
from tubefetch.main import app
from tubefetch.models.internal import AuthConfig
from tubefetch.services.download import DownloadService
from tubefetch.services.info import VideoInfoService
from tubefetch.services.ytdlp import CompletedProcess, SubprocessExecutor, YTDLPCommandBuilder

INFO_JSON = {
    "title": "Rick Astley - Never Gonna Give You Up (Official Video) [4K]",
    "duration": 212,
    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
    "formats": [
        {"format_id": "sb0", "format_note": "storyboard"},
        {"format_id": "140", "format_note": ""},
        {"format_id": "18"},
        {"format_id": "22", "format_note": "720p"},
    ],
}


class FakeYtDlp:
    """Records invocations and answers them with scripted results"""

    def __init__(self):
        self.calls = []
        self.info_result = CompletedProcess(0, json.dumps(INFO_JSON), "")
        self.download_result = CompletedProcess(0, "[download] 100% of 1.00MiB\n", "")
        self.write_output = True

    @property
    def last_args(self):
        return self.calls[-1].args

    async def run(self, invocation, timeout=None, on_output=None):
        self.calls.append(invocation)
        if "-j" in invocation.args:
            return self.info_result

        if on_output:
            on_output("stdout", self.download_result.stdout)
        if self.write_output and self.download_result.returncode == 0:
            output_path = invocation.args[invocation.args.index("-o") + 1]
            with open(output_path, "wb") as f:
                f.write(b"\x00\x00\x00\x18ftypmp42")
        return self.download_result


@pytest.fixture
def fake_ytdlp(monkeypatch):
    fake = FakeYtDlp()
    monkeypatch.setattr(SubprocessExecutor, "run", staticmethod(fake.run))
    return fake


@pytest.fixture
def scratch_dir(tmp_path):
    return str(tmp_path / "tmp")


@pytest.fixture
def downloads_dir(tmp_path):
    return str(tmp_path / "downloads")


@pytest.fixture
def info_service(scratch_dir):
    return VideoInfoService(
        auth=AuthConfig(),
        builder=YTDLPCommandBuilder(),
        scratch_dir=scratch_dir
    )


@pytest.fixture
def download_service(info_service, downloads_dir):
    return DownloadService(info_service, downloads_dir=downloads_dir)


@pytest.fixture
def api(info_service, download_service):
    app.dependency_overrides[get_info_service] = lambda: info_service
    app.dependency_overrides[get_download_service] = lambda: download_service
    yield app
    app.dependency_overrides.clear()
