import subprocess
from unittest import mock

import pytest

from assistkit.opener import OpenTool, UnsupportedPlatformError, is_file_path, open_command


@pytest.mark.parametrize(
    "path, expected",
    [
        ("file:///tmp/a.txt", True),
        ("https://example.com/a", False),
        ("file://", False),
        ("plain/path", False),
    ],
)
def test_is_file_path(path, expected):
    assert is_file_path(path) is expected


def test_open_command_per_platform():
    assert open_command("x", "linux") == ["xdg-open", "x"]
    assert open_command("x", "darwin") == ["open", "x"]
    assert open_command("x", "win32") == ["rundll32", "url.dll,FileProtocolHandler", "x"]


def test_open_command_unknown_platform():
    with pytest.raises(UnsupportedPlatformError) as info:
        open_command("x", "sunos5")
    assert str(info.value) == "Unsupported Platform"


def test_empty_uri():
    assert OpenTool().invoke("") == "uri is required"


def test_missing_file():
    assert OpenTool().invoke("file:///no/such/file.txt") == "file not exists: no/such/file.txt"


def test_existing_file_is_opened(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "note.txt").write_text("hi")
    done = subprocess.CompletedProcess([], 0)
    with mock.patch("subprocess.run", return_value=done) as run:
        message = OpenTool().invoke("file:///note.txt")
    assert message == "success, open note.txt"
    assert run.call_args[0][0][-1] == "note.txt"


def test_web_url_is_opened():
    done = subprocess.CompletedProcess([], 0)
    with mock.patch("subprocess.run", return_value=done) as run:
        message = OpenTool().invoke("https://example.com")
    assert message == "success, open https://example.com"
    assert run.call_args[0][0][-1] == "https://example.com"


def test_opener_failure():
    error = subprocess.CalledProcessError(3, ["opener"])
    with mock.patch("subprocess.run", side_effect=error):
        message = OpenTool().invoke("https://example.com")
    assert message.startswith("failed to open https://example.com: ")