"""A tool that opens a file, directory or web address with the default application."""

from __future__ import annotations

import os
import subprocess
import sys
from urllib.parse import urlparse


class UnsupportedPlatformError(RuntimeError):
    """The platform has no known way to open a URI."""

    def __init__(self, platform: str) -> None:
        super().__init__("Unsupported Platform")
        self.platform = platform


def is_file_path(path: str) -> bool:
    """Whether ``path`` is a ``file:`` URL with a path."""
    try:
        parsed = urlparse(path)
    except ValueError:
        return False
    return parsed.scheme == "file" and parsed.path != ""


def open_command(uri: str, platform: str | None = None) -> list[str]:
    """The command that opens ``uri`` on ``platform`` (default: this one)."""
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return ["rundll32", "url.dll,FileProtocolHandler", uri]
    if platform == "darwin":
        return ["open", uri]
    if platform.startswith("linux"):
        return ["xdg-open", uri]
    raise UnsupportedPlatformError(platform)


def open_uri(uri: str) -> None:
    """Open ``uri``; raises when the opener fails or the platform is unknown."""
    subprocess.run(open_command(uri), check=True)


class OpenTool:
    """Opens URIs and reports the outcome as a message."""

    name = "open"
    description = "open a file/dir/web url in the system by default application"

    def invoke(self, uri: str) -> str:
        if not uri:
            return "uri is required"
        if is_file_path(uri):
            if uri.startswith("file:///"):
                uri = uri[len("file:///") :]
            if not os.path.exists(uri):
                return f"file not exists: {uri}"
        try:
            open_uri(uri)
        except (OSError, subprocess.CalledProcessError, UnsupportedPlatformError) as exc:
            return f"failed to open {uri}: {exc}"
        return f"success, open {uri}"