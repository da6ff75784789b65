"""A tool that clones or pulls git repositories under a base directory."""

from __future__ import annotations

import enum
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union


class GitCloneAction(str, enum.Enum):
    """What to do with the repository."""

    CLONE = "clone"
    PULL = "pull"


@dataclass
class GitCloneRequest:
    """The repository URL and the action to perform on it."""

    url: str = ""
    action: Union[GitCloneAction, str] = GitCloneAction.CLONE

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "GitCloneRequest":
        if not isinstance(data, Mapping):
            raise ValueError("request must be a JSON object")
        url = data.get("url") or ""
        raw_action = data.get("action") or ""
        if not isinstance(url, str) or not isinstance(raw_action, str):
            raise ValueError("url and action must be strings")
        try:
            action: Union[GitCloneAction, str] = GitCloneAction(raw_action)
        except ValueError:
            action = raw_action
        return cls(url=url, action=action)


@dataclass
class GitCloneResponse:
    """Either a message or an error text."""

    message: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "error": self.error}


def with_git(url: str) -> str:
    """``url`` ending in ``.git``."""
    return url if url.endswith(".git") else url + ".git"


def is_valid_git_url(url: str) -> tuple[bool, str]:
    """Check ``url`` and return it in a form ``git clone`` accepts."""
    clean = url[: -len(".git")] if url.endswith(".git") else url
    if len(clean.split("/")) < 2:
        return False, ""
    if url.startswith("git@"):
        if ":" in url:
            return True, with_git(url)
        return False, ""
    if url.startswith(("http://", "https://")):
        return True, with_git(url)
    return True, "https://" + with_git(url)


def extract_repo_dir(url: str) -> tuple[str, str]:
    """The group and repository name at the end of ``url``."""
    parts = url.split("/")
    if len(parts) < 2:
        raise ValueError(f"cannot find group and repository in url: {url}")
    name = parts[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return parts[-2], name


def _run_git(args: list[str]) -> tuple[bool, str, str]:
    """Run git; return success, a short failure reason and the combined output."""
    try:
        completed = subprocess.run(args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False)
    except OSError as exc:
        return False, str(exc), ""
    output = (completed.stdout or b"").decode("utf-8", errors="replace")
    if completed.returncode != 0:
        return False, f"exit status {completed.returncode}", output
    return True, "", output


class GitCloneTool:
    """Clones repositories into ``base_dir/<group>/<repo>`` or pulls them there."""

    name = "gitclone"
    description = "git clone or pull a repository"

    def __init__(self, base_dir: str | Path = "./data/repos") -> None:
        if not str(base_dir):
            raise ValueError("base dir cannot be empty")
        self.base_dir = Path(base_dir)

    def invoke(self, request: GitCloneRequest | Mapping[str, Any]) -> GitCloneResponse:
        """Carry out ``request``; failures are reported in the response's error."""
        if not isinstance(request, GitCloneRequest):
            request = GitCloneRequest._from_dict(request)
        if not request.url:
            return GitCloneResponse(error="URL cannot be empty")

        valid, clone_url = is_valid_git_url(request.url)
        if not valid:
            return GitCloneResponse(error=f"Invalid Git URL format: {request.url}")

        group, repo_name = extract_repo_dir(clone_url)
        repo_path = self.base_dir / group / repo_name

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return GitCloneResponse(error=f"Failed to create directory: {exc}")

        if request.action == GitCloneAction.CLONE:
            if repo_path.exists():
                return GitCloneResponse(error="Repository already exists")
            ok, reason, output = _run_git(["git", "clone", clone_url, str(repo_path)])
            if not ok:
                return GitCloneResponse(error=f"Clone failed: {reason}, output: {output}")
        elif request.action == GitCloneAction.PULL:
            if not repo_path.exists():
                return GitCloneResponse(error=f"repo does not exist: {repo_path}")
            ok, reason, output = _run_git(["git", "-C", str(repo_path), "pull"])
            if not ok:
                return GitCloneResponse(error=f"Pull failed: {reason}, output: {output}")

        return GitCloneResponse(message=f"success, repo path: {os.path.abspath(repo_path)}")