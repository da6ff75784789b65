import os
import subprocess
from unittest import mock

import pytest

from assistkit.gitclone import (
    GitCloneAction,
    GitCloneRequest,
    GitCloneTool,
    extract_repo_dir,
    is_valid_git_url,
    with_git,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("git@host.example.com:group/repo", (True, "git@host.example.com:group/repo.git")),
        ("https://host.example.com/group/repo.git", (True, "https://host.example.com/group/repo.git")),
        ("http://host.example.com/group/repo", (True, "http://host.example.com/group/repo.git")),
        ("host.example.com/group/repo", (True, "https://host.example.com/group/repo.git")),
        ("repo", (False, "")),
        ("git@host.example.com/group", (False, "")),
    ],
)
def test_is_valid_git_url(url, expected):
    assert is_valid_git_url(url) == expected


def test_with_git_is_idempotent():
    once = with_git("https://host.example.com/a/b")
    assert once.endswith(".git")
    assert with_git(once) == once


def test_extract_repo_dir():
    assert extract_repo_dir("https://host.example.com/group/repo.git") == ("group", "repo")


def test_empty_base_dir_rejected():
    with pytest.raises(ValueError):
        GitCloneTool("")


def test_empty_url(tmp_path):
    response = GitCloneTool(tmp_path).invoke(GitCloneRequest(url=""))
    assert response.error == "URL cannot be empty"
    assert response.message == ""


def test_invalid_url(tmp_path):
    response = GitCloneTool(tmp_path).invoke({"url": "repo", "action": "clone"})
    assert response.error == "Invalid Git URL format: repo"


def test_clone_existing_repository(tmp_path):
    (tmp_path / "group" / "repo").mkdir(parents=True)
    response = GitCloneTool(tmp_path).invoke(GitCloneRequest("host.example.com/group/repo", GitCloneAction.CLONE))
    assert response.error == "Repository already exists"


def test_pull_missing_repository(tmp_path):
    response = GitCloneTool(tmp_path).invoke(GitCloneRequest("host.example.com/group/repo", GitCloneAction.PULL))
    assert response.error.startswith("repo does not exist: ")
    assert response.error.endswith(os.path.join("group", "repo"))


def test_clone_success_runs_git(tmp_path):
    done = subprocess.CompletedProcess([], 0, stdout=b"")
    with mock.patch("subprocess.run", return_value=done) as run:
        response = GitCloneTool(tmp_path).invoke(GitCloneRequest("host.example.com/group/repo", GitCloneAction.CLONE))
    args = run.call_args[0][0]
    assert args[:3] == ["git", "clone", "https://host.example.com/group/repo.git"]
    assert args[3] == str(tmp_path / "group" / "repo")
    assert response.error == ""
    assert response.message == "success, repo path: " + os.path.abspath(tmp_path / "group" / "repo")


def test_clone_failure_reports_output(tmp_path):
    failed = subprocess.CompletedProcess([], 128, stdout=b"fatal: nope")
    with mock.patch("subprocess.run", return_value=failed):
        response = GitCloneTool(tmp_path).invoke({"url": "host.example.com/group/repo", "action": "clone"})
    assert response.error.startswith("Clone failed: ")
    assert "fatal: nope" in response.error


def test_pull_existing_runs_git(tmp_path):
    (tmp_path / "group" / "repo").mkdir(parents=True)
    done = subprocess.CompletedProcess([], 0, stdout=b"")
    with mock.patch("subprocess.run", return_value=done) as run:
        response = GitCloneTool(tmp_path).invoke({"url": "host.example.com/group/repo", "action": "pull"})
    assert run.call_args[0][0] == ["git", "-C", str(tmp_path / "group" / "repo"), "pull"]
    assert response.message.startswith("success, repo path: ")