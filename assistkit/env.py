"""Loading ``.env`` files and checking required environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values


class MissingEnvError(RuntimeError):
    """A required environment variable is not set."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"env [{name}] is required, but is not set now, please check your .env file"
        )
        self.name = name


def load_env(path: str | Path = ".env") -> dict[str, str]:
    """Load variables from ``path`` without overriding those already set.

    Raises FileNotFoundError when the file does not exist.
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise FileNotFoundError(f"error loading .env file: {env_path}")
    loaded: dict[str, str] = {}
    for key, value in dotenv_values(env_path).items():
        if value is None:
            continue
        loaded[key] = value
        os.environ.setdefault(key, value)
    return loaded


def require_envs(*names: str) -> None:
    """Raise MissingEnvError for the first name that is unset or empty."""
    for name in names:
        if not os.environ.get(name):
            raise MissingEnvError(name)