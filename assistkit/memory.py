"""File-backed conversation memory, one JSON-lines file per conversation."""

from __future__ import annotations

import json
import tempfile
import threading
from pathlib import Path
from typing import Any

from assistkit.messages import Message


class ConversationError(Exception):
    """A conversation could not be stored or removed."""


class Conversation:
    """Messages of one conversation, appended to its file as they arrive."""

    def __init__(self, conversation_id: str, path: Path, max_window_size: int) -> None:
        self.id = conversation_id
        self.path = Path(path)
        self.max_window_size = max_window_size
        self._messages: list[Message] = []
        self._lock = threading.Lock()

    def append(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(message.to_dict(), ensure_ascii=False))
                handle.write("\n")

    def full_messages(self) -> list[Message]:
        with self._lock:
            return list(self._messages)

    def recent_messages(self) -> list[Message]:
        """The last ``max_window_size`` messages."""
        with self._lock:
            if len(self._messages) > self.max_window_size:
                return self._messages[len(self._messages) - self.max_window_size :]
            return list(self._messages)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {"id": self.id, "messages": [m.to_dict() for m in self._messages]}

    def _load(self) -> None:
        """Read stored messages, stopping at the first line that is not one."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError:
            return
        for line in text.splitlines():
            try:
                message = Message.from_dict(json.loads(line))
            except (ValueError, TypeError):
                break
            self._messages.append(message)


class SimpleMemory:
    """Keeps conversations in memory and on disk under ``directory``."""

    def __init__(self, directory: str | Path = "", max_window_size: int = 0) -> None:
        if not directory:
            directory = Path(tempfile.gettempdir()) / "eino" / "memory"
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.max_window_size = max_window_size
        self._conversations: dict[str, Conversation] = {}
        self._lock = threading.Lock()

    def _path(self, conversation_id: str) -> Path:
        return self.directory / f"{conversation_id}.jsonl"

    def get_conversation(self, conversation_id: str, create_if_missing: bool = False) -> Conversation | None:
        """Return the conversation, loading it from disk on first use.

        Returns None when it does not exist and ``create_if_missing`` is false.
        """
        with self._lock:
            cached = self._conversations.get(conversation_id)
            if cached is not None:
                return cached
            path = self._path(conversation_id)
            if not path.exists():
                if not create_if_missing:
                    return None
                path.write_text("", encoding="utf-8")
            conversation = Conversation(conversation_id, path, self.max_window_size)
            conversation._load()
            self._conversations[conversation_id] = conversation
            return conversation

    def list_conversations(self) -> list[str]:
        with self._lock:
            try:
                entries = sorted(self.directory.iterdir(), key=lambda p: p.name)
            except OSError:
                return []
            return [
                entry.name[: -len(".jsonl")] if entry.name.endswith(".jsonl") else entry.name
                for entry in entries
                if not entry.is_dir()
            ]

    def delete_conversation(self, conversation_id: str) -> None:
        with self._lock:
            try:
                self._path(conversation_id).unlink()
            except OSError as exc:
                raise ConversationError(f"failed to delete file: {exc}") from exc
            self._conversations.pop(conversation_id, None)


def default_memory() -> SimpleMemory:
    """Memory under ``data/memory`` keeping a window of six messages."""
    return SimpleMemory("data/memory", max_window_size=6)