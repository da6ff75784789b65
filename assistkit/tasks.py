"""Task storage in a JSON-lines file and the task manager tool built on it."""

from __future__ import annotations

import dataclasses
import enum
import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Union


class TaskNotFoundError(LookupError):
    """No live task has the given id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


class Action(str, enum.Enum):
    """What a task request asks for."""

    ADD = "add"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


def _parse_action(value: Any) -> Union[Action, str]:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("action must be a string")
    try:
        return Action(value)
    except ValueError:
        return value


def _action_text(action: Union[Action, str]) -> str:
    return action.value if isinstance(action, Action) else str(action)


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _boolean(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


@dataclass
class Task:
    """One task; deleted tasks stay in the file, marked as deleted."""

    id: str = ""
    title: str = ""
    content: str = ""
    completed: bool = False
    deadline: str = ""
    is_deleted: bool = False
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "completed": self.completed,
            "deadline": self.deadline,
            "is_deleted": self.is_deleted,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        if not isinstance(data, Mapping):
            raise ValueError("task must be a JSON object")
        return cls(
            id=_string(data, "id"),
            title=_string(data, "title"),
            content=_string(data, "content"),
            completed=_boolean(data, "completed"),
            deadline=_string(data, "deadline"),
            is_deleted=_boolean(data, "is_deleted"),
            created_at=_string(data, "created_at"),
        )


@dataclass
class ListParams:
    """Filters for listing tasks."""

    query: str = ""
    is_done: bool | None = None
    limit: int | None = None

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "ListParams":
        if not isinstance(data, Mapping):
            raise ValueError("list parameters must be a JSON object")
        is_done = data.get("is_done")
        if is_done is not None and not isinstance(is_done, bool):
            raise ValueError("is_done must be a boolean")
        limit = data.get("limit")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
            raise ValueError("limit must be an integer")
        return cls(query=_string(data, "query"), is_done=is_done, limit=limit)


@dataclass
class TaskRequest:
    """A request to the task manager."""

    action: Union[Action, str] = ""
    task: Task | None = None
    list: ListParams | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaskRequest":
        if not isinstance(data, Mapping):
            raise ValueError("request must be a JSON object")
        task_data = data.get("task")
        list_data = data.get("list")
        return cls(
            action=_parse_action(data.get("action")),
            task=Task.from_dict(task_data) if task_data is not None else None,
            list=ListParams._from_dict(list_data) if list_data is not None else None,
        )


@dataclass
class TaskResponse:
    """Outcome of a task request."""

    status: str = ""
    task_list: list[Task] | None = None
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "task_list": None if self.task_list is None else [t.to_dict() for t in self.task_list],
            "error": self.error,
        }


def _rfc3339_now() -> str:
    text = datetime.now().astimezone().replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _contains(text: str, part: str) -> bool:
    return part.lower() in text.lower()


class TaskStorage:
    """Tasks cached in memory and kept in ``tasks.jsonl`` under ``data_dir``."""

    def __init__(self, data_dir: str | Path) -> None:
        directory = Path(data_dir)
        directory.mkdir(parents=True, exist_ok=True)
        self.path = directory / "tasks.jsonl"
        self._cache: dict[str, Task] = {}
        self._dirty = False
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        self.path.touch(exist_ok=True)
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                try:
                    task = Task.from_dict(json.loads(line))
                except (ValueError, TypeError) as exc:
                    raise ValueError(f"failed to load from disk: failed to unmarshal task: {exc}") from exc
                self._cache[task.id] = task

    def add(self, task: Task) -> None:
        """Stamp ``task`` with the creation time and append it to the file."""
        with self._lock:
            task.created_at = _rfc3339_now()
            task.is_deleted = False
            self._cache[task.id] = task
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(task.to_dict(), ensure_ascii=False) + "\n")
                handle.flush()
                os.fsync(handle.fileno())

    def list(self, params: ListParams | None = None) -> list[Task]:
        """Live tasks matching ``params``: open ones first, newest first within each."""
        params = params if params is not None else ListParams()
        if params.limit is not None and params.limit < 0:
            raise ValueError("limit must not be negative")
        with self._lock:
            active: list[Task] = []
            completed: list[Task] = []
            for task in self._cache.values():
                if task.is_deleted:
                    continue
                if params.query and not (
                    _contains(task.title, params.query) or _contains(task.content, params.query)
                ):
                    continue
                if params.is_done is not None and task.completed != params.is_done:
                    continue
                (completed if task.completed else active).append(task)

        active.sort(key=lambda t: t.created_at, reverse=True)
        completed.sort(key=lambda t: t.created_at, reverse=True)
        tasks = active + completed
        if params.limit is not None:
            tasks = tasks[: params.limit]
        return tasks

    def update(self, task: Task) -> None:
        """Overwrite the non-empty fields of the stored task with those of ``task``."""
        with self._lock:
            existing = self._cache.get(task.id)
            if existing is None or existing.is_deleted:
                raise TaskNotFoundError(task.id)
            changes: dict[str, Any] = {}
            if task.title:
                changes["title"] = task.title
            if task.content:
                changes["content"] = task.content
            if task.deadline:
                changes["deadline"] = task.deadline
            if task.completed != existing.completed:
                changes["completed"] = task.completed
            self._cache[task.id] = dataclasses.replace(existing, **changes)
            self._dirty = True
            self._sync()

    def delete(self, task_id: str) -> None:
        """Mark the task as deleted."""
        with self._lock:
            task = self._cache.get(task_id)
            if task is None or task.is_deleted:
                raise TaskNotFoundError(task_id)
            task.is_deleted = True
            self._dirty = True
            self._sync()

    def _sync(self) -> None:
        if not self._dirty:
            return
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                for task in self._cache.values():
                    handle.write(json.dumps(task.to_dict(), ensure_ascii=False) + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        self._dirty = False


_default_storage: TaskStorage | None = None


def init_default_storage(data_dir: str | Path) -> TaskStorage:
    """Open the storage under ``data_dir`` and make it the default one."""
    global _default_storage
    _default_storage = TaskStorage(data_dir)
    return _default_storage


def default_storage() -> TaskStorage:
    """The default storage, opened under ``./data/task`` on first use."""
    if _default_storage is None:
        return init_default_storage("./data/task")
    return _default_storage


class TaskTool:
    """Adds, updates, deletes and lists tasks in a storage."""

    name = "task_manager"
    description = "task manager tool, you can add, get, update, delete, list tasks"

    def __init__(self, storage: TaskStorage | None = None) -> None:
        if storage is None:
            storage = default_storage()
        if storage is None:
            raise ValueError("storage cannot be empty")
        self.storage = storage

    def invoke(self, request: TaskRequest | Mapping[str, Any]) -> TaskResponse:
        """Carry out ``request``; failures are reported in the response."""
        if not isinstance(request, TaskRequest):
            request = TaskRequest.from_dict(request)
        response = TaskResponse()
        action = request.action

        if action == Action.ADD:
            if request.task is None:
                return TaskResponse(status="error", error="task is required for add action")
            if not request.task.title:
                return TaskResponse(status="error", error="title is required")
            request.task.id = str(uuid.uuid4())
            try:
                self.storage.add(request.task)
            except OSError as exc:
                return TaskResponse(status="error", error=f"failed to add task: {exc}")
            response.task_list = [request.task]
        elif action == Action.UPDATE:
            if request.task is None:
                return TaskResponse(status="error", error="task is required for update action")
            if not request.task.id:
                return TaskResponse(status="error", error="id is required")
            try:
                self.storage.update(request.task)
            except (TaskNotFoundError, OSError) as exc:
                return TaskResponse(status="error", error=f"failed to update task: {exc}")
            response.task_list = [request.task]
        elif action == Action.DELETE:
            if request.task is None or not request.task.id:
                return TaskResponse(status="error", error="task id is required for delete action")
            try:
                self.storage.delete(request.task.id)
            except (TaskNotFoundError, OSError) as exc:
                return TaskResponse(status="error", error=f"failed to delete task: {exc}")
        elif action == Action.LIST:
            if request.list is None:
                request.list = ListParams()
            try:
                response.task_list = self.storage.list(request.list)
            except ValueError as exc:
                return TaskResponse(status="error", error=f"failed to list tasks: {exc}")
        else:
            # An unknown action still reports success, carrying the error text.
            response.error = f"unknown action: {_action_text(action)}"

        response.status = "success"
        return response