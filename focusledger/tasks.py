"""Task lookup collaborator.

The engine never owns tasks.  It asks a :class:`TaskLookup` to resolve
ids and to credit whole minutes to a task's local ``time_spent``
counter.  :class:`TaskRegistry` is the in-process implementation a host
fills from its task list as that list finishes loading.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional, Protocol


@dataclass(frozen=True)
class Task:
    """The task fields the timer needs (and caches for display)."""
    id: str
    title: str = ""
    project_id: Optional[str] = None
    time_spent: int = 0        # minutes

    def display_fields(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "project_id": self.project_id}

    @classmethod
    def from_display_fields(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            project_id=data.get("project_id"),
        )


class TaskLookup(Protocol):
    """Resolves task ids; must tolerate repeated calls while loading."""
    def find_task(self, task_id: str) -> Optional[Task]:
        ...

    def increment_time_spent(self, task_id: str, minutes: int) -> None:
        ...


class TaskRegistry:
    """Dict-backed :class:`TaskLookup`."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {t.id: t for t in tasks}

    def add(self, task: Task) -> None:
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)

    def find_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def increment_time_spent(self, task_id: str, minutes: int) -> None:
        """Additive credit; unknown ids are ignored."""
        task = self._tasks.get(task_id)
        if task is None or minutes <= 0:
            return
        self._tasks[task_id] = replace(task, time_spent=task.time_spent + minutes)

    def __len__(self) -> int:
        return len(self._tasks)
