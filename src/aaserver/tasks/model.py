"""Task data model shared by the store, the processor and the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ERROR = "error"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass(eq=False)
class Task:
    id: str
    prompt: str
    dependencies: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.QUEUED
    submitted_at: str = field(default_factory=utc_timestamp)
    commit: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire/disk form, omitting unset ``commit``/``error``."""
        data: dict[str, Any] = {
            "id": self.id,
            "prompt": self.prompt,
            "dependencies": list(self.dependencies),
            "status": self.status.value,
            "submittedAt": self.submitted_at,
        }
        if self.commit is not None:
            data["commit"] = self.commit
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Build a Task from its persisted form. Unknown keys are ignored."""
        return cls(
            id=str(data["id"]),
            prompt=str(data.get("prompt", "")),
            dependencies=[str(d) for d in data.get("dependencies") or []],
            status=TaskStatus(data.get("status", TaskStatus.QUEUED.value)),
            submitted_at=str(data.get("submittedAt") or utc_timestamp()),
            commit=data.get("commit"),
            error=data.get("error"),
        )
