"""Update models for task operations."""

from datetime import datetime

from pydantic import BaseModel, field_validator

from src.domain.create_models import require_text
from src.domain.task import TaskPriority


class TaskUpdate(BaseModel):
    """Partial task update; only fields that are set are applied.

    ``description``, ``due_date`` and ``assigned_to`` may be cleared with an
    explicit null. ``title`` and ``priority`` may be omitted but never nulled.
    """

    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assigned_to: str | None = None
    completed: bool | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        """Validate a supplied title is present and not blank."""
        if v is None:
            raise ValueError("Title cannot be null")
        return require_text(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: TaskPriority | None) -> TaskPriority:
        if v is None:
            raise ValueError("Priority cannot be null")
        return v


class TaskAssign(BaseModel):
    """Payload for assigning a task to a member by name."""

    member: str


class TaskComplete(BaseModel):
    """Payload for completing a task; ``date`` defaults to now."""

    date: datetime | None = None
