"""Task domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class TaskPriority(StrEnum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HistoryPeriod(StrEnum):
    """Granularity of the completion history buckets."""

    WEEK = "week"
    MONTH = "month"


class Comment(BaseModel):
    """Comment appended to a task."""

    id: str = Field(..., description="Comment ID")
    member: str = Field(..., description="Name of the commenting member (free text)")
    text: str = Field(..., description="Comment body")
    created: datetime = Field(..., description="Creation timestamp")


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID from database")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")
    family_id: str = Field(..., description="Owning family ID (immutable)")
    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    assigned_to: str | None = Field(default=None, description="Name of the assigned member")
    due_date: datetime | None = Field(default=None, description="When the task is due")
    completed: bool = Field(default=False, description="Completion flag")
    completed_at: datetime | None = Field(default=None, description="When the task was completed")
    comments: list[Comment] = Field(default_factory=list, description="Comments in append order")
