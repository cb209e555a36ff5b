"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries into typed objects with validation.
"""

from datetime import datetime

from pydantic import BaseModel

from src.domain.task import Comment, TaskPriority


class FamilySummary(BaseModel):
    """Public view of a registered family."""

    id: str
    name: str
    code: str


class MemberView(BaseModel):
    """Public view of a member."""

    id: str
    name: str
    score: int


class TaskSummary(BaseModel):
    """Task as listed to clients."""

    id: str
    title: str
    priority: TaskPriority
    assigned_to: str | None = None
    due_date: datetime | None = None
    completed: bool


class TaskAssignment(BaseModel):
    """Result of assigning a task."""

    id: str
    assigned_to: str


class TaskComments(BaseModel):
    """Task comments after a comment was appended."""

    id: str
    comments: list[Comment]


class CompletionResult(BaseModel):
    """Result of the completion operation.

    ``member_score`` is only set when a member was credited by this call.
    """

    id: str
    completed: bool
    completed_at: datetime | None = None
    member_score: int | None = None


class MemberStatistics(BaseModel):
    """Per-member task counts and score."""

    member: str
    total_tasks: int
    completed_tasks: int
    score: int


class HistoryBucket(BaseModel):
    """Task counts for one week or month bucket."""

    period: str
    total: int
    completed: int


class OverdueTask(BaseModel):
    """Incomplete task whose due date has passed."""

    id: str
    title: str
    assigned_to: str | None = None
    due_date: datetime


class LoginToken(BaseModel):
    """Bearer token returned on login."""

    token: str
