"""Pydantic models for creating records."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.domain.task import TaskPriority


def require_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Value cannot be empty")
    return v


class MemberCreate(BaseModel):
    """Payload for adding a member to a family."""

    name: str = Field(..., description="Display name of the member")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the name is not blank."""
        return require_text(v)


class FamilyCreate(BaseModel):
    """Payload for registering a family."""

    name: str = Field(..., description="Family display name")
    code: str = Field(..., description="Unique family code used to log in")
    password: str = Field(..., description="Family password")
    members: list[MemberCreate] = Field(default_factory=list, description="Initial members")

    @field_validator("name", "code")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate required text fields are not blank."""
        return require_text(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate the password is not empty."""
        if not v:
            raise ValueError("Password cannot be empty")
        return v


class FamilyLogin(BaseModel):
    """Payload for logging a family in."""

    code: str
    password: str


class TaskCreate(BaseModel):
    """Payload for creating a task."""

    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: datetime | None = Field(default=None, description="When the task is due")
    assigned_to: str | None = Field(default=None, description="Name of the assigned member")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate the title is not blank."""
        return require_text(v)


class CommentCreate(BaseModel):
    """Payload for commenting on a task."""

    member: str = Field(..., description="Name of the commenting member")
    text: str = Field(..., description="Comment body")

    @field_validator("member", "text")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate comment fields are not blank."""
        return require_text(v)
