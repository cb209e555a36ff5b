"""Family and member domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """Family member with an engine-maintained score.

    Frozen: a credited score is produced with ``model_copy`` by the completion
    service, never by assigning the field.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Member ID, unique within the owning family")
    name: str = Field(..., description="Display name, used as the assignment key on tasks")
    score: int = Field(default=0, ge=0, description="Number of task completions credited to this member")


class Family(BaseModel):
    """Family aggregate root (tenant) owning its members."""

    id: str = Field(..., description="Unique family ID from database")
    created: datetime | None = Field(default=None, description="Creation timestamp")
    updated: datetime | None = Field(default=None, description="Last update timestamp")
    name: str = Field(..., description="Family display name")
    code: str = Field(..., description="Unique join/login code")
    password_hash: str = Field(..., description="Salted password hash")
    members: list[Member] = Field(default_factory=list, description="Members in registry order")

    def find_member(self, name: str) -> Member | None:
        """Return the first member whose name matches exactly, if any."""
        return next((member for member in self.members if member.name == name), None)
