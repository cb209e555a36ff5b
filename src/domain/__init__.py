"""Domain models and DTOs."""

from src.domain.create_models import CommentCreate, FamilyCreate, FamilyLogin, MemberCreate, TaskCreate
from src.domain.family import Family, Member
from src.domain.task import Comment, HistoryPeriod, Task, TaskPriority
from src.domain.update_models import TaskAssign, TaskComplete, TaskUpdate


__all__ = [
    "Comment",
    "CommentCreate",
    "Family",
    "FamilyCreate",
    "FamilyLogin",
    "HistoryPeriod",
    "Member",
    "MemberCreate",
    "Task",
    "TaskAssign",
    "TaskComplete",
    "TaskCreate",
    "TaskPriority",
    "TaskUpdate",
]
