"""REST API router for families, members, tasks, statistics and alerts."""

import logging

from fastapi import APIRouter, Depends, FastAPI, Header, Request, Response, status
from fastapi.responses import JSONResponse

from src.core.config import constants
from src.core.errors import AuthenticationError, NotFoundError, classify_error_with_response
from src.core.security import issue_token, resolve_token
from src.domain.create_models import CommentCreate, FamilyCreate, FamilyLogin, MemberCreate, TaskCreate
from src.domain.family import Family
from src.domain.task import HistoryPeriod, Task
from src.domain.update_models import TaskAssign, TaskComplete, TaskUpdate
from src.models.service_models import (
    CompletionResult,
    FamilySummary,
    HistoryBucket,
    LoginToken,
    MemberStatistics,
    MemberView,
    OverdueTask,
    TaskAssignment,
    TaskComments,
    TaskSummary,
)
from src.services import analytics_service, completion_service, family_service, task_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def require_family(authorization: str | None = Header(default=None)) -> Family:
    """Resolve the bearer token to the caller's family."""
    if not authorization:
        logger.warning("api_auth_missing_header")
        raise AuthenticationError("No authorization header provided")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != constants.BEARER_PREFIX.lower() or not token:
        logger.warning("api_auth_malformed_header")
        raise AuthenticationError("Invalid or expired token")

    family_id = resolve_token(token.strip())
    try:
        return await family_service.get_family_by_id(family_id=family_id)
    except NotFoundError as err:
        logger.warning("api_auth_unknown_family", extra={"family_id": family_id})
        raise AuthenticationError("Family not found") from err


def _task_summary(task: Task) -> TaskSummary:
    return TaskSummary.model_validate(task, from_attributes=True)


# Families


@router.post("/families/register", tags=["families"], status_code=status.HTTP_201_CREATED)
async def register_family(payload: FamilyCreate) -> FamilySummary:
    """Register a new family with optional initial members."""
    family = await family_service.register_family(
        name=payload.name,
        code=payload.code,
        password=payload.password,
        member_names=[member.name for member in payload.members],
    )
    return FamilySummary(id=family.id, name=family.name, code=family.code)


@router.post("/families/login", tags=["families"])
async def login_family(payload: FamilyLogin) -> LoginToken:
    """Exchange family code and password for a bearer token."""
    family = await family_service.authenticate_family(code=payload.code, password=payload.password)
    return LoginToken(token=issue_token(family_id=family.id, code=family.code))


# Members


@router.post("/members", tags=["members"], status_code=status.HTTP_201_CREATED)
async def create_member(payload: MemberCreate, family: Family = Depends(require_family)) -> MemberView:
    """Add a member to the caller's family."""
    member = await family_service.add_member(family=family, name=payload.name)
    return MemberView(id=member.id, name=member.name, score=member.score)


@router.get("/members", tags=["members"])
async def get_members(family: Family = Depends(require_family)) -> list[MemberView]:
    """List the caller's family members."""
    return [
        MemberView(id=member.id, name=member.name, score=member.score)
        for member in family_service.list_members(family=family)
    ]


# Tasks


@router.post("/tasks", tags=["tasks"], status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, family: Family = Depends(require_family)) -> TaskSummary:
    """Create a task for the caller's family."""
    task = await task_service.create_task(
        family=family,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        due_date=payload.due_date,
        assigned_to=payload.assigned_to,
    )
    return _task_summary(task)


@router.get("/tasks", tags=["tasks"])
async def get_tasks(completed: bool | None = None, family: Family = Depends(require_family)) -> list[TaskSummary]:
    """List the caller's tasks, optionally filtered by completion."""
    tasks = await task_service.list_tasks(family_id=family.id, completed=completed)
    return [_task_summary(task) for task in tasks]


@router.put("/tasks/{task_id}", tags=["tasks"])
async def update_task(task_id: str, payload: TaskUpdate, family: Family = Depends(require_family)) -> TaskSummary:
    """Update the provided fields of a task."""
    task = await task_service.update_task(family=family, task_id=task_id, changes=payload)
    return _task_summary(task)


@router.delete("/tasks/{task_id}", tags=["tasks"], status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, family: Family = Depends(require_family)) -> Response:
    """Delete a task."""
    await task_service.delete_task(family=family, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/tasks/{task_id}/assign", tags=["tasks"])
async def assign_task(task_id: str, payload: TaskAssign, family: Family = Depends(require_family)) -> TaskAssignment:
    """Assign a task to a member of the caller's family."""
    task = await task_service.assign_task(family=family, task_id=task_id, member=payload.member)
    return TaskAssignment(id=task.id, assigned_to=payload.member)


@router.post(
    "/tasks/{task_id}/complete",
    tags=["tasks"],
    response_model=CompletionResult,
    response_model_exclude_none=True,
)
async def complete_task(
    task_id: str,
    payload: TaskComplete | None = None,
    family: Family = Depends(require_family),
) -> CompletionResult:
    """Mark a task completed, crediting the assigned member once."""
    occurred_at = payload.date if payload else None
    return await completion_service.complete_task(family=family, task_id=task_id, occurred_at=occurred_at)


@router.post("/tasks/{task_id}/comments", tags=["tasks"], status_code=status.HTTP_201_CREATED)
async def add_comment(task_id: str, payload: CommentCreate, family: Family = Depends(require_family)) -> TaskComments:
    """Append a comment to a task."""
    task = await task_service.add_comment(family=family, task_id=task_id, member=payload.member, text=payload.text)
    return TaskComments(id=task.id, comments=task.comments)


# Statistics and alerts


@router.get("/stats/members", tags=["stats"])
async def get_member_statistics(family: Family = Depends(require_family)) -> list[MemberStatistics]:
    """Per-member task counts and scores."""
    return await analytics_service.get_member_statistics(family=family)


@router.get("/stats/history", tags=["stats"])
async def get_history(
    period: HistoryPeriod = HistoryPeriod.WEEK,
    family: Family = Depends(require_family),
) -> list[HistoryBucket]:
    """Task totals grouped by creation week or month."""
    return await analytics_service.get_history(family=family, period=period)


@router.get("/alerts/overdue", tags=["alerts"])
async def get_overdue(family: Family = Depends(require_family)) -> list[OverdueTask]:
    """Open tasks whose due date has passed."""
    return await analytics_service.get_overdue_tasks(family=family)


async def _handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    error = classify_error_with_response(exc)
    log_method = logger.error if error.status_code >= 500 else logger.info
    log_method(
        "api_request_failed",
        extra={"path": request.url.path, "code": error.code, "error": str(exc)},
    )
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.message, "code": error.code, "suggestion": error.suggestion},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render service exceptions as structured JSON errors."""
    for exc_class in (NotFoundError, AuthenticationError, ValueError, RuntimeError):
        app.add_exception_handler(exc_class, _handle_service_error)
