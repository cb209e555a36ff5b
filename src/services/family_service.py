"""Family service for registration, login and member management."""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.db_client import sanitize_param
from src.core.errors import AuthenticationError, ConflictError, NotFoundError
from src.core.logging import span
from src.core.security import hash_password, verify_password
from src.domain.family import Family, Member


logger = logging.getLogger(__name__)

_FAMILIES = constants.FAMILIES_COLLECTION


def new_member(name: str) -> Member:
    """Build a member with a fresh identity and a zero score."""
    return Member(id=uuid.uuid4().hex, name=name, score=0)


def _dump_members(members: list[Member]) -> list[dict[str, Any]]:
    return [member.model_dump(mode="json") for member in members]


async def get_family_by_code(*, code: str) -> Family | None:
    """Get a family by its login code, or None."""
    record = await db_client.get_first_record(
        collection=_FAMILIES,
        filter_query=f'code = "{sanitize_param(code)}"',
    )
    return Family.model_validate(record) if record else None


async def get_family_by_id(*, family_id: str) -> Family:
    """Get a family by ID.

    Raises:
        NotFoundError: If the family does not exist
        db_client.DatabaseError: If database operation fails
    """
    try:
        record = await db_client.get_record(collection=_FAMILIES, record_id=family_id)
    except db_client.RecordNotFoundError as e:
        raise NotFoundError("Family not found") from e
    return Family.model_validate(record)


async def register_family(
    *,
    name: str,
    code: str,
    password: str,
    member_names: list[str] | None = None,
) -> Family:
    """Register a new family with an optional list of initial members.

    Raises:
        ConflictError: If the family code is already taken
        db_client.DatabaseError: If database operation fails
    """
    with span("family_service.register_family"):
        # Guard: code must be unique
        if await get_family_by_code(code=code):
            logger.warning("Family registration rejected, code in use: %s", code)
            raise ConflictError("Family code already exists")

        now = datetime.now(UTC)
        members = [new_member(member_name) for member_name in member_names or []]
        record = await db_client.create_record(
            collection=_FAMILIES,
            data={
                "name": name,
                "code": code,
                "password_hash": hash_password(password),
                "members": _dump_members(members),
                "created": now.isoformat(),
                "updated": now.isoformat(),
            },
        )

        logger.info("Registered family %s with %d members", code, len(members))
        return Family.model_validate(record)


async def authenticate_family(*, code: str, password: str) -> Family:
    """Verify family credentials.

    Unknown codes and wrong passwords produce the same error.

    Raises:
        AuthenticationError: If the code or password is wrong
    """
    with span("family_service.authenticate_family"):
        family = await get_family_by_code(code=code)
        if family is None or not verify_password(password, family.password_hash):
            logger.warning("Failed login for family code %s", code)
            raise AuthenticationError("Invalid code or password")

        logger.info("Family %s logged in", family.id)
        return family


async def save_family_members(*, family: Family) -> Family:
    """Persist the family's member list (whole-list replace)."""
    record = await db_client.update_record(
        collection=_FAMILIES,
        record_id=family.id,
        data={
            "members": _dump_members(family.members),
            "updated": datetime.now(UTC).isoformat(),
        },
    )
    return Family.model_validate(record)


async def add_member(*, family: Family, name: str) -> Member:
    """Append a member with score 0 to the family registry."""
    with span("family_service.add_member"):
        member = new_member(name)
        family.members = [*family.members, member]
        await save_family_members(family=family)

        logger.info("Added member %s to family %s", name, family.id)
        return member


def list_members(*, family: Family) -> list[Member]:
    """Return the family's members in registry order."""
    return list(family.members)
