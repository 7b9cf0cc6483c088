"""Group endpoints.

Just enough surface to create host groups and read them back; the Stripe
Connect flow lives in app/api/stripe.py.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.dependencies import (
    SessionDep,
    get_group_repo,
    get_membership_repo,
    require_user,
)
from app.core.errors import BadRequestError, NotFoundError
from app.models.group import GROUP_ROLES, Group, GroupMembership
from app.models.principal import Principal
from app.repos.group_membership_repo import GroupMembershipRepo
from app.repos.group_repo import GroupRepo
from app.services.stripe_service import GROUP_NOT_FOUND

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups", tags=["groups"])


# --- Pydantic schemas ---


class GroupIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    isHost: bool = False


class GroupCreateIn(BaseModel):
    group: GroupIn
    role: str = "admin"


class GroupOut(BaseModel):
    id: int
    name: str
    description: str | None
    isHost: bool
    stripeAccountId: int | None

    @staticmethod
    def of(group: Group) -> GroupOut:
        return GroupOut(
            id=group.id,
            name=group.name,
            description=group.description,
            isHost=group.is_host,
            stripeAccountId=group.stripe_account_id,
        )


# --- Endpoints ---


@router.post("", response_model=GroupOut)
async def create_group(
    body: GroupCreateIn,
    session: SessionDep,
    principal: Annotated[Principal, Depends(require_user)],
    groups: Annotated[GroupRepo, Depends(get_group_repo)],
    memberships: Annotated[GroupMembershipRepo, Depends(get_membership_repo)],
) -> GroupOut:
    """Create a group. The creator becomes a member with ``role``."""
    if body.role not in GROUP_ROLES:
        raise BadRequestError(f"Invalid role, expected one of: {', '.join(GROUP_ROLES)}.")

    group = await groups.create(
        name=body.group.name,
        description=body.group.description,
        is_host=body.group.isHost,
    )
    await memberships.add(
        GroupMembership(group_id=group.id, user_id=principal.user_id, role=body.role)
    )
    if session is not None:
        await session.commit()
    logger.info(
        "Group created is_host=%s role=%s",
        group.is_host,
        body.role,
        extra={"group_id": group.id, "user_id": principal.user_id},
    )
    return GroupOut.of(group)


@router.get("/{group_id}", response_model=GroupOut)
async def get_group(
    group_id: int,
    _principal: Annotated[Principal, Depends(require_user)],
    groups: Annotated[GroupRepo, Depends(get_group_repo)],
) -> GroupOut:
    group = await groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError(GROUP_NOT_FOUND)
    return GroupOut.of(group)
