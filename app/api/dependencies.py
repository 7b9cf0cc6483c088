from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.errors import UnauthorizedError
from app.db.engine import get_optional_session
from app.models.principal import Principal
from app.repos.group_membership_repo import (
    GroupMembershipRepo,
    InMemoryGroupMembershipRepo,
)
from app.repos.group_repo import GroupRepo, InMemoryGroupRepo
from app.repos.sql_group_repo import SqlGroupMembershipRepo, SqlGroupRepo
from app.repos.sql_stripe_account_repo import SqlStripeAccountRepo
from app.repos.stripe_account_repo import InMemoryStripeAccountRepo, StripeAccountRepo
from app.services import token_service
from app.services.stripe_connect import StripeConnect, StripeConnectClient

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# In-memory stores, used when no DATABASE_URL is configured.
group_repo = InMemoryGroupRepo()
membership_repo = InMemoryGroupMembershipRepo()
stripe_account_repo = InMemoryStripeAccountRepo()

SessionDep = Annotated[AsyncSession | None, Depends(get_optional_session)]


def require_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Not authenticated.")
    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise UnauthorizedError("Token expired.") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise UnauthorizedError("Invalid token.") from None

    principal = Principal(user_id=claims["sub"])
    logger.debug("Token validated for user=%s", principal.user_id)
    return principal


def get_group_repo(session: SessionDep) -> GroupRepo:
    if session is None:
        return group_repo
    return SqlGroupRepo(session)


def get_membership_repo(session: SessionDep) -> GroupMembershipRepo:
    if session is None:
        return membership_repo
    return SqlGroupMembershipRepo(session)


def get_stripe_account_repo(session: SessionDep) -> StripeAccountRepo:
    if session is None:
        return stripe_account_repo
    return SqlStripeAccountRepo(session)


def get_stripe_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StripeConnect:
    """Stripe Connect capability; override in tests to avoid the network."""
    return StripeConnectClient(settings.stripe)
