"""
FastAPI dependencies for authentication, client metadata and services.

This module provides:
- Current user extraction from the bearer access token
- Client IP and user agent extraction for audit logging
- Service instances bound to the request's database session
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.config import settings
from checkbook.core.database import get_db
from checkbook.core.exceptions import AuthenticationError, InvalidTokenError
from checkbook.models.user import User
from checkbook.repositories.user_repository import UserRepository
from checkbook.services import (
    AccountPermissionService,
    AccountService,
    AuditService,
    PermissionRequestService,
    PermissionService,
)

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Enter your JWT access token",
    auto_error=False,
)

# Headers set by proxies, most specific first
_FORWARDING_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "proxy-client-ip",
    "wl-proxy-client-ip",
)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Validate an access token and return the user id it carries.

    Tokens are issued elsewhere; only signature, expiry and the ``sub``
    claim are checked here.

    Raises:
        InvalidTokenError: Token is malformed, expired, badly signed or has
            no usable subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning(f"Authentication failed: invalid JWT - {e}")
        raise InvalidTokenError() from e

    subject = payload.get("sub")
    if not subject:
        logger.warning("Authentication failed: missing user ID in token")
        raise InvalidTokenError("Invalid token payload")

    try:
        return uuid.UUID(str(subject))
    except ValueError as e:
        logger.warning(f"Authentication failed: invalid user ID format - {subject}")
        raise InvalidTokenError("Invalid token payload") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to resolve the authenticated user from the bearer token.

    Raises:
        AuthenticationError (401): Token missing, invalid, or user unknown

    Usage:
        @router.get("/accounts/{account_id}")
        async def get_account(current_user: CurrentUser): ...
    """
    if not credentials:
        logger.warning("Authentication failed: missing Bearer token")
        raise AuthenticationError("Missing authentication credentials")

    user_id = decode_access_token(credentials.credentials)

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.warning(f"Authentication failed: user not found - {user_id}")
        raise InvalidTokenError("User not found")

    return user


def get_client_ip(request: Request) -> str | None:
    """
    Best-effort client IP: the first entry of the first forwarding header
    present, else the socket peer.
    """
    for header in _FORWARDING_HEADERS:
        value = request.headers.get(header)
        if value:
            candidate = value.split(",")[0].strip()
            if candidate and candidate.lower() != "unknown":
                return candidate
    return request.client.host if request.client else None


@dataclass
class ClientInfo:
    """Origin of the current request, passed explicitly to audited commands."""

    ip_address: str | None
    user_agent: str | None


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


# ============================================================================
# Service Dependencies
# ============================================================================


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_account_permission_service(
    db: AsyncSession = Depends(get_db),
) -> AccountPermissionService:
    return AccountPermissionService(db)


def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    return PermissionService(db)


def get_permission_request_service(
    db: AsyncSession = Depends(get_db),
) -> PermissionRequestService:
    """
    Dependency to get PermissionRequestService instance.

    Usage:
        @router.put("/permission-requests/{request_id}/approve")
        async def approve(service: PermissionRequestServiceDep): ...
    """
    return PermissionRequestService(db)


def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


# Convenience type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
Client = Annotated[ClientInfo, Depends(get_client_info)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
AccountPermissionServiceDep = Annotated[
    AccountPermissionService, Depends(get_account_permission_service)
]
PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]
PermissionRequestServiceDep = Annotated[
    PermissionRequestService, Depends(get_permission_request_service)
]
AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
