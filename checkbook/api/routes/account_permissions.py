"""
Account permission API routes.

This module provides endpoints for:
- POST /api/v1/accounts/{account_id}/permissions - Grant permission to a user
- GET /api/v1/accounts/{account_id}/permissions - List account permissions
- PUT /api/v1/accounts/{account_id}/permissions/{user_id} - Change permission level
- DELETE /api/v1/accounts/{account_id}/permissions/{user_id} - Revoke access
"""

import uuid

from fastapi import APIRouter, status

from checkbook.api.dependencies import (
    AccountPermissionServiceDep,
    Client,
    CurrentUser,
)
from checkbook.schemas.account_permission import (
    AccountPermissionCreate,
    AccountPermissionResponse,
    AccountPermissionUpdate,
)

router = APIRouter(prefix="/accounts", tags=["Account Permissions"])


@router.post(
    "/{account_id}/permissions",
    response_model=AccountPermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant permission to user",
    description="""
    Grant a permission level on an account to another user, or overwrite the
    level they already hold. Granting on an unshared account turns sharing on.

    **Permission Required:** OWNER

    **Permission Levels:**
    - `VIEW_ONLY`: view account details and history
    - `TRANSACTION_ONLY`: view and add transactions
    - `FULL_ACCESS`: view, transactions and account modification

    **Validation:**
    - Target user is given by `user_id` or `username_or_email`
    - Cannot grant permission to yourself

    **Audit:** Creates PERMISSION_GRANTED or PERMISSION_MODIFIED entry
    """,
)
async def grant_permission(
    account_id: uuid.UUID,
    grant_data: AccountPermissionCreate,
    current_user: CurrentUser,
    client: Client,
    permission_service: AccountPermissionServiceDep,
) -> AccountPermissionResponse:
    """
    Grant a permission on an account.

    Raises:
        404: Account not found / no access, or target user not found
        403: User is not the account owner
        422: Invalid grant (self-grant, missing target)
    """
    grant = await permission_service.grant_permission(
        account_id=account_id,
        current_user_id=current_user.id,
        permission_level=grant_data.permission_level,
        target_user_id=grant_data.user_id,
        username_or_email=grant_data.username_or_email,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return AccountPermissionResponse.model_validate(grant)


@router.get(
    "/{account_id}/permissions",
    response_model=list[AccountPermissionResponse],
    summary="List account permissions",
    description="""
    List the grants on an account.

    **Permission Required:** any access

    The owner sees every grant. Other users see only their own grant, so
    they learn their level without learning who else has access.
    """,
)
async def list_permissions(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    permission_service: AccountPermissionServiceDep,
) -> list[AccountPermissionResponse]:
    grants = await permission_service.list_permissions(
        account_id=account_id,
        current_user_id=current_user.id,
    )
    return [AccountPermissionResponse.model_validate(grant) for grant in grants]


@router.put(
    "/{account_id}/permissions/{user_id}",
    response_model=AccountPermissionResponse,
    summary="Update permission level",
    description="""
    Change the level of an existing grant.

    **Permission Required:** OWNER

    **Audit:** Creates PERMISSION_MODIFIED entry with old and new levels
    """,
)
async def update_permission(
    account_id: uuid.UUID,
    user_id: uuid.UUID,
    update_data: AccountPermissionUpdate,
    current_user: CurrentUser,
    client: Client,
    permission_service: AccountPermissionServiceDep,
) -> AccountPermissionResponse:
    grant = await permission_service.update_permission(
        account_id=account_id,
        current_user_id=current_user.id,
        target_user_id=user_id,
        permission_level=update_data.permission_level,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return AccountPermissionResponse.model_validate(grant)


@router.delete(
    "/{account_id}/permissions/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke account access",
    description="""
    Revoke a user's grant.

    **Permission Required:** OWNER

    **Audit:** Creates PERMISSION_REVOKED entry
    """,
)
async def revoke_permission(
    account_id: uuid.UUID,
    user_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    permission_service: AccountPermissionServiceDep,
) -> None:
    await permission_service.revoke_permission(
        account_id=account_id,
        current_user_id=current_user.id,
        target_user_id=user_id,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
