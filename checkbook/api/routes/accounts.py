"""
Account API routes.

This module provides endpoints for:
- POST /api/v1/accounts - Create account
- GET /api/v1/accounts/{account_id} - Get account
- PATCH /api/v1/accounts/{account_id}/sharing - Turn sharing on or off
- DELETE /api/v1/accounts/{account_id} - Delete account
- GET /api/v1/accounts/{account_id}/access - What the caller can do on the account
"""

import uuid

from fastapi import APIRouter, status

from checkbook.api.dependencies import (
    AccountServiceDep,
    Client,
    CurrentUser,
    PermissionServiceDep,
)
from checkbook.core.exceptions import AccountNotAccessibleError
from checkbook.models.enums import Capability
from checkbook.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountSharingUpdate,
)
from checkbook.schemas.account_permission import AccountAccessResponse

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create account",
)
async def create_account(
    account_data: AccountCreate,
    current_user: CurrentUser,
    account_service: AccountServiceDep,
) -> AccountResponse:
    """Create an account owned by the current user."""
    account = await account_service.create_account(
        owner_id=current_user.id,
        name=account_data.name,
        description=account_data.description,
        is_shared=account_data.is_shared,
    )
    return AccountResponse.model_validate(account)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account",
    description="""
    Get an account.

    **Permission Required:** VIEW_ONLY or higher (owner always)

    A missing account and an account the caller cannot see return the same 404.

    **Audit:** Creates ACCOUNT_VIEWED entry
    """,
)
async def get_account(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    account_service: AccountServiceDep,
) -> AccountResponse:
    account = await account_service.get_account(
        account_id=account_id,
        user_id=current_user.id,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return AccountResponse.model_validate(account)


@router.patch(
    "/{account_id}/sharing",
    response_model=AccountResponse,
    summary="Turn sharing on or off",
    description="""
    Turn sharing on or off. Existing grants are kept while sharing is off
    and take effect again when it is turned back on.

    **Permission Required:** FULL_ACCESS

    **Audit:** Creates ACCOUNT_MODIFIED entry
    """,
)
async def update_sharing(
    account_id: uuid.UUID,
    sharing: AccountSharingUpdate,
    current_user: CurrentUser,
    client: Client,
    account_service: AccountServiceDep,
) -> AccountResponse:
    account = await account_service.set_sharing(
        account_id=account_id,
        user_id=current_user.id,
        is_shared=sharing.is_shared,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return AccountResponse.model_validate(account)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete account",
    description="""
    Delete an account together with its grants and permission requests.
    Audit entries of the account are kept.

    **Permission Required:** OWNER
    """,
)
async def delete_account(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    account_service: AccountServiceDep,
) -> None:
    await account_service.delete_account(
        account_id=account_id,
        user_id=current_user.id,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


@router.get(
    "/{account_id}/access",
    response_model=AccountAccessResponse,
    summary="Get current user's access",
)
async def get_access(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    permission_service: PermissionServiceDep,
) -> AccountAccessResponse:
    """
    Effective permission level and capabilities of the current user.

    Raises:
        404: Account not found or user has no access
    """
    level = await permission_service.get_effective_permission(account_id, current_user.id)
    if level is None:
        raise AccountNotAccessibleError()

    is_owner = await permission_service.is_owner(account_id, current_user.id)
    return AccountAccessResponse(
        account_id=account_id,
        is_owner=is_owner,
        permission_level=level,
        can_view=level.includes(Capability.VIEW.threshold),
        can_manage_transactions=level.includes(Capability.TRANSACTION.threshold),
        can_modify_account=level.includes(Capability.FULL.threshold),
        can_manage_permissions=is_owner,
    )
