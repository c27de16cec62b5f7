"""
Integration tests for Account API routes.

Tests cover:
- POST /api/v1/accounts - Create account
- GET /api/v1/accounts/{account_id} - Get account
- PATCH /api/v1/accounts/{account_id}/sharing - Toggle sharing
- DELETE /api/v1/accounts/{account_id} - Delete account
- GET /api/v1/accounts/{account_id}/access - Caller's access
- Authentication failures
"""

import uuid

import pytest
from httpx import AsyncClient
from jose import jwt

from checkbook.core.config import settings
from checkbook.models.enums import PermissionLevel

NOT_ACCESSIBLE = "Account not found or you don't have access"


@pytest.mark.asyncio
class TestAuthentication:
    async def test_missing_token(self, async_client: AsyncClient, shared_account):
        """Requests without a bearer token are rejected with 401."""
        response = await async_client.get(f"/api/v1/accounts/{shared_account.id}")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"]["message"] == "Missing authentication credentials"

    async def test_invalid_token(self, async_client: AsyncClient, shared_account):
        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    async def test_unknown_user(self, async_client: AsyncClient, shared_account):
        """A valid signature for a user that does not exist is rejected."""
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "access"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "User not found"

    async def test_request_id_is_echoed(self, async_client: AsyncClient, owner, headers_for):
        response = await async_client.get(
            f"/api/v1/accounts/{uuid.uuid4()}",
            headers={**headers_for(owner), "X-Request-ID": "trace-42"},
        )

        assert response.headers["x-request-id"] == "trace-42"
        assert response.json()["meta"]["request_id"] == "trace-42"


@pytest.mark.asyncio
class TestAccountRoutes:
    async def test_create_account(self, async_client: AsyncClient, owner, headers_for):
        """Creating an account makes the caller its owner."""
        # Execute
        response = await async_client.post(
            "/api/v1/accounts",
            json={"name": "Groceries", "is_shared": True},
            headers=headers_for(owner),
        )

        # Verify
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Groceries"
        assert data["user_id"] == str(owner.id)
        assert data["is_shared"] is True

        access = await async_client.get(
            f"/api/v1/accounts/{data['id']}/access", headers=headers_for(owner)
        )
        assert access.json()["permission_level"] == "FULL_ACCESS"
        assert access.json()["is_owner"] is True

    async def test_get_account_as_grantee(
        self, async_client: AsyncClient, alice_view_grant, shared_account, alice, headers_for
    ):
        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )

        assert response.status_code == 200
        assert response.json()["id"] == str(shared_account.id)

    async def test_missing_and_inaccessible_look_the_same(
        self, async_client: AsyncClient, shared_account, bob, headers_for
    ):
        """A stranger cannot tell an existing account from a missing one."""
        existing = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(bob)
        )
        missing = await async_client.get(
            f"/api/v1/accounts/{uuid.uuid4()}", headers=headers_for(bob)
        )

        assert existing.status_code == missing.status_code == 404
        assert existing.json()["error"] == missing.json()["error"]
        assert existing.json()["error"]["message"] == NOT_ACCESSIBLE

    async def test_access_of_grantee(
        self, async_client: AsyncClient, grant_factory, shared_account, alice, headers_for
    ):
        """The access endpoint reports the grant level and derived capabilities."""
        await grant_factory(shared_account, alice, PermissionLevel.TRANSACTION_ONLY)

        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}/access", headers=headers_for(alice)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["permission_level"] == "TRANSACTION_ONLY"
        assert data["is_owner"] is False
        assert data["can_view"] is True
        assert data["can_manage_transactions"] is True
        assert data["can_modify_account"] is False
        assert data["can_manage_permissions"] is False

    async def test_unsharing_hides_account_from_grantee(
        self, async_client: AsyncClient, alice_view_grant, shared_account, owner, alice, headers_for
    ):
        """Turning sharing off suspends grants; turning it on restores them."""
        # Execute
        off = await async_client.patch(
            f"/api/v1/accounts/{shared_account.id}/sharing",
            json={"is_shared": False},
            headers=headers_for(owner),
        )
        hidden = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )
        on = await async_client.patch(
            f"/api/v1/accounts/{shared_account.id}/sharing",
            json={"is_shared": True},
            headers=headers_for(owner),
        )
        visible = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )

        # Verify
        assert off.status_code == 200
        assert off.json()["is_shared"] is False
        assert hidden.status_code == 404
        assert on.status_code == 200
        assert visible.status_code == 200

    async def test_view_only_cannot_toggle_sharing(
        self, async_client: AsyncClient, alice_view_grant, shared_account, alice, headers_for
    ):
        response = await async_client.patch(
            f"/api/v1/accounts/{shared_account.id}/sharing",
            json={"is_shared": False},
            headers=headers_for(alice),
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"
        assert response.json()["error"]["details"] == {
            "required": "FULL_ACCESS",
            "current": "VIEW_ONLY",
        }

    async def test_delete_account(
        self, async_client: AsyncClient, alice_view_grant, shared_account, owner, alice, headers_for
    ):
        """The owner deletes the account; the grantee loses access with it."""
        response = await async_client.delete(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(owner)
        )
        after = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )

        assert response.status_code == 204
        assert after.status_code == 404

    async def test_grantee_cannot_delete_account(
        self, async_client: AsyncClient, grant_factory, shared_account, alice, headers_for
    ):
        await grant_factory(shared_account, alice, PermissionLevel.FULL_ACCESS)

        response = await async_client.delete(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_create_account_validation(self, async_client: AsyncClient, owner, headers_for):
        response = await async_client.post(
            "/api/v1/accounts", json={"name": ""}, headers=headers_for(owner)
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
