"""
Integration tests for Account Permission API routes.

Tests cover:
- POST /api/v1/accounts/{account_id}/permissions - Grant permission
- GET /api/v1/accounts/{account_id}/permissions - List permissions
- PUT /api/v1/accounts/{account_id}/permissions/{user_id} - Change level
- DELETE /api/v1/accounts/{account_id}/permissions/{user_id} - Revoke

Test scenarios:
- Happy paths
- Owner-only management (grantees with FULL_ACCESS included)
- Error cases (self-grant, unknown user, missing target)
"""

import uuid

import pytest
from httpx import AsyncClient

from checkbook.models.enums import PermissionLevel


@pytest.mark.asyncio
class TestGrantPermission:
    async def test_grant_by_user_id(
        self, async_client: AsyncClient, shared_account, owner, alice, headers_for
    ):
        """Owner grants a level and the grantee gains it."""
        # Execute
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(alice.id), "permission_level": "TRANSACTION_ONLY"},
            headers=headers_for(owner),
        )

        # Verify
        assert response.status_code == 201
        data = response.json()
        assert data["user_id"] == str(alice.id)
        assert data["permission_level"] == "TRANSACTION_ONLY"
        assert data["user"]["username"] == "alice"

        access = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}/access", headers=headers_for(alice)
        )
        assert access.json()["permission_level"] == "TRANSACTION_ONLY"

    async def test_grant_by_username(
        self, async_client: AsyncClient, shared_account, owner, alice, headers_for
    ):
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"username_or_email": "alice", "permission_level": "VIEW_ONLY"},
            headers=headers_for(owner),
        )

        assert response.status_code == 201
        assert response.json()["user_id"] == str(alice.id)

    async def test_grant_requires_exactly_one_target(
        self, async_client: AsyncClient, shared_account, owner, alice, headers_for
    ):
        neither = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"permission_level": "VIEW_ONLY"},
            headers=headers_for(owner),
        )
        both = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={
                "user_id": str(alice.id),
                "username_or_email": "alice",
                "permission_level": "VIEW_ONLY",
            },
            headers=headers_for(owner),
        )

        assert neither.status_code == 422
        assert both.status_code == 422

    async def test_invalid_level(self, async_client: AsyncClient, shared_account, owner, alice, headers_for):
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(alice.id), "permission_level": "ADMIN"},
            headers=headers_for(owner),
        )

        assert response.status_code == 422

    async def test_self_grant(self, async_client: AsyncClient, shared_account, owner, headers_for):
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(owner.id), "permission_level": "VIEW_ONLY"},
            headers=headers_for(owner),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    async def test_unknown_user(self, async_client: AsyncClient, shared_account, owner, headers_for):
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(uuid.uuid4()), "permission_level": "VIEW_ONLY"},
            headers=headers_for(owner),
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "User not found"

    async def test_full_access_grantee_cannot_grant(
        self, async_client: AsyncClient, grant_factory, shared_account, alice, bob, headers_for
    ):
        """Permission management belongs to the owner alone."""
        await grant_factory(shared_account, alice, PermissionLevel.FULL_ACCESS)

        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(bob.id), "permission_level": "VIEW_ONLY"},
            headers=headers_for(alice),
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == (
            "Only the account owner can manage permissions"
        )

    async def test_stranger_gets_404(
        self, async_client: AsyncClient, shared_account, alice, bob, headers_for
    ):
        response = await async_client.post(
            f"/api/v1/accounts/{shared_account.id}/permissions",
            json={"user_id": str(alice.id), "permission_level": "VIEW_ONLY"},
            headers=headers_for(bob),
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestListPermissions:
    async def test_owner_lists_all(
        self, async_client: AsyncClient, grant_factory, shared_account, owner, alice, bob, headers_for
    ):
        await grant_factory(shared_account, alice, PermissionLevel.VIEW_ONLY)
        await grant_factory(shared_account, bob, PermissionLevel.FULL_ACCESS)

        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}/permissions", headers=headers_for(owner)
        )

        assert response.status_code == 200
        assert {p["user"]["username"] for p in response.json()} == {"alice", "bob"}

    async def test_grantee_sees_only_self(
        self, async_client: AsyncClient, grant_factory, shared_account, alice, bob, headers_for
    ):
        await grant_factory(shared_account, alice, PermissionLevel.VIEW_ONLY)
        await grant_factory(shared_account, bob, PermissionLevel.FULL_ACCESS)

        response = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}/permissions", headers=headers_for(alice)
        )

        assert response.status_code == 200
        assert [p["user_id"] for p in response.json()] == [str(alice.id)]


@pytest.mark.asyncio
class TestUpdateAndRevoke:
    async def test_update_level(
        self, async_client: AsyncClient, alice_view_grant, shared_account, owner, alice, headers_for
    ):
        response = await async_client.put(
            f"/api/v1/accounts/{shared_account.id}/permissions/{alice.id}",
            json={"permission_level": "FULL_ACCESS"},
            headers=headers_for(owner),
        )

        assert response.status_code == 200
        assert response.json()["permission_level"] == "FULL_ACCESS"

    async def test_update_missing_grant(
        self, async_client: AsyncClient, shared_account, owner, bob, headers_for
    ):
        response = await async_client.put(
            f"/api/v1/accounts/{shared_account.id}/permissions/{bob.id}",
            json={"permission_level": "FULL_ACCESS"},
            headers=headers_for(owner),
        )

        assert response.status_code == 404

    async def test_revoke(
        self, async_client: AsyncClient, alice_view_grant, shared_account, owner, alice, headers_for
    ):
        """Revoked users lose access immediately."""
        response = await async_client.delete(
            f"/api/v1/accounts/{shared_account.id}/permissions/{alice.id}",
            headers=headers_for(owner),
        )
        after = await async_client.get(
            f"/api/v1/accounts/{shared_account.id}", headers=headers_for(alice)
        )

        assert response.status_code == 204
        assert after.status_code == 404

    async def test_grantee_cannot_revoke_self_via_owner_route(
        self, async_client: AsyncClient, alice_view_grant, shared_account, alice, headers_for
    ):
        response = await async_client.delete(
            f"/api/v1/accounts/{shared_account.id}/permissions/{alice.id}",
            headers=headers_for(alice),
        )

        assert response.status_code == 403
