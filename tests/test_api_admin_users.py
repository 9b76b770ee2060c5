from sqlalchemy import select

from conftest import auth_header, contract_data, seed_contracts, seed_user
from contract_vault.db.models.search_history import SearchHistory
from contract_vault.db.models.user import User, UserArchivedContract, UserBookmark

ADMIN = auth_header("admin-1", role="admin")


class TestAdminUsersApi:
    """User management under /admin/users"""

    async def test_requires_admin(self, api_client, db):
        await seed_user(db)

        response = await api_client.get("/api/v1/admin/users", headers=auth_header("user-1"))

        assert response.status_code == 403

    async def test_list_and_get(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        await seed_user(db, "user-1")

        listed = await api_client.get("/api/v1/admin/users", headers=ADMIN)
        assert {u["id"] for u in listed.json()["data"]} == {"admin-1", "user-1"}

        fetched = await api_client.get("/api/v1/admin/users/user-1", headers=ADMIN)
        assert fetched.json()["data"]["email"] == "user-1@example.com"
        assert fetched.json()["data"]["role"] == "user"

        missing = await api_client.get("/api/v1/admin/users/nobody", headers=ADMIN)
        assert missing.status_code == 404
        assert missing.json()["message"] == "User not found"

    async def test_promote_user_grants_admin_routes(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        await seed_user(db, "user-1")

        promoted = await api_client.patch("/api/v1/admin/users/user-1/role", json={"role": "admin"}, headers=ADMIN)
        assert promoted.status_code == 200
        assert promoted.json()["message"] == "User role updated to admin"

        # Role is read from the database, not the token
        archive = await api_client.get("/api/v1/admin/archive", headers=auth_header("user-1"))
        assert archive.status_code == 200

    async def test_invalid_role_and_self_demotion(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        await seed_user(db, "user-1")

        invalid = await api_client.patch("/api/v1/admin/users/user-1/role", json={"role": "owner"}, headers=ADMIN)
        assert invalid.status_code == 400
        assert invalid.json()["message"] == "Invalid role"

        demote_self = await api_client.patch("/api/v1/admin/users/admin-1/role", json={"role": "user"}, headers=ADMIN)
        assert demote_self.status_code == 400
        assert demote_self.json()["message"] == "You cannot remove your own admin privileges"

    async def test_delete_user_removes_owned_rows(self, api_client, db, session_factory):
        await seed_user(db, "admin-1", role="admin")
        await seed_user(db, "user-1")
        contracts = await seed_contracts(db, [contract_data(1)])
        db.add_all([
            UserBookmark(user_id="user-1", contract_id=contracts[0].id),
            UserArchivedContract(user_id="user-1", contract_id=contracts[0].id),
            SearchHistory(user_id="user-1", query="pipeline", results_count=1),
        ])
        await db.commit()

        deleted = await api_client.delete("/api/v1/admin/users/user-1", headers=ADMIN)
        assert deleted.status_code == 200
        assert deleted.json()["data"] == {"id": "user-1"}

        async with session_factory() as check:
            assert await check.get(User, "user-1") is None
            assert (await check.execute(select(UserBookmark))).scalars().all() == []
            assert (await check.execute(select(UserArchivedContract))).scalars().all() == []
            assert (await check.execute(select(SearchHistory))).scalars().all() == []

        again = await api_client.delete("/api/v1/admin/users/user-1", headers=ADMIN)
        assert again.status_code == 404

    async def test_cannot_delete_self(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")

        response = await api_client.delete("/api/v1/admin/users/admin-1", headers=ADMIN)

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account from admin panel"

    async def test_stats(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        for n in range(1, 7):
            await seed_user(db, f"user-{n}")

        response = await api_client.get("/api/v1/admin/users/stats", headers=ADMIN)

        data = response.json()["data"]
        assert data["totalUsers"] == 7
        assert data["adminCount"] == 1
        assert data["userCount"] == 6
        assert len(data["recentUsers"]) == 5
