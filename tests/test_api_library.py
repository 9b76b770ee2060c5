import io
import zipfile

from conftest import auth_header, contract_data, seed_contracts, seed_user


class TestHistoryApi:
    async def test_save_list_delete(self, api_client, db):
        await seed_user(db)
        headers = auth_header("user-1")

        saved = await api_client.post(
            "/api/v1/history",
            json={"query": "drilling 2024", "resultsCount": 3, "tab": "all"},
            headers=headers,
        )
        assert saved.status_code == 201
        entry_id = saved.json()["data"]["id"]

        await api_client.post("/api/v1/history", json={"query": "catering"}, headers=headers)

        listed = await api_client.get("/api/v1/history", headers=headers)
        data = listed.json()["data"]
        assert data["total"] == 2
        assert sorted(h["query"] for h in data["history"]) == ["catering", "drilling 2024"]

        deleted = await api_client.delete(f"/api/v1/history/{entry_id}", headers=headers)
        assert deleted.status_code == 200

        missing = await api_client.delete(f"/api/v1/history/{entry_id}", headers=headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "History entry not found"

    async def test_entries_are_private(self, api_client, db):
        await seed_user(db, "user-1")
        await seed_user(db, "user-2")

        saved = await api_client.post("/api/v1/history", json={"query": "mine"}, headers=auth_header("user-1"))
        entry_id = saved.json()["data"]["id"]

        other = await api_client.delete(f"/api/v1/history/{entry_id}", headers=auth_header("user-2"))
        assert other.status_code == 404

        listed = await api_client.get("/api/v1/history", headers=auth_header("user-2"))
        assert listed.json()["data"]["total"] == 0

    async def test_clear(self, api_client, db):
        await seed_user(db)
        headers = auth_header("user-1")
        for query in ("one", "two"):
            await api_client.post("/api/v1/history", json={"query": query}, headers=headers)

        cleared = await api_client.delete("/api/v1/history", headers=headers)

        assert cleared.json()["data"] == {"deletedCount": 2}

    async def test_unknown_user_rejected(self, api_client):
        response = await api_client.get("/api/v1/history", headers=auth_header("ghost"))

        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestBookmarksApi:
    async def test_bookmark_lifecycle(self, api_client, db):
        await seed_user(db)
        contracts = await seed_contracts(db, [contract_data(1), contract_data(2)])
        headers = auth_header("user-1")

        for contract in contracts:
            added = await api_client.post(f"/api/v1/bookmarks/{contract.id}", headers=headers)
            assert added.status_code == 201

        duplicate = await api_client.post(f"/api/v1/bookmarks/{contracts[0].id}", headers=headers)
        assert duplicate.status_code == 400
        assert duplicate.json()["message"] == "Contract already bookmarked"

        listed = (await api_client.get("/api/v1/bookmarks", headers=headers)).json()["data"]
        assert listed["total"] == 2
        assert {b["id"] for b in listed["bookmarks"]} == {c.id for c in contracts}
        assert "bookmarkedAt" in listed["bookmarks"][0]

        await api_client.delete(f"/api/v1/bookmarks/{contracts[0].id}", headers=headers)
        # Removing twice is not an error
        again = await api_client.delete(f"/api/v1/bookmarks/{contracts[0].id}", headers=headers)
        assert again.status_code == 200

        await api_client.delete("/api/v1/bookmarks", headers=headers)
        listed = (await api_client.get("/api/v1/bookmarks", headers=headers)).json()["data"]
        assert listed["total"] == 0

    async def test_bookmark_unknown_contract(self, api_client, db):
        await seed_user(db)

        response = await api_client.post("/api/v1/bookmarks/missing", headers=auth_header("user-1"))

        assert response.status_code == 404


class TestPersonalArchiveApi:
    async def test_archive_and_restore(self, api_client, db):
        await seed_user(db)
        contracts = await seed_contracts(db, [contract_data(1)])
        contract_id = contracts[0].id
        headers = auth_header("user-1")

        archived = await api_client.post(f"/api/v1/archive/{contract_id}", headers=headers)
        assert archived.status_code == 201

        duplicate = await api_client.post(f"/api/v1/archive/{contract_id}", headers=headers)
        assert duplicate.json()["message"] == "Contract already archived"

        search = await api_client.get("/api/v1/contracts/search", params={"q": "pipeline"}, headers=headers)
        assert search.json()["data"]["total"] == 0

        listed = (await api_client.get("/api/v1/archive", headers=headers)).json()["data"]
        assert [a["id"] for a in listed["archived"]] == [contract_id]

        await api_client.delete(f"/api/v1/archive/{contract_id}", headers=headers)
        search = await api_client.get("/api/v1/contracts/search", params={"q": "pipeline"}, headers=headers)
        assert search.json()["data"]["total"] == 1


class TestGlobalArchiveApi:
    """Admin-only global archive"""

    async def test_requires_admin(self, api_client, db):
        await seed_user(db)

        response = await api_client.get("/api/v1/admin/archive", headers=auth_header("user-1"))

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"

    async def test_archive_restore_and_delete(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        contracts = await seed_contracts(db, [contract_data(1), contract_data(2)])
        first, second = contracts[0].id, contracts[1].id
        headers = auth_header("admin-1", role="admin")

        not_archived = await api_client.delete(f"/api/v1/admin/archive/{first}", headers=headers)
        assert not_archived.status_code == 400
        assert not_archived.json()["message"] == "Contract must be archived before permanent deletion"

        await api_client.post(f"/api/v1/admin/archive/{first}", headers=headers)
        again = await api_client.post(f"/api/v1/admin/archive/{first}", headers=headers)
        assert again.json()["message"] == "Contract is already archived"

        search = await api_client.get("/api/v1/contracts/search", params={"q": "pipeline"})
        assert [c["id"] for c in search.json()["data"]["contracts"]] == [second]

        listed = (await api_client.get("/api/v1/admin/archive", headers=headers)).json()["data"]
        assert listed["total"] == 1
        assert listed["archived"][0]["archivedBy"] == "admin-1"

        restored = await api_client.post(f"/api/v1/admin/archive/{first}/restore", headers=headers)
        assert restored.status_code == 200
        not_archived = await api_client.post(f"/api/v1/admin/archive/{first}/restore", headers=headers)
        assert not_archived.json()["message"] == "Contract is not archived"

        await api_client.post(f"/api/v1/admin/archive/{second}", headers=headers)
        deleted = await api_client.delete(f"/api/v1/admin/archive/{second}", headers=headers)
        assert deleted.status_code == 200

        missing = await api_client.get(f"/api/v1/contracts/{second}")
        assert missing.status_code == 404

    async def test_empty_archive(self, api_client, db):
        await seed_user(db, "admin-1", role="admin")
        await seed_contracts(db, [
            contract_data(1, is_archived=True),
            contract_data(2, is_archived=True),
            contract_data(3),
        ])

        response = await api_client.delete("/api/v1/admin/archive", headers=auth_header("admin-1", role="admin"))

        assert response.json()["data"] == {"deletedCount": 2}
        remaining = await api_client.get("/api/v1/contracts")
        assert remaining.json()["data"]["total"] == 1


class TestMediaApi:
    async def test_upload_attach_and_zip(self, api_client, db):
        await seed_user(db)
        contracts = await seed_contracts(db, [contract_data(1)])
        contract_id = contracts[0].id
        headers = auth_header("user-1")

        uploaded = await api_client.post(
            "/api/v1/media/multiple",
            files=[
                ("files", ("scope.pdf", b"%PDF-1.4 scope", "application/pdf")),
                ("files", ("notes.txt", b"kick-off notes", "text/plain")),
            ],
            data={"contractId": contract_id, "tags": "scope, notes"},
            headers=headers,
        )
        assert uploaded.status_code == 201
        media = uploaded.json()["data"]["media"]
        assert media[0]["tags"] == ["scope", "notes"]
        assert media[0]["url"].startswith("http://localhost:4000/files/")

        contract = (await api_client.get(f"/api/v1/contracts/{contract_id}")).json()["data"]
        assert contract["hasDocument"] is True
        assert contract["zipUrl"] == f"/api/v1/media/zip/{contract_id}"

        zipped = await api_client.get(f"/api/v1/media/zip/{contract_id}")
        assert zipped.status_code == 200
        assert zipped.headers["content-type"] == "application/zip"
        assert 'filename="CN-0001.zip"' in zipped.headers["content-disposition"]
        with zipfile.ZipFile(io.BytesIO(zipped.content)) as archive:
            assert sorted(archive.namelist()) == ["notes.txt", "scope.pdf"]
            assert archive.read("scope.pdf") == b"%PDF-1.4 scope"

    async def test_disallowed_type(self, api_client, db):
        await seed_user(db)

        response = await api_client.post(
            "/api/v1/media",
            files={"file": ("run.exe", b"MZ", "application/octet-stream")},
            headers=auth_header("user-1"),
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("File type not allowed")

    async def test_soft_delete_hides_media(self, api_client, db):
        await seed_user(db)
        headers = auth_header("user-1")

        uploaded = await api_client.post(
            "/api/v1/media",
            files={"file": ("scope.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers,
        )
        media_id = uploaded.json()["data"]["id"]

        deleted = await api_client.delete(f"/api/v1/media/{media_id}", headers=headers)
        assert deleted.status_code == 200

        assert (await api_client.get(f"/api/v1/media/{media_id}")).status_code == 404
        assert (await api_client.get("/api/v1/media")).json()["data"]["total"] == 0

    async def test_zip_without_files(self, api_client, db):
        contracts = await seed_contracts(db, [contract_data(1)])

        response = await api_client.get(f"/api/v1/media/zip/{contracts[0].id}")

        assert response.status_code == 404
        assert response.json()["message"] == "No files found for this contract"
