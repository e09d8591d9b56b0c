"""
Folder API: CRUD, per-owner name uniqueness and isolation
"""

import pytest


def create_folder(client, headers, **body):
    response = client.post("/api/v1/folders", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_note(client, headers, **body):
    response = client.post("/api/v1/notes", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateFolder:

    def test_defaults(self, client, alice):
        folder = create_folder(client, alice, name="  Work  ")
        assert folder["name"] == "Work"
        assert folder["description"] == ""
        assert folder["color"] == "#6366f1"
        assert folder["note_count"] == 0

    def test_explicit_fields(self, client, alice):
        folder = create_folder(client, alice, name="Ideas", description="Later", color="#ff0000")
        assert folder["description"] == "Later"
        assert folder["color"] == "#ff0000"

    def test_empty_color_falls_back_to_default(self, client, alice):
        folder = create_folder(client, alice, name="Ideas", color="")
        assert folder["color"] == "#6366f1"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, client, alice, name):
        response = client.post("/api/v1/folders", json={"name": name}, headers=alice)
        assert response.status_code == 400

    def test_missing_name_rejected(self, client, alice):
        response = client.post("/api/v1/folders", json={"color": "#fff"}, headers=alice)
        assert response.status_code == 400

    def test_duplicate_name_same_owner(self, client, alice):
        create_folder(client, alice, name="Work")
        response = client.post("/api/v1/folders", json={"name": " Work "}, headers=alice)
        assert response.status_code == 400
        assert response.json()["detail"] == "A folder with this name already exists"

    def test_same_name_different_owners(self, client, alice, bob):
        first = create_folder(client, alice, name="Work")
        second = create_folder(client, bob, name="Work")
        assert first["id"] != second["id"]


class TestReadFolders:

    def test_list_sorted_by_name(self, client, alice):
        for name in ["Travel", "Archive", "Recipes"]:
            create_folder(client, alice, name=name)
        response = client.get("/api/v1/folders", headers=alice)
        assert response.status_code == 200
        assert [f["name"] for f in response.json()] == ["Archive", "Recipes", "Travel"]

    def test_list_only_own_folders(self, client, alice, bob):
        create_folder(client, alice, name="Alice stuff")
        create_folder(client, bob, name="Bob stuff")
        names = [f["name"] for f in client.get("/api/v1/folders", headers=alice).json()]
        assert names == ["Alice stuff"]

    def test_list_includes_note_counts(self, client, alice):
        work = create_folder(client, alice, name="Work")
        create_folder(client, alice, name="Empty")
        create_note(client, alice, title="One", content="a", folder_id=work["id"])
        create_note(client, alice, title="Two", content="b", folder_id=work["id"])
        create_note(client, alice, title="Loose", content="c")
        counts = {f["name"]: f["note_count"] for f in client.get("/api/v1/folders", headers=alice).json()}
        assert counts == {"Work": 2, "Empty": 0}

    def test_get_with_note_count(self, client, alice):
        work = create_folder(client, alice, name="Work")
        create_note(client, alice, title="One", content="a", folder_id=work["id"])
        response = client.get(f"/api/v1/folders/{work['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json()["name"] == "Work"
        assert response.json()["note_count"] == 1

    def test_get_missing(self, client, alice):
        response = client.get("/api/v1/folders/9999", headers=alice)
        assert response.status_code == 404
        assert response.json()["detail"] == "Folder not found"


class TestUpdateFolder:

    def test_empty_color_leaves_color_unchanged(self, client, alice):
        folder = create_folder(client, alice, name="Work", color="#abcdef")
        response = client.put(f"/api/v1/folders/{folder['id']}", json={"color": ""}, headers=alice)
        assert response.status_code == 200
        assert response.json()["color"] == "#abcdef"

    def test_partial_update(self, client, alice):
        folder = create_folder(client, alice, name="Work", description="Job")
        response = client.put(
            f"/api/v1/folders/{folder['id']}", json={"color": "#123456"}, headers=alice
        )
        assert response.status_code == 200
        data = response.json()
        assert data["color"] == "#123456"
        assert data["name"] == "Work"
        assert data["description"] == "Job"

    def test_rename_trims(self, client, alice):
        folder = create_folder(client, alice, name="Work")
        response = client.put(
            f"/api/v1/folders/{folder['id']}", json={"name": "  Office "}, headers=alice
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Office"

    def test_rename_to_existing_name_conflicts(self, client, alice):
        create_folder(client, alice, name="Work")
        other = create_folder(client, alice, name="Home")
        response = client.put(
            f"/api/v1/folders/{other['id']}", json={"name": "Work"}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "A folder with this name already exists"

    def test_rename_to_own_name_is_allowed(self, client, alice):
        folder = create_folder(client, alice, name="Work")
        response = client.put(
            f"/api/v1/folders/{folder['id']}", json={"name": "Work", "description": "x"}, headers=alice
        )
        assert response.status_code == 200
        assert response.json()["description"] == "x"

    def test_rename_to_name_used_by_other_owner(self, client, alice, bob):
        create_folder(client, bob, name="Work")
        folder = create_folder(client, alice, name="Home")
        response = client.put(
            f"/api/v1/folders/{folder['id']}", json={"name": "Work"}, headers=alice
        )
        assert response.status_code == 200

    def test_blank_name_rejected(self, client, alice):
        folder = create_folder(client, alice, name="Work")
        response = client.put(f"/api/v1/folders/{folder['id']}", json={"name": " "}, headers=alice)
        assert response.status_code == 400

    def test_update_missing(self, client, alice):
        response = client.put("/api/v1/folders/9999", json={"name": "X"}, headers=alice)
        assert response.status_code == 404


class TestDeleteFolder:

    def test_delete(self, client, alice):
        folder = create_folder(client, alice, name="Work")
        response = client.delete(f"/api/v1/folders/{folder['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json() == {"message": "Folder deleted successfully", "detached_notes": 0}
        assert client.get(f"/api/v1/folders/{folder['id']}", headers=alice).status_code == 404

    def test_delete_missing(self, client, alice):
        assert client.delete("/api/v1/folders/9999", headers=alice).status_code == 404

    def test_name_reusable_after_delete(self, client, alice):
        folder = create_folder(client, alice, name="Work")
        client.delete(f"/api/v1/folders/{folder['id']}", headers=alice)
        create_folder(client, alice, name="Work")


class TestFolderNotes:

    def test_lists_only_notes_in_folder(self, client, alice):
        work = create_folder(client, alice, name="Work")
        home = create_folder(client, alice, name="Home")
        create_note(client, alice, title="Standup", content="daily", folder_id=work["id"])
        create_note(client, alice, title="Groceries", content="milk", folder_id=home["id"])
        create_note(client, alice, title="Loose", content="none")
        response = client.get(f"/api/v1/folders/{work['id']}/notes", headers=alice)
        assert response.status_code == 200
        notes = response.json()
        assert [n["title"] for n in notes] == ["Standup"]
        assert notes[0]["folder"] == {"id": work["id"], "name": "Work", "color": "#6366f1"}

    def test_search_and_sort(self, client, alice):
        work = create_folder(client, alice, name="Work")
        create_note(client, alice, title="Budget plan", content="q3", folder_id=work["id"])
        create_note(client, alice, title="Action items", content="PLAN the offsite", folder_id=work["id"])
        create_note(client, alice, title="Retro", content="went well", folder_id=work["id"])
        response = client.get(
            f"/api/v1/folders/{work['id']}/notes",
            params={"search": "plan", "sortBy": "title", "sortOrder": "asc"},
            headers=alice,
        )
        assert response.status_code == 200
        assert [n["title"] for n in response.json()] == ["Action items", "Budget plan"]

    def test_missing_folder(self, client, alice):
        assert client.get("/api/v1/folders/9999/notes", headers=alice).status_code == 404

    def test_bad_sort_field(self, client, alice):
        work = create_folder(client, alice, name="Work")
        response = client.get(
            f"/api/v1/folders/{work['id']}/notes", params={"sortBy": "colour"}, headers=alice
        )
        assert response.status_code == 400


class TestFolderIsolation:

    def test_other_owner_cannot_touch_folder(self, client, alice, bob):
        folder = create_folder(client, alice, name="Private")
        folder_url = f"/api/v1/folders/{folder['id']}"
        assert client.get(folder_url, headers=bob).status_code == 404
        assert client.put(folder_url, json={"name": "Mine"}, headers=bob).status_code == 404
        assert client.delete(folder_url, headers=bob).status_code == 404
        assert client.get(f"{folder_url}/notes", headers=bob).status_code == 404
        # Still intact for the owner
        response = client.get(folder_url, headers=alice)
        assert response.status_code == 200
        assert response.json()["name"] == "Private"
