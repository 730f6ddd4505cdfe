"""HTTP-level tests: routing, auth headers, error mapping and camelCase payloads."""
import pytest

from .support import MEMBER, OUTSIDER, OWNER, VIEWER, auth_headers


@pytest.fixture
def project_id(client):
    response = client.post(
        "/projects", json={"name": "Website", "description": "Relaunch"}, headers=auth_headers(OWNER)
    )
    assert response.status_code == 201
    project_id = response.json()["id"]
    for user_id, role in ((MEMBER, "member"), (VIEWER, "viewer")):
        added = client.post(
            f"/projects/{project_id}/members",
            json={"userId": user_id, "role": role},
            headers=auth_headers(OWNER),
        )
        assert added.status_code == 201
    return project_id


@pytest.fixture
def task_id(client, project_id):
    response = client.post(
        f"/projects/{project_id}/tasks",
        json={"title": "Fix login", "priority": "high", "assigneeId": VIEWER, "tags": ["auth"]},
        headers=auth_headers(MEMBER),
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestHealthAndAuth:
    """Test the unauthenticated surface and identity headers."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["service"] == "content-service"

    def test_missing_headers_is_401(self, client):
        response = client.get("/projects")
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_partial_headers_is_401(self, client):
        response = client.get("/projects", headers={"X-User-Id": OWNER})
        assert response.status_code == 401


class TestProjectEndpoints:
    """Test project routes."""

    def test_create_returns_camel_case(self, client):
        response = client.post("/projects", json={"name": "Alpha"}, headers=auth_headers(OWNER))
        body = response.json()
        assert response.status_code == 201
        assert body["ownerId"] == OWNER
        assert body["description"] == ""
        assert "createdAt" in body and "updatedAt" in body

    def test_invalid_body_is_400_with_details(self, client):
        response = client.post("/projects", json={"name": ""}, headers=auth_headers(OWNER))
        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0]["path"] == "name"

    def test_list_is_membership_scoped(self, client, project_id):
        member_list = client.get("/projects", headers=auth_headers(MEMBER)).json()
        outsider_list = client.get("/projects", headers=auth_headers(OUTSIDER)).json()
        assert [p["id"] for p in member_list["items"]] == [project_id]
        assert member_list["pageSize"] == 20
        assert member_list["hasMore"] is False
        assert outsider_list["total"] == 0

    def test_get_missing_project_is_404(self, client):
        response = client.get("/projects/missing", headers=auth_headers(OWNER))
        assert response.status_code == 404
        assert response.json() == {"detail": "Project not found", "code": "NOT_FOUND"}

    def test_member_update_is_403(self, client, project_id):
        response = client.patch(
            f"/projects/{project_id}", json={"name": "Mine"}, headers=auth_headers(MEMBER)
        )
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_owner_update_and_delete(self, client, project_id):
        updated = client.patch(
            f"/projects/{project_id}", json={"name": "Renamed"}, headers=auth_headers(OWNER)
        )
        assert updated.json()["name"] == "Renamed"

        deleted = client.delete(f"/projects/{project_id}", headers=auth_headers(OWNER))
        assert deleted.status_code == 204
        assert client.get(f"/projects/{project_id}", headers=auth_headers(OWNER)).status_code == 404


class TestMemberEndpoints:
    """Test membership routes."""

    def test_list_members_excludes_owner(self, client, project_id):
        response = client.get(f"/projects/{project_id}/members", headers=auth_headers(MEMBER))
        members = {m["userId"]: m["role"] for m in response.json()}
        assert members == {MEMBER: "member", VIEWER: "viewer"}

    def test_duplicate_member_is_403(self, client, project_id):
        response = client.post(
            f"/projects/{project_id}/members", json={"userId": MEMBER}, headers=auth_headers(OWNER)
        )
        assert response.status_code == 403

    def test_change_role(self, client, project_id):
        response = client.patch(
            f"/projects/{project_id}/members/{VIEWER}",
            json={"role": "member"},
            headers=auth_headers(OWNER),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "member"

    def test_member_payload_has_no_synthetic_id(self, client, project_id):
        """Memberships are keyed by project and user; no id is invented."""
        response = client.get(f"/projects/{project_id}/members", headers=auth_headers(OWNER))
        for member in response.json():
            assert set(member) == {"projectId", "userId", "role"}
            assert member["projectId"] == project_id

    def test_grant_owner_role_is_400(self, client, project_id):
        response = client.patch(
            f"/projects/{project_id}/members/{VIEWER}",
            json={"role": "owner"},
            headers=auth_headers(OWNER),
        )
        assert response.status_code == 400

    def test_owner_self_removal_is_403(self, client, project_id):
        response = client.delete(f"/projects/{project_id}/members/{OWNER}", headers=auth_headers(OWNER))
        assert response.status_code == 403

    def test_remove_member(self, client, project_id):
        response = client.delete(f"/projects/{project_id}/members/{VIEWER}", headers=auth_headers(OWNER))
        assert response.status_code == 204
        listed = client.get(f"/projects/{project_id}/tasks", headers=auth_headers(VIEWER))
        assert listed.status_code == 403


class TestTaskEndpoints:
    """Test task routes."""

    def test_create_ignores_status(self, client, project_id):
        response = client.post(
            f"/projects/{project_id}/tasks",
            json={"title": "New", "status": "done"},
            headers=auth_headers(MEMBER),
        )
        body = response.json()
        assert body["status"] == "todo"
        assert body["priority"] == "medium"
        assert body["projectId"] == project_id
        assert body["createdBy"] == MEMBER

    def test_invalid_priority_is_400(self, client, project_id):
        response = client.post(
            f"/projects/{project_id}/tasks",
            json={"title": "New", "priority": "urgent"},
            headers=auth_headers(MEMBER),
        )
        assert response.status_code == 400

    def test_outsider_create_is_403(self, client, project_id):
        response = client.post(
            f"/projects/{project_id}/tasks", json={"title": "x"}, headers=auth_headers(OUTSIDER)
        )
        assert response.status_code == 403

    def test_list_with_query_parameters(self, client, project_id, task_id):
        client.post(
            f"/projects/{project_id}/tasks",
            json={"title": "Write docs", "priority": "low"},
            headers=auth_headers(MEMBER),
        )
        response = client.get(
            f"/projects/{project_id}/tasks",
            params={"priority": "high,critical", "assigneeId": VIEWER, "search": "LOGIN",
                    "sortBy": "priority", "sortOrder": "asc", "pageSize": 5},
            headers=auth_headers(MEMBER),
        )
        body = response.json()
        assert response.status_code == 200
        assert [t["id"] for t in body["items"]] == [task_id]
        assert body["total"] == 1
        assert body["pageSize"] == 5

    def test_invalid_sort_field_is_400(self, client, project_id):
        response = client.get(
            f"/projects/{project_id}/tasks", params={"sortBy": "title"}, headers=auth_headers(MEMBER)
        )
        assert response.status_code == 400

    def test_page_size_over_limit_is_400(self, client, project_id):
        response = client.get(
            f"/projects/{project_id}/tasks", params={"pageSize": 101}, headers=auth_headers(MEMBER)
        )
        assert response.status_code == 400

    def test_patch_clears_assignee(self, client, task_id):
        response = client.patch(
            f"/tasks/{task_id}",
            json={"assigneeId": None, "status": "in_progress"},
            headers=auth_headers(MEMBER),
        )
        body = response.json()
        assert body["assigneeId"] is None
        assert body["status"] == "in_progress"
        assert body["tags"] == ["auth"]

    def test_get_missing_task_is_404(self, client):
        response = client.get("/tasks/missing", headers=auth_headers(MEMBER))
        assert response.status_code == 404

    def test_delete_rules(self, client, task_id):
        assert client.delete(f"/tasks/{task_id}", headers=auth_headers(VIEWER)).status_code == 403
        assert client.delete(f"/tasks/{task_id}", headers=auth_headers(OWNER)).status_code == 204
        assert client.get(f"/tasks/{task_id}", headers=auth_headers(OWNER)).status_code == 404


class TestCommentEndpoints:
    """Test comment routes."""

    def test_comment_roundtrip(self, client, task_id, notifier):
        created = client.post(
            f"/tasks/{task_id}/comments", json={"body": "On it"}, headers=auth_headers(VIEWER)
        )
        assert created.status_code == 201
        assert created.json()["authorId"] == VIEWER

        listed = client.get(f"/tasks/{task_id}/comments", headers=auth_headers(MEMBER))
        assert [c["body"] for c in listed.json()] == ["On it"]
        assert notifier.of_type("comment_added")[0][3] == [MEMBER]

    def test_empty_body_is_400(self, client, task_id):
        response = client.post(
            f"/tasks/{task_id}/comments", json={"body": ""}, headers=auth_headers(MEMBER)
        )
        assert response.status_code == 400

    def test_admin_deletes_comment(self, client, task_id):
        comment_id = client.post(
            f"/tasks/{task_id}/comments", json={"body": "spam"}, headers=auth_headers(MEMBER)
        ).json()["id"]

        forbidden = client.delete(f"/comments/{comment_id}", headers=auth_headers(OWNER))
        allowed = client.delete(f"/comments/{comment_id}", headers=auth_headers(OUTSIDER, role="admin"))

        assert forbidden.status_code == 403
        assert allowed.status_code == 204
