"""Tests for project lifecycle and membership rules."""
import pytest

from content_core import crud, models
from content_core.errors import ForbiddenError, NotFoundError, ValidationError

from .support import MEMBER, OUTSIDER, OWNER, VIEWER


class TestCreateProject:
    """Test project creation."""

    def test_owner_membership_created_with_project(self, project_service, db):
        """The creator holds the owner membership row."""
        project = project_service.create_project("Alpha", "", OWNER)

        membership = crud.get_project_member(db, project.id, OWNER)
        assert membership is not None
        assert membership.role == models.ProjectRole.OWNER
        assert project.owner_id == OWNER
        assert project_service.is_owner(project.id, OWNER)
        assert project_service.is_member(project.id, OWNER)

    def test_failed_owner_insert_leaves_no_project(self, db, monkeypatch):
        """A failure between the two inserts rolls back the project too."""
        original_add = db.add

        def failing_add(instance):
            if isinstance(instance, models.ProjectMember):
                raise RuntimeError("insert failed")
            original_add(instance)

        monkeypatch.setattr(db, "add", failing_add)
        with pytest.raises(RuntimeError):
            crud.create_project(db, name="Broken", description="", owner_id=OWNER)
        monkeypatch.undo()

        projects, total = crud.get_user_projects(db, OWNER)
        assert total == 0
        assert db.query(models.Project).count() == 0

    def test_description_defaults_to_empty(self, project_service):
        project = project_service.create_project("Alpha", None, OWNER)
        assert project.description == ""


class TestListProjects:
    """Test membership-scoped project listing."""

    def test_lists_only_member_projects(self, project_service, project):
        other = project_service.create_project("Other", "", OUTSIDER)

        member_ids = [p.id for p in project_service.list_user_projects(MEMBER).items]
        outsider_ids = [p.id for p in project_service.list_user_projects(OUTSIDER).items]

        assert member_ids == [project.id]
        assert outsider_ids == [other.id]

    def test_newest_first_with_pagination(self, project_service):
        created = [project_service.create_project(f"P{i}", "", OWNER) for i in range(5)]

        first = project_service.list_user_projects(OWNER, page=1, page_size=2)
        last = project_service.list_user_projects(OWNER, page=3, page_size=2)

        assert [p.id for p in first.items] == [created[4].id, created[3].id]
        assert first.total == 5
        assert first.has_more is True
        assert [p.id for p in last.items] == [created[0].id]
        assert last.has_more is False

    def test_removed_member_loses_project(self, project_service, project):
        project_service.remove_member(project.id, MEMBER, OWNER)
        assert project_service.list_user_projects(MEMBER).total == 0


class TestUpdateAndDeleteProject:
    """Test owner-only project mutations."""

    def test_owner_updates_fields(self, project_service, project):
        updated = project_service.update_project(project.id, OWNER, name="Renamed")
        assert updated.name == "Renamed"
        assert updated.description == "Relaunch"
        assert updated.updated_at > updated.created_at

    def test_member_cannot_update(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.update_project(project.id, MEMBER, name="Nope")

    def test_update_missing_project(self, project_service):
        with pytest.raises(NotFoundError):
            project_service.update_project("missing", OWNER, name="x")

    def test_member_cannot_delete(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.delete_project(project.id, MEMBER)

    def test_delete_cascades(self, project_service, task_service, comment_service, project, db):
        """Deleting a project removes its memberships, tasks and comments."""
        from content_core.schemas import TaskCreate

        task = task_service.create_task(project.id, MEMBER, TaskCreate(title="Doomed"))
        comment = comment_service.create_comment(task.id, MEMBER, "bye")
        project_id, task_id, comment_id = project.id, task.id, comment.id

        project_service.delete_project(project_id, OWNER)

        assert crud.get_project(db, project_id) is None
        assert crud.get_task(db, task_id) is None
        assert crud.get_comment(db, comment_id) is None
        assert crud.get_project_member(db, project_id, MEMBER) is None
        with pytest.raises(NotFoundError):
            project_service.get_project_by_id(project_id)


class TestMembers:
    """Test membership management."""

    def test_list_members_excludes_owner(self, project_service, project):
        members = project_service.list_members(project.id)
        assert sorted(m.user_id for m in members) == [MEMBER, VIEWER]

    def test_list_members_missing_project(self, project_service):
        with pytest.raises(NotFoundError):
            project_service.list_members("missing")

    def test_only_owner_adds_members(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.add_member(project.id, OUTSIDER, MEMBER)

    def test_duplicate_member_rejected(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.add_member(project.id, MEMBER, OWNER)

    def test_unknown_role_downgraded_to_member(self, project_service, project):
        """Owner and unknown roles are never granted; they become member."""
        as_owner = project_service.add_member(project.id, "user-a", OWNER, "owner")
        as_admin = project_service.add_member(project.id, "user-b", OWNER, "admin")
        assert as_owner.role == models.ProjectRole.MEMBER
        assert as_admin.role == models.ProjectRole.MEMBER

    def test_update_member_role(self, project_service, project):
        updated = project_service.update_member_role(project.id, MEMBER, "viewer", OWNER)
        assert updated.role == models.ProjectRole.VIEWER

    def test_update_member_role_rejects_owner_role(self, project_service, project):
        with pytest.raises(ValidationError) as excinfo:
            project_service.update_member_role(project.id, MEMBER, "owner", OWNER)
        assert excinfo.value.details[0]["path"] == "role"

    def test_owner_role_cannot_be_changed(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.update_member_role(project.id, OWNER, "viewer", OWNER)

    def test_update_missing_member(self, project_service, project):
        with pytest.raises(NotFoundError):
            project_service.update_member_role(project.id, OUTSIDER, "viewer", OWNER)

    def test_owner_cannot_remove_self(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.remove_member(project.id, OWNER, OWNER)
        assert project_service.is_member(project.id, OWNER)

    def test_remove_missing_member(self, project_service, project):
        with pytest.raises(NotFoundError):
            project_service.remove_member(project.id, OUTSIDER, OWNER)

    def test_non_owner_cannot_remove(self, project_service, project):
        with pytest.raises(ForbiddenError):
            project_service.remove_member(project.id, VIEWER, MEMBER)
