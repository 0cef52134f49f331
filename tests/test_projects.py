"""Service tests for project create, update, read and cascading delete."""

import unittest

from pydantic import ValidationError

from taskboard.core.errors import AccessDeniedError, ConflictError, NotFoundError
from taskboard.models import Activity, Project, ProjectRole, Subtask, Task
from taskboard.models.enums import ActivityAction, ProjectRoleName
from taskboard.schemas.projects import ProjectCreate, ProjectUpdate
from taskboard.schemas.tasks import SubtaskIn, TaskCreate
from taskboard.services import projects as project_service
from taskboard.services import tasks as task_service
from taskboard.services.authorization import ProjectContext, resolve_project_context
from tests.support import add_member, context, make_session, make_user


class ProjectTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.owner = make_user(self.db, "Owner")

    def tearDown(self) -> None:
        self.db.close()

    def _create(self, key: str = "ABC", name: str = "Alpha") -> Project:
        return project_service.create_project(
            self.db, self.owner.id, ProjectCreate(name=name, key=key)
        )


class TestCreateProject(ProjectTestCase):
    def test_creator_becomes_admin(self) -> None:
        project = self._create(key="abc1")
        self.assertEqual(project.key, "ABC1")
        ctx = resolve_project_context(self.db, self.owner.id, project.id)
        self.assertEqual(ctx.role, ProjectRoleName.ADMIN)
        activity = self.db.query(Activity).filter(Activity.project_id == project.id).one()
        self.assertEqual(activity.action, ActivityAction.PROJECT_CREATED)

    def test_key_unique_case_insensitively(self) -> None:
        self._create(key="ABC")
        with self.assertRaises(ConflictError):
            self._create(key="abc", name="Other")
        self.assertEqual(self.db.query(Project).count(), 1)

    def test_list_projects_with_role(self) -> None:
        first = self._create(key="ONE")
        other_owner = make_user(self.db, "Other")
        second = project_service.create_project(
            self.db, other_owner.id, ProjectCreate(name="Two", key="TWO")
        )
        add_member(self.db, second, self.owner, ProjectRoleName.VIEWER)
        listed = {p.id: role for p, role in project_service.list_projects(self.db, self.owner.id)}
        self.assertEqual(
            listed, {first.id: ProjectRoleName.ADMIN, second.id: ProjectRoleName.VIEWER}
        )


class TestReadAndUpdateProject(ProjectTestCase):
    def test_missing_project_is_not_found(self) -> None:
        ctx = ProjectContext(project_id=424242, user_id=self.owner.id, role=None)
        with self.assertRaises(NotFoundError):
            project_service.get_project(self.db, ctx)

    def test_non_member_denied(self) -> None:
        project = self._create()
        stranger = make_user(self.db, "Stranger")
        with self.assertRaises(AccessDeniedError):
            project_service.get_project(self.db, context(self.db, stranger, project))

    def test_update_admin_only(self) -> None:
        project = self._create()
        manager = make_user(self.db, "Manager")
        add_member(self.db, project, manager, ProjectRoleName.MANAGER)
        with self.assertRaises(AccessDeniedError):
            project_service.update_project(
                self.db, context(self.db, manager, project), ProjectUpdate(name="Nope")
            )

        updated = project_service.update_project(
            self.db,
            context(self.db, self.owner, project),
            ProjectUpdate(name="Beta", is_active=False),
        )
        self.assertEqual((updated.name, updated.is_active), ("Beta", False))
        activity = self.db.query(Activity).order_by(Activity.id.desc()).first()
        self.assertEqual(activity.action, ActivityAction.PROJECT_UPDATED)
        self.assertEqual(activity.details["changes"]["name"], {"from": "Alpha", "to": "Beta"})

    def test_blank_rename_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            ProjectUpdate(name="   ")
        self.assertEqual(ProjectUpdate(name="  Beta ").name, "Beta")


class TestDeleteProject(ProjectTestCase):
    def test_cascade_removes_every_dependent(self) -> None:
        project = self._create()
        member = make_user(self.db, "Member")
        add_member(self.db, project, member, ProjectRoleName.CONTRIBUTOR)
        ctx = context(self.db, self.owner, project)
        task_service.create_task(
            self.db,
            ctx,
            TaskCreate(title="T", subtasks=[SubtaskIn(title="a"), SubtaskIn(title="b")]),
        )
        survivor = self._create(key="KEEP", name="Keep")
        task_service.create_task(
            self.db, context(self.db, self.owner, survivor), TaskCreate(title="Stays")
        )
        project_id = project.id

        project_service.delete_project(self.db, ctx)

        self.assertIsNone(self.db.get(Project, project_id))
        self.assertEqual(self.db.query(Task).filter(Task.project_id == project_id).count(), 0)
        self.assertEqual(
            self.db.query(ProjectRole).filter(ProjectRole.project_id == project_id).count(), 0
        )
        self.assertEqual(
            self.db.query(Activity).filter(Activity.project_id == project_id).count(), 0
        )
        self.assertEqual(self.db.query(Subtask).count(), 0)
        self.assertEqual(self.db.query(Task).count(), 1)

    def test_manager_cannot_delete(self) -> None:
        project = self._create()
        manager = make_user(self.db, "Manager")
        add_member(self.db, project, manager, ProjectRoleName.MANAGER)
        with self.assertRaises(AccessDeniedError):
            project_service.delete_project(self.db, context(self.db, manager, project))
        self.assertIsNotNone(self.db.get(Project, project.id))


if __name__ == "__main__":
    unittest.main()
