"""Unit tests for the global and project-scoped authorization gates."""

import unittest

from taskboard.core.errors import (
    AccessDeniedError,
    DenialReason,
    InvalidInputError,
    MissingParameterError,
)
from taskboard.models.enums import Permission, ProjectRoleName
from taskboard.services.authorization import (
    TASK_CREATE_ROLES,
    GlobalRole,
    ProjectContext,
    can_create_tasks,
    can_manage_tasks,
    can_update_task,
    check_project_role,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_admin,
    is_project_admin,
    load_global_role,
    require_admin,
    require_permission,
    require_project_role,
    require_task_update,
    resolve_project_id,
)
from tests.support import make_session, make_user

ADMIN = GlobalRole(name="admin", permissions=frozenset({"read", "write", "delete"}))
USER = GlobalRole(name="user", permissions=frozenset({"read"}))


def _ctx(role: ProjectRoleName | None, user_id: int = 1) -> ProjectContext:
    return ProjectContext(project_id=10, user_id=user_id, role=role)


class TestGlobalGate(unittest.TestCase):
    """Permission checks over a resolved GlobalRole value."""

    def test_has_permission(self) -> None:
        self.assertTrue(has_permission(USER, Permission.READ))
        self.assertFalse(has_permission(USER, "write"))
        self.assertFalse(has_permission(None, Permission.READ))

    def test_any_and_all(self) -> None:
        self.assertTrue(has_any_permission(USER, [Permission.WRITE, Permission.READ]))
        self.assertFalse(has_all_permissions(USER, [Permission.WRITE, Permission.READ]))
        self.assertTrue(has_all_permissions(ADMIN, list(Permission)))

    def test_is_admin_by_name(self) -> None:
        self.assertTrue(is_admin(ADMIN))
        self.assertFalse(is_admin(USER))
        self.assertFalse(is_admin(None))

    def test_missing_role_is_no_role_assigned(self) -> None:
        with self.assertRaises(AccessDeniedError) as cm:
            require_permission(None, Permission.READ)
        self.assertEqual(cm.exception.reason, DenialReason.NO_ROLE_ASSIGNED)

    def test_insufficient_permission_is_forbidden(self) -> None:
        with self.assertRaises(AccessDeniedError) as cm:
            require_permission(USER, Permission.DELETE)
        self.assertEqual(cm.exception.reason, DenialReason.FORBIDDEN)
        self.assertEqual(cm.exception.status_code, 403)

    def test_require_admin(self) -> None:
        self.assertIs(require_admin(ADMIN), ADMIN)
        with self.assertRaises(AccessDeniedError):
            require_admin(USER)


class TestLoadGlobalRole(unittest.TestCase):
    """The role is read from storage every time it is asked for."""

    def test_reads_current_role(self) -> None:
        db = make_session()
        try:
            user = make_user(db, "Ann")
            self.assertEqual(load_global_role(db, user.id).permissions, frozenset({"read"}))
            user.role_id = None
            db.commit()
            self.assertIsNone(load_global_role(db, user.id))
            self.assertIsNone(load_global_role(db, 9999))
        finally:
            db.close()


class TestProjectPolicies(unittest.TestCase):
    """Static role-set policies."""

    def test_role_sets(self) -> None:
        self.assertTrue(is_project_admin(ProjectRoleName.ADMIN))
        self.assertFalse(is_project_admin(ProjectRoleName.MANAGER))
        self.assertTrue(can_manage_tasks(ProjectRoleName.MANAGER))
        self.assertFalse(can_manage_tasks(ProjectRoleName.CONTRIBUTOR))
        self.assertTrue(can_create_tasks(ProjectRoleName.CONTRIBUTOR))
        self.assertFalse(can_create_tasks(ProjectRoleName.VIEWER))
        self.assertFalse(can_create_tasks(None))

    def test_every_role_can_read(self) -> None:
        for role in ProjectRoleName:
            self.assertTrue(check_project_role(role, set(ProjectRoleName)))
        self.assertFalse(check_project_role(None, set(ProjectRoleName)))


class TestOwnershipRule(unittest.TestCase):
    """Update permission depends on the task's current assignee for contributors."""

    def test_admin_and_manager_always(self) -> None:
        self.assertTrue(can_update_task(ProjectRoleName.ADMIN, 1, None))
        self.assertTrue(can_update_task(ProjectRoleName.MANAGER, 1, 2))

    def test_contributor_only_own(self) -> None:
        self.assertTrue(can_update_task(ProjectRoleName.CONTRIBUTOR, 1, 1))
        self.assertFalse(can_update_task(ProjectRoleName.CONTRIBUTOR, 1, 2))
        self.assertFalse(can_update_task(ProjectRoleName.CONTRIBUTOR, 1, None))

    def test_viewer_never(self) -> None:
        self.assertFalse(can_update_task(ProjectRoleName.VIEWER, 1, 1))

    def test_require_task_update_reasons(self) -> None:
        with self.assertRaises(AccessDeniedError) as cm:
            require_task_update(_ctx(ProjectRoleName.CONTRIBUTOR, user_id=1), assignee_id=2)
        self.assertEqual(cm.exception.reason, DenialReason.NOT_ASSIGNEE)
        with self.assertRaises(AccessDeniedError) as cm:
            require_task_update(_ctx(None), assignee_id=1)
        self.assertEqual(cm.exception.reason, DenialReason.NOT_A_MEMBER)
        with self.assertRaises(AccessDeniedError) as cm:
            require_task_update(_ctx(ProjectRoleName.VIEWER), assignee_id=1)
        self.assertEqual(cm.exception.reason, DenialReason.FORBIDDEN)


class TestRequireProjectRole(unittest.TestCase):
    def test_non_member(self) -> None:
        with self.assertRaises(AccessDeniedError) as cm:
            require_project_role(_ctx(None), TASK_CREATE_ROLES)
        self.assertEqual(cm.exception.reason, DenialReason.NOT_A_MEMBER)

    def test_viewer_cannot_create(self) -> None:
        with self.assertRaises(AccessDeniedError) as cm:
            require_project_role(_ctx(ProjectRoleName.VIEWER), TASK_CREATE_ROLES)
        self.assertEqual(cm.exception.reason, DenialReason.FORBIDDEN)

    def test_contributor_can_create(self) -> None:
        role = require_project_role(_ctx(ProjectRoleName.CONTRIBUTOR), TASK_CREATE_ROLES)
        self.assertEqual(role, ProjectRoleName.CONTRIBUTOR)


class TestResolveProjectId(unittest.TestCase):
    """Path beats body beats query; missing and malformed ids fail distinctly."""

    def test_precedence(self) -> None:
        self.assertEqual(resolve_project_id("3", 4, "5"), 3)
        self.assertEqual(resolve_project_id(None, 4, "5"), 4)
        self.assertEqual(resolve_project_id(None, "", "5"), 5)

    def test_missing(self) -> None:
        with self.assertRaises(MissingParameterError):
            resolve_project_id(None, None, None)

    def test_not_an_integer(self) -> None:
        with self.assertRaises(InvalidInputError) as cm:
            resolve_project_id("abc", None, None)
        self.assertNotIsInstance(cm.exception, MissingParameterError)


if __name__ == "__main__":
    unittest.main()
