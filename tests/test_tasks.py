"""Service tests for the task store and ordering engine on an in-memory database."""

import unittest
from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.errors import AccessDeniedError, InvalidInputError, NotFoundError
from taskboard.models import Activity, Task
from taskboard.models.enums import (
    ActivityAction,
    ProjectRoleName,
    TaskPriority,
    TaskStatus,
)
from taskboard.schemas.tasks import SubtaskIn, TaskCreate, TaskUpdate
from taskboard.services import tasks as task_service
from taskboard.services.ordering import make_room, next_order
from tests.support import add_member, context, make_project, make_session, make_task, make_user


def _actions(db, project_id: int) -> list[ActivityAction]:
    rows = db.query(Activity).filter(Activity.project_id == project_id).order_by(Activity.id)
    return [row.action for row in rows]


class TaskTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.owner = make_user(self.db, "Owner")
        self.project = make_project(self.db, self.owner)
        self.admin_ctx = context(self.db, self.owner, self.project)

    def tearDown(self) -> None:
        self.db.close()


class TestCreateTask(TaskTestCase):
    """Creation defaults and end-of-column placement."""

    def test_defaults_round_trip(self) -> None:
        created = task_service.create_task(self.db, self.admin_ctx, TaskCreate(title="Write docs"))
        task = task_service.get_task(self.db, self.admin_ctx, created.id)
        self.assertEqual(task.status, TaskStatus.TODO)
        self.assertEqual(task.priority, TaskPriority.MEDIUM)
        self.assertEqual(task.order, 0)
        self.assertEqual(task.subtasks, [])
        self.assertEqual(task.created_by_id, self.owner.id)
        self.assertEqual(_actions(self.db, self.project.id), [ActivityAction.TASK_CREATED])

    def test_appends_to_partition(self) -> None:
        make_task(self.db, self.project, self.owner, order=4)
        make_task(self.db, self.project, self.owner, status=TaskStatus.DONE, order=9)
        task = task_service.create_task(self.db, self.admin_ctx, TaskCreate(title="Next"))
        self.assertEqual(task.order, 5)

    def test_tags_and_subtasks(self) -> None:
        data = TaskCreate(
            title="With extras",
            tags=[" api ", "api", "", "db"],
            subtasks=[SubtaskIn(title="one"), SubtaskIn(title="two", completed=True)],
        )
        task = task_service.create_task(self.db, self.admin_ctx, data)
        self.assertEqual(task.tags, ["api", "db"])
        self.assertEqual([(s.title, s.completed) for s in task.subtasks], [("one", False), ("two", True)])

    def test_viewer_denied_contributor_allowed(self) -> None:
        viewer = make_user(self.db, "Viewer")
        contributor = make_user(self.db, "Contributor")
        add_member(self.db, self.project, viewer, ProjectRoleName.VIEWER)
        add_member(self.db, self.project, contributor, ProjectRoleName.CONTRIBUTOR)

        with self.assertRaises(AccessDeniedError):
            task_service.create_task(
                self.db, context(self.db, viewer, self.project), TaskCreate(title="Nope")
            )
        task = task_service.create_task(
            self.db, context(self.db, contributor, self.project), TaskCreate(title="Yes")
        )
        self.assertEqual(task.created_by_id, contributor.id)

    def test_assignee_must_be_member(self) -> None:
        outsider = make_user(self.db, "Outsider")
        with self.assertRaises(InvalidInputError):
            task_service.create_task(
                self.db, self.admin_ctx, TaskCreate(title="X", assigned_to=outsider.id)
            )


class TestListAndGet(TaskTestCase):
    def test_sort_order_then_newest(self) -> None:
        a = make_task(self.db, self.project, self.owner, title="a", order=1)
        b = make_task(self.db, self.project, self.owner, title="b", order=0)
        c = make_task(self.db, self.project, self.owner, title="c", order=1)
        ids = [t.id for t in task_service.list_tasks(self.db, self.admin_ctx)]
        self.assertEqual(ids, [b.id, c.id, a.id])

    def test_list_is_idempotent(self) -> None:
        for i in range(4):
            make_task(self.db, self.project, self.owner, title=f"t{i}", order=i % 2)
        first = [(t.id, t.order) for t in task_service.list_tasks(self.db, self.admin_ctx)]
        second = [(t.id, t.order) for t in task_service.list_tasks(self.db, self.admin_ctx)]
        self.assertEqual(first, second)

    def test_filters(self) -> None:
        make_task(self.db, self.project, self.owner, status=TaskStatus.DONE)
        mine = make_task(self.db, self.project, self.owner, assignee=self.owner)
        done = task_service.list_tasks(self.db, self.admin_ctx, status=TaskStatus.DONE)
        self.assertEqual(len(done), 1)
        assigned = task_service.list_tasks(self.db, self.admin_ctx, assigned_to=self.owner.id)
        self.assertEqual([t.id for t in assigned], [mine.id])

    def test_task_from_other_project_is_not_found(self) -> None:
        other = make_project(self.db, self.owner, key="OTHER")
        foreign = make_task(self.db, other, self.owner)
        with self.assertRaises(NotFoundError):
            task_service.get_task(self.db, self.admin_ctx, foreign.id)

    def test_non_member_cannot_read(self) -> None:
        stranger = make_user(self.db, "Stranger")
        with self.assertRaises(AccessDeniedError):
            task_service.list_tasks(self.db, context(self.db, stranger, self.project))


class TestUpdateTask(TaskTestCase):
    """Ownership rule, activity labelling and status-change placement."""

    def setUp(self) -> None:
        super().setUp()
        self.contributor = make_user(self.db, "Contributor")
        self.other = make_user(self.db, "Other")
        add_member(self.db, self.project, self.contributor, ProjectRoleName.CONTRIBUTOR)
        add_member(self.db, self.project, self.other, ProjectRoleName.CONTRIBUTOR)
        self.contrib_ctx = context(self.db, self.contributor, self.project)

    def test_contributor_on_someone_elses_task(self) -> None:
        task = make_task(self.db, self.project, self.owner, assignee=self.other)
        with self.assertRaises(AccessDeniedError):
            task_service.update_task(
                self.db, self.contrib_ctx, task.id, TaskUpdate(title="Hijack")
            )

    def test_contributor_on_own_task(self) -> None:
        task = make_task(self.db, self.project, self.owner, assignee=self.contributor)
        updated = task_service.update_task(
            self.db, self.contrib_ctx, task.id, TaskUpdate(title="Mine")
        )
        self.assertEqual(updated.title, "Mine")

    def test_contributor_cannot_hand_task_to_someone_else(self) -> None:
        task = make_task(self.db, self.project, self.owner, assignee=self.contributor)
        with self.assertRaises(AccessDeniedError):
            task_service.update_task(
                self.db, self.contrib_ctx, task.id, TaskUpdate(assigned_to=self.other.id)
            )

    def test_viewer_never_updates(self) -> None:
        viewer = make_user(self.db, "Viewer")
        add_member(self.db, self.project, viewer, ProjectRoleName.VIEWER)
        task = make_task(self.db, self.project, self.owner, assignee=viewer)
        with self.assertRaises(AccessDeniedError):
            task_service.update_task(
                self.db, context(self.db, viewer, self.project), task.id, TaskUpdate(title="x")
            )

    def test_status_change_appends_and_wins_labelling(self) -> None:
        make_task(self.db, self.project, self.owner, status=TaskStatus.DONE, order=7)
        task = make_task(self.db, self.project, self.owner)
        updated = task_service.update_task(
            self.db,
            self.admin_ctx,
            task.id,
            TaskUpdate(status=TaskStatus.DONE, assigned_to=self.other.id),
        )
        self.assertEqual(updated.status, TaskStatus.DONE)
        self.assertEqual(updated.order, 8)
        self.assertEqual(_actions(self.db, self.project.id)[-1], ActivityAction.TASK_STATUS_CHANGED)

    def test_status_change_with_explicit_order(self) -> None:
        task = make_task(self.db, self.project, self.owner)
        updated = task_service.update_task(
            self.db, self.admin_ctx, task.id, TaskUpdate(status=TaskStatus.IN_REVIEW, order=3)
        )
        self.assertEqual(updated.order, 3)

    def test_assignment_label(self) -> None:
        task = make_task(self.db, self.project, self.owner)
        task_service.update_task(
            self.db, self.admin_ctx, task.id, TaskUpdate(assigned_to=self.other.id)
        )
        self.assertEqual(_actions(self.db, self.project.id)[-1], ActivityAction.TASK_ASSIGNED)

    def test_generic_update_label_and_unset_fields_untouched(self) -> None:
        task = make_task(self.db, self.project, self.owner, priority=TaskPriority.HIGH)
        updated = task_service.update_task(
            self.db, self.admin_ctx, task.id, TaskUpdate(description="More detail")
        )
        self.assertEqual(updated.priority, TaskPriority.HIGH)
        self.assertEqual(updated.description, "More detail")
        self.assertEqual(_actions(self.db, self.project.id)[-1], ActivityAction.TASK_UPDATED)

    def test_subtasks_replaced_wholesale(self) -> None:
        task = task_service.create_task(
            self.db,
            self.admin_ctx,
            TaskCreate(title="T", subtasks=[SubtaskIn(title="a"), SubtaskIn(title="b")]),
        )
        updated = task_service.update_task(
            self.db, self.admin_ctx, task.id, TaskUpdate(subtasks=[SubtaskIn(title="c")])
        )
        self.assertEqual([s.title for s in updated.subtasks], ["c"])


class TestMoveTask(TaskTestCase):
    """Insertion by shift inside the destination partition."""

    def test_ordering_law(self) -> None:
        column = [
            make_task(self.db, self.project, self.owner, title=f"p{i}",
                      status=TaskStatus.IN_PROGRESS, order=i)
            for i in range(4)
        ]
        moving = make_task(self.db, self.project, self.owner, title="m", order=0)

        moved = task_service.move_task(
            self.db, self.admin_ctx, moving.id, TaskStatus.IN_PROGRESS, 2
        )
        self.assertEqual(moved.order, 2)
        self.assertEqual(moved.status, TaskStatus.IN_PROGRESS)
        orders = {t.id: self.db.get(Task, t.id).order for t in column}
        self.assertEqual(
            [orders[t.id] for t in column],
            [0, 1, 3, 4],
        )
        self.assertEqual(_actions(self.db, self.project.id)[-1], ActivityAction.TASK_MOVED)

    def test_move_without_order_keeps_number(self) -> None:
        task = make_task(self.db, self.project, self.owner, order=6)
        moved = task_service.move_task(self.db, self.admin_ctx, task.id, TaskStatus.DONE)
        self.assertEqual((moved.status, moved.order), (TaskStatus.DONE, 6))
        activity = self.db.query(Activity).order_by(Activity.id.desc()).first()
        self.assertEqual(activity.details["from_status"], "todo")
        self.assertEqual(activity.details["to_status"], "done")

    def test_viewer_cannot_move(self) -> None:
        viewer = make_user(self.db, "Viewer")
        add_member(self.db, self.project, viewer, ProjectRoleName.VIEWER)
        task = make_task(self.db, self.project, self.owner)
        with self.assertRaises(AccessDeniedError):
            task_service.move_task(
                self.db, context(self.db, viewer, self.project), task.id, TaskStatus.DONE
            )


class TestOrderingHelpers(TaskTestCase):
    def test_next_order_empty_partition(self) -> None:
        self.assertEqual(next_order(self.db, self.project.id, TaskStatus.TODO), 0)

    def test_make_room_excludes_moved_task(self) -> None:
        a = make_task(self.db, self.project, self.owner, order=1)
        b = make_task(self.db, self.project, self.owner, order=2)
        shifted = make_room(self.db, self.project.id, TaskStatus.TODO, 1, exclude_task_id=b.id)
        self.db.commit()
        self.assertEqual(shifted, 1)
        self.assertEqual(self.db.get(Task, a.id).order, 2)
        self.assertEqual(self.db.get(Task, b.id).order, 2)


class TestDeleteTask(TaskTestCase):
    def test_manager_deletes_contributor_cannot(self) -> None:
        manager = make_user(self.db, "Manager")
        contributor = make_user(self.db, "Contributor")
        add_member(self.db, self.project, manager, ProjectRoleName.MANAGER)
        add_member(self.db, self.project, contributor, ProjectRoleName.CONTRIBUTOR)
        task = make_task(self.db, self.project, self.owner, assignee=contributor)
        task_id = task.id

        with self.assertRaises(AccessDeniedError):
            task_service.delete_task(self.db, context(self.db, contributor, self.project), task_id)
        task_service.delete_task(self.db, context(self.db, manager, self.project), task_id)
        self.assertIsNone(self.db.get(Task, task_id))
        self.assertEqual(_actions(self.db, self.project.id)[-1], ActivityAction.TASK_DELETED)


class TestSubtasks(TaskTestCase):
    def test_add_and_complete(self) -> None:
        task = make_task(self.db, self.project, self.owner)
        task = task_service.add_subtask(self.db, self.admin_ctx, task.id, "  check  ")
        subtask = task.subtasks[0]
        self.assertEqual(subtask.title, "check")

        task = task_service.set_subtask_completed(
            self.db, self.admin_ctx, task.id, subtask.id, True
        )
        self.assertTrue(task.subtasks[0].completed)
        self.assertEqual(
            _actions(self.db, self.project.id)[-2:],
            [ActivityAction.SUBTASK_CREATED, ActivityAction.SUBTASK_COMPLETED],
        )

    def test_unknown_subtask(self) -> None:
        task = make_task(self.db, self.project, self.owner)
        with self.assertRaises(NotFoundError):
            task_service.set_subtask_completed(self.db, self.admin_ctx, task.id, 999, True)


class TestActivityFailureDoesNotFailWrite(TaskTestCase):
    """A failing activity insert is logged and the task still exists."""

    def test_create_survives_activity_failure(self) -> None:
        real_commit = self.db.commit
        calls: list[int] = []

        def flaky_commit() -> None:
            calls.append(1)
            if len(calls) == 2:
                raise SQLAlchemyError("activity store down")
            real_commit()

        with patch.object(self.db, "commit", side_effect=flaky_commit):
            with self.assertLogs("taskboard.services.activity", level="ERROR"):
                task = task_service.create_task(
                    self.db, self.admin_ctx, TaskCreate(title="Survivor")
                )
        self.assertEqual(task.title, "Survivor")
        self.assertEqual(self.db.query(Activity).count(), 0)


if __name__ == "__main__":
    unittest.main()
