"""Activity log: best-effort writes and newest-first reads."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from taskboard.core.config import Settings
from taskboard.core.errors import AccessDeniedError
from taskboard.models import Activity
from taskboard.models.enums import ActivityAction, EntityType
from taskboard.services.activity import clamp_limit, list_activity, log_activity
from tests.support import context, make_project, make_session, make_user


class TestLogActivity(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.user = make_user(self.db, "Ada")
        self.project = make_project(self.db, self.user)

    def tearDown(self) -> None:
        self.db.close()

    def _log(self, description: str = "Did a thing", **kwargs) -> Activity | None:
        return log_activity(
            self.db,
            project_id=self.project.id,
            user_id=self.user.id,
            action=ActivityAction.TASK_UPDATED,
            description=description,
            **kwargs,
        )

    def test_record_is_stored(self) -> None:
        record = self._log(entity_id=7, metadata={"task_title": "T"})
        self.assertIsNotNone(record)
        stored = self.db.get(Activity, record.id)
        self.assertEqual(stored.entity_type, EntityType.TASK)
        self.assertEqual(stored.entity_id, 7)
        self.assertEqual(stored.details, {"task_title": "T"})

    def test_disabled_logging_writes_nothing(self) -> None:
        result = self._log(settings=Settings(ACTIVITY_LOG_ENABLED=False))
        self.assertIsNone(result)
        self.assertEqual(self.db.query(Activity).count(), 0)

    def test_storage_failure_is_swallowed_and_logged(self) -> None:
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        with self.assertLogs("taskboard.services.activity", level="ERROR") as logs:
            result = log_activity(
                db,
                project_id=1,
                user_id=1,
                action=ActivityAction.TASK_CREATED,
                description="x",
            )
        self.assertIsNone(result)
        db.rollback.assert_called_once_with()
        self.assertIn("Failed to log activity", logs.output[0])


class TestListActivity(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.user = make_user(self.db, "Ada")
        self.project = make_project(self.db, self.user)
        self.ctx = context(self.db, self.user, self.project)
        for i in range(5):
            log_activity(
                self.db,
                project_id=self.project.id,
                user_id=self.user.id,
                action=ActivityAction.TASK_CREATED,
                description=f"event {i}",
            )

    def tearDown(self) -> None:
        self.db.close()

    def test_newest_first(self) -> None:
        descriptions = [a.description for a in list_activity(self.db, self.ctx)]
        self.assertEqual(descriptions, [f"event {i}" for i in range(4, -1, -1)])

    def test_limit(self) -> None:
        self.assertEqual(len(list_activity(self.db, self.ctx, limit=2)), 2)

    def test_members_only(self) -> None:
        stranger = make_user(self.db, "Stranger")
        with self.assertRaises(AccessDeniedError):
            list_activity(self.db, context(self.db, stranger, self.project))

    def test_clamp_limit(self) -> None:
        settings = Settings(ACTIVITY_DEFAULT_LIMIT=50, ACTIVITY_MAX_LIMIT=200)
        self.assertEqual(clamp_limit(None, settings), 50)
        self.assertEqual(clamp_limit(0, settings), 50)
        self.assertEqual(clamp_limit(30, settings), 30)
        self.assertEqual(clamp_limit(5000, settings), 200)


if __name__ == "__main__":
    unittest.main()
