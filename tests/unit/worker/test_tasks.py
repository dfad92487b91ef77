"""
Unit tests for the contact maintenance Celery tasks.
Tasks are called directly, so no broker is needed.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.services.contacts.backfill import BackfillResult
from src.worker import tasks


@pytest.fixture
def mock_database():
    with patch("src.worker.tasks.Database") as database_cls:
        database = MagicMock()
        database_cls.from_settings.return_value = database
        yield database


class TestBackfillContactsTask:
    """Test backfill_contacts_task."""

    def test_returns_counts_and_disposes_pool(self, mock_database):
        with patch(
            "src.worker.tasks.backfill_contacts_from_calls",
            return_value=BackfillResult(created=4, updated=1),
        ) as run:
            result = tasks.backfill_contacts_task("ws_1")

        assert result == {"status": "completed", "workspace_id": "ws_1", "created": 4, "updated": 1}
        session = mock_database.session.return_value.__enter__.return_value
        run.assert_called_once_with(session, "ws_1", test_call_sentinel="webtest")
        mock_database.dispose.assert_called_once()

    def test_failure_propagates_and_disposes_pool(self, mock_database):
        with patch(
            "src.worker.tasks.backfill_contacts_from_calls", side_effect=RuntimeError("boom")
        ):
            with pytest.raises(RuntimeError):
                tasks.backfill_contacts_task("ws_1")

        mock_database.dispose.assert_called_once()


class TestBackfillAllWorkspacesTask:
    """Test backfill_all_workspaces_task."""

    def test_queues_one_task_per_workspace(self, mock_database):
        session = mock_database.session.return_value.__enter__.return_value
        session.scalars.return_value.all.return_value = ["ws_1", "ws_2"]

        with patch("src.worker.tasks.backfill_contacts_task") as task:
            result = tasks.backfill_all_workspaces_task()

        assert result == {"status": "queued", "workspaces": 2}
        assert [c.args for c in task.delay.call_args_list] == [("ws_1",), ("ws_2",)]
        mock_database.dispose.assert_called_once()
