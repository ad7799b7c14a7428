"""
Unit Tests for TasksService
===========================
SQL shape of scoped lookups, filtered listing, counters and partial updates.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import AllTenantsScope, OwnedScope, TaskPriority, TaskStatus
from taskflow.models.request_models import SortOrder, TaskQueryParams, TaskSortField
from taskflow.psql_db_services.tasks_service import TasksService, escape_like
from tests.db_mocks import make_mock_result, setup_mock_sqlalchemy_session

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def task_row(**overrides):
    row = {
        "task_id": uuid4(),
        "title": "Write report",
        "description": None,
        "status": "TODO",
        "priority": "MEDIUM",
        "due_date": None,
        "completed_at": None,
        "owner_id": uuid4(),
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db_manager():
    return AsyncMock(spec=DatabaseManager)


@pytest.fixture
def tasks_service(mock_db_manager):
    return TasksService(database_manager=mock_db_manager)


def test_escape_like():
    assert escape_like("100%_done\\") == "100\\%\\_done\\\\"


class TestFindById:
    @pytest.mark.asyncio
    async def test_owned_scope_filters_on_owner(self, tasks_service, mock_db_manager):
        owner_id = uuid4()
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, task_row(owner_id=owner_id))

        task = await tasks_service.find_by_id(uuid4(), OwnedScope(owner_id))

        assert task.owner_id == owner_id
        sql, params = session.executed[0]
        assert "owner_id = :scope_owner_id" in sql
        assert params["scope_owner_id"] == owner_id

    @pytest.mark.asyncio
    async def test_all_tenants_scope_has_no_owner_filter(self, tasks_service, mock_db_manager):
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, None)

        assert await tasks_service.find_by_id(uuid4(), AllTenantsScope()) is None
        sql, params = session.executed[0]
        assert "owner_id =" not in sql
        assert params == {"task_id": params["task_id"]}


class TestFindAll:
    @pytest.mark.asyncio
    async def test_filters_sort_and_paging(self, tasks_service, mock_db_manager):
        rows = [task_row(priority="HIGH"), task_row(priority="LOW")]
        session, _ = setup_mock_sqlalchemy_session(
            mock_db_manager,
            results=[make_mock_result(scalar=12), make_mock_result(rows)],
        )
        query = TaskQueryParams(
            page=2,
            page_size=5,
            status=TaskStatus.TODO,
            priority=TaskPriority.HIGH,
            search="50%",
            overdue=True,
            sort_by=TaskSortField.PRIORITY,
            sort_order=SortOrder.ASC,
        )

        tasks, total = await tasks_service.find_all(OwnedScope(uuid4()), query, NOW)

        assert total == 12
        assert [t.priority for t in tasks] == [TaskPriority.HIGH, TaskPriority.LOW]

        count_sql, count_params = session.executed[0]
        list_sql, list_params = session.executed[1]
        assert count_sql.strip().startswith("SELECT COUNT(*) FROM tasks")
        for clause in (
            "status = :status",
            "priority = :priority",
            "due_date < :now AND status <> 'COMPLETED'",
            "ILIKE :search",
        ):
            assert clause in count_sql
            assert clause in list_sql
        assert count_params["search"] == "%50\\%%"
        assert "CASE priority" in list_sql
        assert "END ASC" in list_sql
        assert "task_id ASC" in list_sql
        assert list_params["limit"] == 5
        assert list_params["offset"] == 5

    @pytest.mark.asyncio
    async def test_due_date_sort_puts_nulls_last(self, tasks_service, mock_db_manager):
        session, _ = setup_mock_sqlalchemy_session(
            mock_db_manager, results=[make_mock_result(scalar=0), make_mock_result([])]
        )

        tasks, total = await tasks_service.find_all(
            AllTenantsScope(), TaskQueryParams(sort_by=TaskSortField.DUE_DATE), NOW
        )

        assert (tasks, total) == ([], 0)
        assert "due_date DESC NULLS LAST" in session.executed[1][0]
        assert "WHERE" not in session.executed[0][0]


class TestCounters:
    @pytest.mark.asyncio
    async def test_count_by_status_fills_missing_statuses(self, tasks_service, mock_db_manager):
        setup_mock_sqlalchemy_session(
            mock_db_manager, [{"status": "TODO", "count": 4}, {"status": "COMPLETED", "count": 1}]
        )

        counts = await tasks_service.count_by_status(AllTenantsScope())

        assert counts == {
            TaskStatus.TODO: 4,
            TaskStatus.IN_PROGRESS: 0,
            TaskStatus.COMPLETED: 1,
        }

    @pytest.mark.asyncio
    async def test_count_overdue(self, tasks_service, mock_db_manager):
        owner_id = uuid4()
        session, _ = setup_mock_sqlalchemy_session(
            mock_db_manager, results=[make_mock_result(scalar=3)]
        )

        assert await tasks_service.count_overdue(OwnedScope(owner_id), NOW) == 3
        sql, params = session.executed[0]
        assert "due_date < :now" in sql
        assert params == {"now": NOW, "scope_owner_id": owner_id}


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_converts_enums_and_sets_updated_at(self, tasks_service, mock_db_manager):
        task_id = uuid4()
        session, _ = setup_mock_sqlalchemy_session(
            mock_db_manager, task_row(task_id=task_id, status="COMPLETED", completed_at=NOW)
        )

        task = await tasks_service.update(
            task_id, {"status": TaskStatus.COMPLETED, "completed_at": NOW}, updated_at=NOW
        )

        assert task.status == TaskStatus.COMPLETED
        sql, params = session.executed[0]
        assert "UPDATE tasks" in sql
        assert params["set_status"] == "COMPLETED"
        assert params["set_updated_at"] == NOW
        assert params["task_id"] == task_id

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_column(self, tasks_service):
        with pytest.raises(ValueError):
            await tasks_service.update(uuid4(), {"owner_id": uuid4()}, updated_at=NOW)

    @pytest.mark.asyncio
    async def test_update_missing_task(self, tasks_service, mock_db_manager):
        setup_mock_sqlalchemy_session(mock_db_manager, None)
        assert await tasks_service.update(uuid4(), {"title": "x"}, updated_at=NOW) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
    async def test_delete(self, tasks_service, mock_db_manager, rowcount, expected):
        setup_mock_sqlalchemy_session(mock_db_manager, rowcount=rowcount)
        assert await tasks_service.delete(uuid4()) is expected
