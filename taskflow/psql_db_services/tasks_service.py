"""
PostgreSQL CRUD Operations for Tasks
------------------------------------
Task store. Every read takes an explicit QueryScope: OwnedScope filters on
owner_id, AllTenantsScope applies no ownership filter.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import text

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import (
    OwnedScope,
    QueryScope,
    Task,
    TaskPriority,
    TaskStatus,
)
from taskflow.models.request_models import SortOrder, TaskQueryParams, TaskSortField
from taskflow.psql_db_services.base_service import BaseDatabaseService

TASK_COLUMNS = (
    "task_id, title, description, status, priority, due_date, completed_at, "
    "owner_id, created_at, updated_at"
)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "completed_at",
    "updated_at",
)

# Whitelisted ORDER BY expressions; never interpolate user input.
SORT_EXPRESSIONS = {
    TaskSortField.CREATED_AT: "created_at",
    TaskSortField.DUE_DATE: "due_date",
    TaskSortField.TITLE: "title",
    TaskSortField.PRIORITY: (
        "CASE priority WHEN 'LOW' THEN 1 WHEN 'MEDIUM' THEN 2 WHEN 'HIGH' THEN 3 END"
    ),
}


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so search terms match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TasksService(BaseDatabaseService):
    """
    Service for task database operations.

    Supports:
    - Scoped lookups and paginated, filtered listing
    - Partial updates through a whitelisted dynamic UPDATE
    - Per-status and overdue counters for statistics
    """

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    @staticmethod
    def _scope_condition(
        scope: QueryScope, conditions: List[str], params: Dict[str, Any]
    ) -> None:
        if isinstance(scope, OwnedScope):
            conditions.append("owner_id = :scope_owner_id")
            params["scope_owner_id"] = scope.user_id

    @staticmethod
    def _where(conditions: List[str]) -> str:
        return f"WHERE {' AND '.join(conditions)}" if conditions else ""

    @staticmethod
    def _to_value(value: Any) -> Any:
        if isinstance(value, (TaskStatus, TaskPriority)):
            return value.value
        return value

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create(
        self,
        *,
        owner_id: UUID,
        title: str,
        description: Optional[str],
        status: TaskStatus,
        priority: TaskPriority,
        due_date: Optional[datetime],
        completed_at: Optional[datetime],
        created_at: datetime,
    ) -> Task:
        """Insert a task owned by ``owner_id`` and return the stored row."""
        self.validate_uuid(owner_id, "owner_id")
        params = {
            "task_id": uuid4(),
            "title": title,
            "description": description,
            "status": status.value,
            "priority": priority.value,
            "due_date": due_date,
            "completed_at": completed_at,
            "owner_id": owner_id,
            "created_at": created_at,
            "updated_at": created_at,
        }

        try:
            async with self.get_session() as session:
                sql_query = f"""
                    INSERT INTO tasks (
                        task_id, title, description, status, priority, due_date,
                        completed_at, owner_id, created_at, updated_at
                    )
                    VALUES (
                        :task_id, :title, :description, :status, :priority, :due_date,
                        :completed_at, :owner_id, :created_at, :updated_at
                    )
                    RETURNING {TASK_COLUMNS}
                """
                result = await session.execute(text(sql_query), params)
                created_task = result.mappings().one()

            self.log_operation("CREATE", params["task_id"], additional_context=f"owner {owner_id}")
            return Task(**dict(created_task))

        except Exception as e:
            logger.error(f"Error creating task for owner {owner_id}: {e}")
            raise

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def find_by_id(self, task_id: UUID, scope: QueryScope) -> Optional[Task]:
        """Fetch a task by id, restricted to ``scope``."""
        self.validate_uuid(task_id, "task_id")
        conditions = ["task_id = :task_id"]
        params: Dict[str, Any] = {"task_id": task_id}
        self._scope_condition(scope, conditions, params)

        try:
            async with self.get_session() as session:
                sql_query = f"SELECT {TASK_COLUMNS} FROM tasks {self._where(conditions)}"
                result = await session.execute(text(sql_query), params)
                task_record = result.mappings().one_or_none()
                return Task(**dict(task_record)) if task_record else None
        except Exception as e:
            logger.error(f"Error fetching task {task_id}: {e}")
            raise

    def _build_filters(
        self, scope: QueryScope, query: TaskQueryParams, now: datetime
    ) -> Tuple[List[str], Dict[str, Any]]:
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        self._scope_condition(scope, conditions, params)

        if query.status is not None:
            conditions.append("status = :status")
            params["status"] = query.status.value
        if query.priority is not None:
            conditions.append("priority = :priority")
            params["priority"] = query.priority.value
        if query.due_date_from is not None:
            conditions.append("due_date >= :due_date_from")
            params["due_date_from"] = query.due_date_from
        if query.due_date_to is not None:
            conditions.append("due_date <= :due_date_to")
            params["due_date_to"] = query.due_date_to
        if query.overdue:
            conditions.append("due_date < :now AND status <> 'COMPLETED'")
            params["now"] = now
        if query.search:
            conditions.append(
                "(title ILIKE :search ESCAPE '\\' OR description ILIKE :search ESCAPE '\\')"
            )
            params["search"] = f"%{escape_like(query.search)}%"

        return conditions, params

    async def find_all(
        self, scope: QueryScope, query: TaskQueryParams, now: datetime
    ) -> Tuple[List[Task], int]:
        """
        List tasks matching the filters.

        Returns:
            (page of tasks, total number of matching rows)
        """
        conditions, params = self._build_filters(scope, query, now)
        where_sql = self._where(conditions)

        direction = "ASC" if query.sort_order == SortOrder.ASC else "DESC"
        nulls = "NULLS LAST" if query.sort_by == TaskSortField.DUE_DATE else ""
        order_sql = (
            f"ORDER BY {SORT_EXPRESSIONS[query.sort_by]} {direction} {nulls}, task_id ASC"
        )

        try:
            async with self.get_session() as session:
                count_result = await session.execute(
                    text(f"SELECT COUNT(*) FROM tasks {where_sql}"), params
                )
                total = count_result.scalar() or 0

                sql_query = f"""
                    SELECT {TASK_COLUMNS}
                    FROM tasks
                    {where_sql}
                    {order_sql}
                    LIMIT :limit OFFSET :offset
                """
                result = await session.execute(
                    text(sql_query),
                    {**params, "limit": query.page_size, "offset": query.offset},
                )
                tasks = [Task(**dict(row)) for row in result.mappings().all()]

            return tasks, total
        except Exception as e:
            logger.error(f"Error listing tasks: {e}")
            raise

    async def count_by_status(self, scope: QueryScope) -> Dict[TaskStatus, int]:
        """Count tasks per status. Statuses with no rows report 0."""
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        self._scope_condition(scope, conditions, params)

        try:
            async with self.get_session() as session:
                sql_query = f"""
                    SELECT status, COUNT(*) AS count
                    FROM tasks
                    {self._where(conditions)}
                    GROUP BY status
                """
                result = await session.execute(text(sql_query), params)
                counts = {status: 0 for status in TaskStatus}
                for row in result.mappings().all():
                    counts[TaskStatus(row["status"])] = row["count"]
                return counts
        except Exception as e:
            logger.error(f"Error counting tasks by status: {e}")
            raise

    async def count_overdue(self, scope: QueryScope, now: datetime) -> int:
        """Count unfinished tasks whose due date has passed."""
        conditions = ["due_date < :now", "status <> 'COMPLETED'"]
        params: Dict[str, Any] = {"now": now}
        self._scope_condition(scope, conditions, params)

        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(f"SELECT COUNT(*) FROM tasks {self._where(conditions)}"), params
                )
                return result.scalar() or 0
        except Exception as e:
            logger.error(f"Error counting overdue tasks: {e}")
            raise

    # ========================================================================
    # UPDATE OPERATIONS
    # ========================================================================

    async def update(
        self, task_id: UUID, fields: Dict[str, Any], updated_at: datetime
    ) -> Optional[Task]:
        """
        Apply a partial update.

        Args:
            task_id: Task to update
            fields: Column -> new value, limited to the updatable columns
            updated_at: New updated_at timestamp

        Returns:
            The updated task, or None if it no longer exists
        """
        self.validate_uuid(task_id, "task_id")
        update_fields = {name: self._to_value(value) for name, value in fields.items()}
        update_fields["updated_at"] = updated_at

        sql_query, params = self.build_dynamic_update_query(
            table_name="tasks",
            update_fields=update_fields,
            where_clause="task_id = :task_id",
            where_parameters={"task_id": task_id},
            allowed_fields=UPDATABLE_FIELDS,
        )

        try:
            async with self.get_session() as session:
                result = await session.execute(text(sql_query), params)
                updated_task = result.mappings().one_or_none()

            if updated_task is None:
                return None
            self.log_operation("UPDATE", task_id, additional_context=", ".join(fields))
            return Task(**dict(updated_task))
        except Exception as e:
            logger.error(f"Error updating task {task_id}: {e}")
            raise

    # ========================================================================
    # DELETE OPERATIONS
    # ========================================================================

    async def delete(self, task_id: UUID) -> bool:
        """Delete a task (shares and attachment rows cascade)."""
        self.validate_uuid(task_id, "task_id")
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("DELETE FROM tasks WHERE task_id = :task_id"),
                    {"task_id": task_id},
                )
                deleted = result.rowcount > 0

            if deleted:
                self.log_operation("DELETE", task_id)
            return deleted
        except Exception as e:
            logger.error(f"Error deleting task {task_id}: {e}")
            raise
