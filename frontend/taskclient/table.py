"""Data-table model for a project's tasks.

Rows come straight from the query cache. Each column has a ``ColumnKind``
and the kind alone decides how a cell is displayed and whether (and how) it
can be edited. Only one cell is in edit mode at a time.
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from taskclient import services
from taskclient.errors import ApiError, ErrorResult, Severity, handle_api_error
from taskclient.mutations import MutationResult, TaskMutations, tasks_key

logger = logging.getLogger(__name__)

PRIORITIES = {1: "Low", 2: "Medium", 3: "High"}
STATUS_TODO = "to do"
STATUS_DONE = "done"
STATUSES = {STATUS_TODO: "To Do", STATUS_DONE: "Done"}
PAST_DUE_DATE_MESSAGE = "The due date cannot be in the past."


class ColumnKind(Enum):
    READ_ONLY = "read_only"
    STATUS = "status"
    EDITABLE_PRIORITY = "editable_priority"
    EDITABLE_DUE_DATE = "editable_due_date"
    ACTIONS = "actions"


@dataclass(frozen=True)
class Column:
    id: str
    header: str
    kind: ColumnKind
    sortable: bool = True


COLUMNS = (
    Column("title", "Title", ColumnKind.READ_ONLY),
    Column("status", "Status", ColumnKind.STATUS),
    Column("priority", "Priority", ColumnKind.EDITABLE_PRIORITY),
    Column("due_date", "Due Date", ColumnKind.EDITABLE_DUE_DATE),
    Column("actions", "", ColumnKind.ACTIONS, sortable=False),
)


def task_status(task: dict) -> str:
    return STATUS_DONE if task.get("is_completed") else STATUS_TODO


def date_part(value) -> str:
    """``YYYY-MM-DD`` part of a stored due date, or an empty string."""
    if not value:
        return ""
    return str(value).split("T")[0]


class ReadOnlyCell:
    editable = False

    def display(self, row: dict, column: Column) -> str:
        value = row.get(column.id)
        return "" if value is None else str(value)

    def sort_key(self, row: dict, column: Column):
        return str(row.get(column.id) or "").lower()


class StatusCell(ReadOnlyCell):
    def display(self, row, column):
        return STATUSES[row["status"]]

    def sort_key(self, row, column):
        return row["status"]


class PriorityCell(ReadOnlyCell):
    editable = True

    def display(self, row, column):
        return PRIORITIES.get(row.get("priority"), "Unknown")

    def sort_key(self, row, column):
        return row.get("priority") or 0


class DueDateCell(ReadOnlyCell):
    editable = True

    def display(self, row, column):
        return date_part(row.get("due_date")) or "N/A"

    def sort_key(self, row, column):
        return date_part(row.get("due_date")) or None


class ActionsCell(ReadOnlyCell):
    def display(self, row, column):
        return ""


CELLS = {
    ColumnKind.READ_ONLY: ReadOnlyCell(),
    ColumnKind.STATUS: StatusCell(),
    ColumnKind.EDITABLE_PRIORITY: PriorityCell(),
    ColumnKind.EDITABLE_DUE_DATE: DueDateCell(),
    ColumnKind.ACTIONS: ActionsCell(),
}


class TaskTable:
    def __init__(
        self,
        project_id,
        mutations: TaskMutations,
        columns: tuple[Column, ...] = COLUMNS,
        today: Callable[[], date] = date.today,
    ):
        self.project_id = str(project_id)
        self.mutations = mutations
        self.columns = {c.id: c for c in columns}
        self._today = today
        self.sorting: tuple[str, bool] | None = None  # (column id, descending)
        self.title_filter = ""
        self.status_filter: set[str] = set()
        self.priority_filter: set[int] = set()
        self.editing_cell: tuple[str, str] | None = None  # (task id, column id)

    @property
    def key(self) -> tuple:
        return tasks_key(self.project_id)

    async def load(self) -> list[dict]:
        """Fetch the task list through the cache; a failure leaves the cached rows and shows a toast."""
        cache = self.mutations.cache
        try:
            await cache.fetch_query(self.key, lambda: services.get_tasks_for_project(self.mutations.api, self.project_id))
        except ApiError as error:
            result = handle_api_error(error, "fetching tasks")
            if not result.suppressed:
                self.mutations.notifier.show_error_toast(result)
        return self.rows

    @property
    def rows(self) -> list[dict]:
        rows = [{**task, "status": task_status(task)} for task in self.mutations.cache.get_query_data(self.key) or []]

        if self.title_filter:
            needle = self.title_filter.lower()
            rows = [r for r in rows if needle in (r.get("title") or "").lower()]
        if self.status_filter:
            rows = [r for r in rows if r["status"] in self.status_filter]
        if self.priority_filter:
            rows = [r for r in rows if r.get("priority") in self.priority_filter]

        if self.sorting:
            column_id, descending = self.sorting
            column = self.columns[column_id]
            cell = CELLS[column.kind]
            # rows without a value (no due date) stay last whichever way the column is sorted
            blank = [r for r in rows if cell.sort_key(r, column) is None]
            rows = sorted(
                (r for r in rows if cell.sort_key(r, column) is not None),
                key=lambda r: cell.sort_key(r, column),
                reverse=descending,
            ) + blank
        return rows

    def display_value(self, row: dict, column_id: str) -> str:
        column = self.columns[column_id]
        return CELLS[column.kind].display(row, column)

    def set_sorting(self, column_id: str | None, descending: bool = False) -> None:
        if column_id is None:
            self.sorting = None
            return
        if not self.columns[column_id].sortable:
            raise ValueError(f"Column '{column_id}' cannot be sorted")
        self.sorting = (column_id, descending)

    def set_title_filter(self, text: str) -> None:
        self.title_filter = text.strip()

    def set_status_filter(self, statuses) -> None:
        unknown = set(statuses) - set(STATUSES)
        if unknown:
            raise ValueError(f"Unknown status: {', '.join(sorted(unknown))}")
        self.status_filter = set(statuses)

    def set_priority_filter(self, priorities) -> None:
        unknown = set(priorities) - set(PRIORITIES)
        if unknown:
            raise ValueError(f"Unknown priority: {', '.join(map(str, sorted(unknown)))}")
        self.priority_filter = set(priorities)

    def start_editing(self, task_id, column_id: str) -> None:
        column = self.columns[column_id]
        if not CELLS[column.kind].editable:
            raise ValueError(f"Column '{column_id}' is not editable")
        self.editing_cell = (str(task_id), column_id)

    def cancel_editing(self) -> None:
        self.editing_cell = None

    def is_editing(self, task_id, column_id: str) -> bool:
        return self.editing_cell == (str(task_id), column_id)

    def _task(self, task_id) -> dict:
        for task in self.mutations.cache.get_query_data(self.key) or []:
            if str(task.get("id")) == str(task_id):
                return task
        raise KeyError(task_id)

    async def _patch(self, task_id, changes: dict) -> MutationResult:
        return await self.mutations.patch_task(self.project_id, task_id, changes)

    async def change_priority(self, task_id, priority: int) -> MutationResult | None:
        self.editing_cell = None
        if priority not in PRIORITIES:
            raise ValueError(f"Invalid priority: {priority}")
        if self._task(task_id).get("priority") == priority:
            return None
        return await self._patch(task_id, {"priority": priority})

    async def commit_due_date(self, task_id, value: str | None) -> MutationResult | None:
        """Save an edited due date. Past dates are refused locally and nothing is sent."""
        self.editing_cell = None
        value = date_part(value)
        if value and value < self._today().isoformat():
            self.mutations.notifier.show_error_toast(ErrorResult(message=PAST_DUE_DATE_MESSAGE, severity=Severity.LOW))
            return None
        if value == date_part(self._task(task_id).get("due_date")):
            return None
        return await self._patch(task_id, {"due_date": value or None})

    async def toggle_status(self, task_id) -> MutationResult:
        task = self._task(task_id)
        return await self._patch(task_id, {"is_completed": not task.get("is_completed")})

    async def delete(self, task_id) -> MutationResult:
        return await self.mutations.delete_task(self.project_id, task_id)
