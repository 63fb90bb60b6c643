"""Optimistic mutations over the query cache.

Every task mutation follows the same protocol: cancel in-flight fetches for
the project's task list, snapshot it, write the expected result into the
cache, then call the API. A failure restores the snapshot and shows exactly
one error toast; a success writes the server's copy and invalidates the list
so the next read refetches it.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from taskclient import services
from taskclient.api import ApiClient
from taskclient.cache import QueryCache
from taskclient.errors import ApiError, handle_api_error
from taskclient.notifications import Notifier

logger = logging.getLogger(__name__)

PROJECTS_KEY = ("projects",)


def tasks_key(project_id) -> tuple:
    return ("tasks", str(project_id))


@dataclass
class MutationResult:
    ok: bool
    data: Any = None
    error: ApiError | None = None


class Mutation:
    """One mutation and its lifecycle hooks.

    ``on_mutate(variables)`` is awaited first and its return value is handed
    to ``on_error``/``on_success`` as the rollback context. Only ``ApiError``
    counts as a failed mutation; anything else propagates.
    """

    def __init__(
        self,
        mutation_fn: Callable[[dict], Awaitable[Any]],
        on_mutate: Callable[[dict], Awaitable[Any]] | None = None,
        on_error: Callable[[ApiError, dict, Any], None] | None = None,
        on_success: Callable[[Any, dict, Any], None] | None = None,
    ):
        self.mutation_fn = mutation_fn
        self.on_mutate = on_mutate
        self.on_error = on_error
        self.on_success = on_success

    async def mutate(self, variables: dict) -> MutationResult:
        context = await self.on_mutate(variables) if self.on_mutate else None
        try:
            data = await self.mutation_fn(variables)
        except ApiError as error:
            if self.on_error:
                self.on_error(error, variables, context)
            return MutationResult(ok=False, error=error)
        if self.on_success:
            self.on_success(data, variables, context)
        return MutationResult(ok=True, data=data)


class _BaseMutations:
    def __init__(self, api: ApiClient, cache: QueryCache, notifier: Notifier):
        self.api = api
        self.cache = cache
        self.notifier = notifier

    def _report(self, error: ApiError, context: str) -> None:
        result = handle_api_error(error, context)
        if result.suppressed:
            return
        self.notifier.show_error_toast(result)


class TaskMutations(_BaseMutations):
    def _optimistic(self, apply: Callable[[list[dict], dict], list[dict]]):
        async def on_mutate(variables: dict):
            key = tasks_key(variables["project_id"])
            await self.cache.cancel_queries(key)
            previous = list(self.cache.get_query_data(key) or [])
            self.cache.set_query_data(key, apply(previous, variables))
            return previous

        return on_mutate

    def _rollback(self, context: str, callback=None):
        def on_error(error: ApiError, variables: dict, previous):
            self.cache.set_query_data(tasks_key(variables["project_id"]), previous)
            self._report(error, context)
            if callback:
                callback(error)

        return on_error

    def _settle(self, success_message: str | None, callback=None):
        def on_success(task, variables: dict, previous):
            key = tasks_key(variables["project_id"])
            placeholder = variables.get("placeholder_id")
            if task:
                self.cache.set_query_data(
                    key,
                    lambda tasks: [
                        task if str(t.get("id")) in (str(task.get("id")), placeholder) else t for t in (tasks or [])
                    ],
                )
            self.cache.invalidate_queries(key)
            if success_message:
                self.notifier.show_success(success_message)
            if callback:
                callback(task)

        return on_success

    async def add_task(self, project_id, task_data: dict, on_success=None, on_error=None) -> MutationResult:
        placeholder_id = f"optimistic-{uuid.uuid4()}"

        def apply(tasks, variables):
            return tasks + [{**variables["task_data"], "id": placeholder_id, "is_optimistic": True}]

        mutation = Mutation(
            lambda v: services.create_task_in_project(self.api, v["project_id"], v["task_data"]),
            on_mutate=self._optimistic(apply),
            on_error=self._rollback("creating the task", on_error),
            on_success=self._settle("Task created successfully!", on_success),
        )
        return await mutation.mutate(
            {"project_id": project_id, "task_data": task_data, "placeholder_id": placeholder_id}
        )

    async def update_task(self, project_id, task_id, task_data: dict, on_success=None, on_error=None) -> MutationResult:
        mutation = Mutation(
            lambda v: services.update_task(self.api, v["task_id"], v["task_data"]),
            on_mutate=self._optimistic(_merge_into("task_data")),
            on_error=self._rollback("updating the task", on_error),
            on_success=self._settle("Task updated successfully!", on_success),
        )
        return await mutation.mutate({"project_id": project_id, "task_id": str(task_id), "task_data": task_data})

    async def patch_task(self, project_id, task_id, partial_task_data: dict, on_success=None, on_error=None) -> MutationResult:
        # inline edits are frequent, so a successful patch stays silent
        mutation = Mutation(
            lambda v: services.patch_task(self.api, v["task_id"], v["task_data"]),
            on_mutate=self._optimistic(_merge_into("task_data")),
            on_error=self._rollback("patching the task", on_error),
            on_success=self._settle(None, on_success),
        )
        return await mutation.mutate({"project_id": project_id, "task_id": str(task_id), "task_data": partial_task_data})

    async def delete_task(self, project_id, task_id, on_success=None, on_error=None) -> MutationResult:
        def apply(tasks, variables):
            return [t for t in tasks if str(t.get("id")) != variables["task_id"]]

        def settle(_, variables, previous):
            self.cache.invalidate_queries(tasks_key(variables["project_id"]))
            self.notifier.show_success("Task deleted successfully!")
            if on_success:
                on_success(None)

        mutation = Mutation(
            lambda v: services.delete_task(self.api, v["task_id"]),
            on_mutate=self._optimistic(apply),
            on_error=self._rollback("deleting the task", on_error),
            on_success=settle,
        )
        return await mutation.mutate({"project_id": project_id, "task_id": str(task_id)})


def _merge_into(field: str):
    def apply(tasks, variables):
        return [
            {**t, **variables[field]} if str(t.get("id")) == variables["task_id"] else t
            for t in tasks
        ]

    return apply


class ProjectMutations(_BaseMutations):
    """Project mutations are not optimistic; the list is refreshed once the server confirms."""

    def _failed(self, context: str, callback=None):
        def on_error(error: ApiError, variables, _):
            self._report(error, context)
            if callback:
                callback(error)

        return on_error

    def _done(self, message: str, callback=None, prepend: bool = False):
        def on_success(project, variables, _):
            if prepend and project:
                self.cache.set_query_data(PROJECTS_KEY, lambda projects: [project] + list(projects or []))
            self.cache.invalidate_queries(PROJECTS_KEY)
            self.notifier.show_success(message)
            if callback:
                callback(project)

        return on_success

    async def add_project(self, name: str, on_success=None, on_error=None) -> MutationResult:
        mutation = Mutation(
            lambda v: services.create_project(self.api, v["name"]),
            on_error=self._failed("creating the project", on_error),
            on_success=self._done("Project created successfully!", on_success, prepend=True),
        )
        return await mutation.mutate({"name": name})

    async def update_project(self, project_id, name: str, on_success=None, on_error=None) -> MutationResult:
        mutation = Mutation(
            lambda v: services.update_project(self.api, v["project_id"], v["name"]),
            on_error=self._failed("updating the project", on_error),
            on_success=self._done("Project updated successfully!", on_success),
        )
        return await mutation.mutate({"project_id": project_id, "name": name})

    async def delete_project(self, project_id, on_success=None, on_error=None) -> MutationResult:
        def on_deleted(data, variables, context):
            self.cache.remove_queries(tasks_key(variables["project_id"]))
            self._done("Project deleted successfully!", on_success)(data, variables, context)

        mutation = Mutation(
            lambda v: services.delete_project(self.api, v["project_id"]),
            on_error=self._failed("deleting the project", on_error),
            on_success=on_deleted,
        )
        return await mutation.mutate({"project_id": project_id})
