"""Client-side state layer for the Taskboard API: session, HTTP client, query cache, mutations and the task table."""

from taskclient.session import AuthSession
from taskclient.errors import ApiError, ErrorResult, Severity, handle_api_error, get_error_message
from taskclient.notifications import Notifier, Toast
from taskclient.api import ApiClient
from taskclient.cache import QueryCache
from taskclient.mutations import Mutation, MutationResult, TaskMutations, ProjectMutations
from taskclient.table import ColumnKind, Column, TaskTable

__all__ = [
    "AuthSession",
    "ApiError",
    "ErrorResult",
    "Severity",
    "handle_api_error",
    "get_error_message",
    "Notifier",
    "Toast",
    "ApiClient",
    "QueryCache",
    "Mutation",
    "MutationResult",
    "TaskMutations",
    "ProjectMutations",
    "ColumnKind",
    "Column",
    "TaskTable",
]
