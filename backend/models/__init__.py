from models.user import User
from models.project import Project
from models.task import Task, TaskPriority

__all__ = [
    "User",
    "Project",
    "Task",
    "TaskPriority",
]
