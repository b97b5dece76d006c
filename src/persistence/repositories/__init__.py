"""Repository implementations."""

from src.persistence.repositories.task_repo import TaskRepository
from src.persistence.repositories.turn_repo import TurnRepository
from src.persistence.repositories.user_repo import UserRepository

__all__ = [
    "TaskRepository",
    "TurnRepository",
    "UserRepository",
]
