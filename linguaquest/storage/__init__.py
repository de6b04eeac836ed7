"""Storage layer - plain CRUD repositories without business logic."""

from . import exercise_repo, progress_repo, user_repo

__all__ = ["exercise_repo", "progress_repo", "user_repo"]
