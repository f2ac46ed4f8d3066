"""
Project Store - Persistence port for project records.

The engine never talks to a database directly. Callers hand it a
ProjectStore; the in-memory implementation backs tests, the CLI and
local sessions.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, timezone
import uuid

from ..errors import ProjectNotFoundError
from .schemas import ProjectRecord


class ProjectStore(ABC):
    """Load and save project records."""

    @abstractmethod
    def get(self, project_id: str) -> ProjectRecord:
        """
        Raises:
            ProjectNotFoundError: no project has this id
        """

    @abstractmethod
    def list(self, owner_uid: str | None = None) -> list[ProjectRecord]:
        """Projects, newest update first, optionally for one owner."""

    @abstractmethod
    def save(self, project: ProjectRecord) -> ProjectRecord:
        """Insert or update; returns the stored record (with id and timestamps)."""

    @abstractmethod
    def delete(self, project_id: str) -> None:
        """
        Raises:
            ProjectNotFoundError: no project has this id
        """


class InMemoryProjectStore(ProjectStore):
    """Dict-backed store. Records are copied in and out."""

    def __init__(self):
        self._projects: dict[str, ProjectRecord] = {}

    def get(self, project_id: str) -> ProjectRecord:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return project.model_copy(deep=True)

    def list(self, owner_uid: str | None = None) -> list[ProjectRecord]:
        projects = [
            p for p in self._projects.values()
            if owner_uid is None or p.owner_uid == owner_uid
        ]
        projects.sort(key=lambda p: p.updated_at, reverse=True)
        return [p.model_copy(deep=True) for p in projects]

    def save(self, project: ProjectRecord) -> ProjectRecord:
        now = datetime.now(timezone.utc)
        existing = self._projects.get(project.id) if project.id else None

        stored = project.model_copy(
            deep=True,
            update={
                "id": project.id or str(uuid.uuid4()),
                "created_at": existing.created_at if existing else (project.created_at or now),
                "updated_at": now,
            },
        )
        self._projects[stored.id] = stored
        return stored.model_copy(deep=True)

    def delete(self, project_id: str) -> None:
        if project_id not in self._projects:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        del self._projects[project_id]

    def __len__(self) -> int:
        return len(self._projects)
