"""Database service for project creation and reads."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import ProjectRecord

from .interfaces import ProjectRepositoryPort
from .ledger_store import db_map_project_record


class SQLAlchemyProjectService(ProjectRepositoryPort):
    """SQLAlchemy-backed project repository."""

    def __init__(self, engine: Engine):
        """Initialize project persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_project_create(self, name: str, description: str | None) -> ProjectRecord:
        """Insert one project.

        Args:
            name: Non-blank project name.
            description: Optional description; blank values are stored as NULL.

        Returns:
            ProjectRecord: Inserted project.

        Raises:
            ValueError: Raised when name is blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("name must not be blank")
        normalized_description = (description or "").strip() or None

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "INSERT INTO project (name, description) "
                        "VALUES (:name, :description) "
                        "RETURNING project_id, name, description, created_at_utc"
                    ),
                    {"name": normalized_name, "description": normalized_description},
                ).mappings().one()
                return db_map_project_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to create project") from error

    def db_project_get_by_id(self, project_id: UUID) -> ProjectRecord | None:
        """Fetch one project by id.

        Args:
            project_id: Project identifier.

        Returns:
            ProjectRecord | None: Matching project or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT project_id, name, description, created_at_utc "
                        "FROM project WHERE project_id = :project_id"
                    ),
                    {"project_id": project_id},
                ).mappings().first()
                if row is None:
                    return None
                return db_map_project_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch project by id") from error

    def db_project_list(self, limit: int, offset: int) -> list[ProjectRecord]:
        """List projects with deterministic ordering.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.

        Returns:
            list[ProjectRecord]: Projects ordered by creation time descending.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """

        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        "SELECT project_id, name, description, created_at_utc "
                        "FROM project "
                        "ORDER BY created_at_utc DESC, project_id DESC "
                        "LIMIT :limit OFFSET :offset"
                    ),
                    {"limit": limit, "offset": offset},
                ).mappings().all()
                return [db_map_project_record(row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list projects") from error
