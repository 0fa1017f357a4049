"""Database health service for connectivity and schema presence checks."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import HealthStatus

from .interfaces import DatabaseHealthPort

LEDGER_REQUIRED_TABLES = ("project", "period", "ledger_transaction", "event_log", "notification")


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service backed by SQLAlchemy engine checks.

    Reports `ok` when the database answers and every ledger table exists, and
    `schema_missing` when migrations have not been applied yet.
    """

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with the password hidden.

        Returns:
            str: Rendered engine URL string.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify connectivity and ledger table presence.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                missing_tables = [
                    table_name
                    for table_name in LEDGER_REQUIRED_TABLES
                    if connection.execute(
                        text("SELECT to_regclass(:table_name) AS table_oid"),
                        {"table_name": f"public.{table_name}"},
                    ).scalar() is None
                ]
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error

        if missing_tables:
            return HealthStatus(
                status="schema_missing",
                detail=f"missing tables: {', '.join(missing_tables)}",
            )
        return HealthStatus(status="ok", detail="database connectivity verified")
