"""Database engine utilities.

This module centralizes engine construction so every SQLAlchemy object in the
application comes from the db layer.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str, application_name: str | None = None) -> Engine:
    """Create the SQLAlchemy engine for ledger database access.

    Args:
        database_url: SQLAlchemy database URL.
        application_name: Optional PostgreSQL `application_name` shown in `pg_stat_activity`.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")

    connect_args: dict[str, str] = {}
    if application_name:
        connect_args["application_name"] = application_name
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
