"""
SQLite storage for evaluation history.

Persists flat EvaluationRecords with schema versioning and migration
support. All timestamps are stored as ISO 8601 strings with 'Z' suffix (UTC).

The database tracks:
- schema_version: Applied migrations
- evaluations: One row per evaluated response

Example usage:
    >>> from agent_compliance_eval.storage.db import init_db_if_needed
    >>> init_db_if_needed("./output/evaluations.db")
    >>> with sqlite3.connect("./output/evaluations.db") as conn:
    ...     row_id = insert_evaluation(conn, record)

Security:
    - ALL queries use parameterized statements to prevent SQL injection
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from agent_compliance_eval.evaluator.record import EvaluationRecord
from agent_compliance_eval.exceptions import DatabaseInitError, DatabaseQueryError
from agent_compliance_eval.utils.time import utc_timestamp

logger = logging.getLogger(__name__)

# Increment when migrations are added
CURRENT_SCHEMA_VERSION = 1

# Record fields stored as JSON text
_JSON_COLUMNS = ("violations", "missing_actions")

_RECORD_COLUMNS = tuple(EvaluationRecord.model_fields)


def init_db_if_needed(db_path: str | Path) -> None:
    """
    Create the database and apply pending migrations.

    Idempotent: a database already at the current schema version is left
    untouched.

    Args:
        db_path: Path to the SQLite file; parent directories are created

    Raises:
        DatabaseInitError: If the file cannot be created, a migration fails,
            or the database was written by a newer schema version
    """
    db_path = Path(db_path)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
            """)
            conn.commit()

            current_version = get_schema_version(conn)

            if current_version < CURRENT_SCHEMA_VERSION:
                logger.info(
                    f"Database schema upgrade needed: "
                    f"v{current_version} -> v{CURRENT_SCHEMA_VERSION}"
                )
                apply_migrations(conn, current_version, CURRENT_SCHEMA_VERSION)
            elif current_version == CURRENT_SCHEMA_VERSION:
                logger.debug(f"Database schema is current (v{CURRENT_SCHEMA_VERSION})")
            else:
                raise DatabaseInitError(
                    f"Database schema version {current_version} is newer than "
                    f"expected {CURRENT_SCHEMA_VERSION}. Update the software or "
                    f"use a different database file."
                )
    except (sqlite3.Error, OSError) as e:
        raise DatabaseInitError(f"Failed to initialize database {db_path}: {e}") from e


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Current schema version, 0 for a fresh database."""
    result = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    return result if result is not None else 0


def apply_migrations(
    conn: sqlite3.Connection, from_version: int, to_version: int
) -> None:
    """
    Apply migrations from_version+1 .. to_version, one transaction each.

    Raises:
        DatabaseInitError: On a downgrade request or a failed migration
            (the failed step is rolled back)
    """
    if from_version > to_version:
        raise DatabaseInitError(
            f"Cannot downgrade schema from v{from_version} to v{to_version}"
        )

    for target_version in range(from_version + 1, to_version + 1):
        logger.info(f"Applying migration to schema version {target_version}")
        try:
            conn.execute("BEGIN")

            if target_version == 1:
                _migrate_to_v1(conn)
            else:
                raise DatabaseInitError(
                    f"No migration defined for version {target_version}"
                )

            conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (target_version, utc_timestamp()),
            )
            conn.commit()
        except (sqlite3.Error, DatabaseInitError) as e:
            conn.rollback()
            logger.error(
                f"Migration to version {target_version} failed: {e}", exc_info=True
            )
            raise DatabaseInitError(
                f"Failed to migrate database to version {target_version}: {e}"
            ) from e


def _migrate_to_v1(conn: sqlite3.Connection) -> None:
    """Create the evaluations table and its indexes."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS evaluations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            scenario_id TEXT NOT NULL,
            scenario_name TEXT,
            agent_name TEXT,
            team_org TEXT,
            persona_id INTEGER,
            raw_response TEXT,
            user_message TEXT,
            timestamp TEXT NOT NULL,

            intent TEXT,
            policy TEXT,
            hallucination TEXT,
            tone TEXT,
            escalation TEXT,
            overall TEXT NOT NULL,
            reasoning TEXT,
            compliance_score INTEGER,
            violations TEXT,
            missing_actions TEXT,

            coherence_score INTEGER,
            empathy_score INTEGER,
            clarity_score INTEGER,
            professionalism_score INTEGER,
            sentiment_score INTEGER,
            readability_score INTEGER,
            keyword_coverage INTEGER,
            response_length INTEGER
        )
    """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_evaluations_scenario "
        "ON evaluations(scenario_id)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_evaluations_agent ON evaluations(agent_name)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_evaluations_timestamp "
        "ON evaluations(timestamp)"
    )
    logger.debug("Created schema v1 tables and indexes")


def _decode_row(row: sqlite3.Row) -> dict[str, Any]:
    evaluation = dict(row)
    for column in _JSON_COLUMNS:
        evaluation[column] = json.loads(evaluation[column] or "[]")
    return evaluation


def insert_evaluation(conn: sqlite3.Connection, record: EvaluationRecord) -> int:
    """
    Insert one evaluation record and commit.

    Returns:
        Row id of the inserted evaluation

    Raises:
        DatabaseQueryError: If the insert fails
    """
    data = record.model_dump()
    for column in _JSON_COLUMNS:
        data[column] = json.dumps(data[column])

    columns = ", ".join(_RECORD_COLUMNS)
    placeholders = ", ".join("?" for _ in _RECORD_COLUMNS)
    try:
        cursor = conn.execute(
            f"INSERT INTO evaluations ({columns}) VALUES ({placeholders})",
            tuple(data[column] for column in _RECORD_COLUMNS),
        )
        conn.commit()
    except sqlite3.Error as e:
        raise DatabaseQueryError(
            f"Failed to store evaluation for {record.scenario_id}: {e}"
        ) from e

    logger.debug(f"Inserted evaluation {cursor.lastrowid} for {record.scenario_id}")
    return cursor.lastrowid


def get_evaluations(
    conn: sqlite3.Connection,
    scenario_id: str | None = None,
    agent_name: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """
    Stored evaluations, newest first.

    Args:
        conn: Open database connection
        scenario_id: Only evaluations of this scenario
        agent_name: Only evaluations of this agent
        limit: Maximum number of rows

    Returns:
        Flat record dictionaries (with 'id'); violations and missing_actions
        decoded back to lists

    Raises:
        DatabaseQueryError: If the query fails
    """
    query = "SELECT * FROM evaluations"
    conditions = []
    params: list[Any] = []

    if scenario_id is not None:
        conditions.append("scenario_id = ?")
        params.append(scenario_id)
    if agent_name is not None:
        conditions.append("agent_name = ?")
        params.append(agent_name)
    if conditions:
        query += " WHERE " + " AND ".join(conditions)

    query += " ORDER BY timestamp DESC, id DESC"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)

    conn.row_factory = sqlite3.Row
    try:
        rows = conn.execute(query, params).fetchall()
    except sqlite3.Error as e:
        raise DatabaseQueryError(f"Failed to query evaluations: {e}") from e
    finally:
        conn.row_factory = None

    return [_decode_row(row) for row in rows]


def get_evaluation(
    conn: sqlite3.Connection, evaluation_id: int
) -> dict[str, Any] | None:
    """
    One stored evaluation by row id.

    Returns:
        Flat record dictionary as in get_evaluations(), or None if no row has
        that id

    Raises:
        DatabaseQueryError: If the query fails
    """
    conn.row_factory = sqlite3.Row
    try:
        row = conn.execute(
            "SELECT * FROM evaluations WHERE id = ?", (evaluation_id,)
        ).fetchone()
    except sqlite3.Error as e:
        raise DatabaseQueryError(
            f"Failed to query evaluation {evaluation_id}: {e}"
        ) from e
    finally:
        conn.row_factory = None

    return _decode_row(row) if row is not None else None


def delete_evaluation(conn: sqlite3.Connection, evaluation_id: int) -> bool:
    """
    Delete one stored evaluation and commit.

    Returns:
        True if a row was deleted, False if no row had that id

    Raises:
        DatabaseQueryError: If the delete fails
    """
    try:
        cursor = conn.execute(
            "DELETE FROM evaluations WHERE id = ?", (evaluation_id,)
        )
        conn.commit()
    except sqlite3.Error as e:
        raise DatabaseQueryError(
            f"Failed to delete evaluation {evaluation_id}: {e}"
        ) from e

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug(f"Deleted evaluation {evaluation_id}")
    return deleted
