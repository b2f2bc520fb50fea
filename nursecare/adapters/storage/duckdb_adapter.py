"""DuckDB Storage Adapter.

This adapter implements the StoragePort contract for persisting patients,
todos and notifications to DuckDB, an in-process database that works both
file-backed and in-memory.

Architecture:
    - Implements StoragePort (Hexagonal Architecture)
    - Isolated from domain core - only depends on ports and models
    - Stamps created_at/updated_at at write time
    - Cascading deletes run in a single transaction
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import duckdb

from nursecare.domain.models import Notification, Patient, Todo
from nursecare.domain.ports import (
    Result,
    StorageError,
    StoragePort,
    TodoFilter,
)
from nursecare.infrastructure.config_manager import DatabaseConfig

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = [
    "id", "first_name", "last_name", "date_of_birth", "weight", "gender",
    "diagnoses", "allergies", "room_number", "notes", "created_at", "updated_at",
]

TODO_COLUMNS = [
    "id", "title", "description", "category", "priority", "due_date",
    "completed", "completed_at", "notification_sent", "patient_id",
    "assigned_to_id", "created_at", "updated_at",
]

NOTIFICATION_COLUMNS = [
    "id", "type", "message", "read", "read_at", "user_id", "todo_id", "created_at",
]


def _quoted(columns: list[str]) -> str:
    return ", ".join(f'"{c}"' for c in columns)


class DuckDBAdapter(StoragePort):
    """DuckDB implementation of StoragePort.

    Parameters:
        db_config: DatabaseConfig from configuration manager (preferred)
        db_path: Path to DuckDB database file (or ':memory:' for in-memory)

    Example Usage:
        ```python
        from nursecare.infrastructure.config_manager import get_database_config

        adapter = DuckDBAdapter(db_config=get_database_config())
        result = adapter.initialize_schema()
        if result.is_success():
            result = adapter.save_patient(patient)
        ```
    """

    def __init__(
        self,
        db_config: Optional[DatabaseConfig] = None,
        db_path: Optional[str] = None,
    ):
        """Initialize DuckDB adapter.

        Parameters:
            db_config: DatabaseConfig from configuration manager
            db_path: Path to DuckDB database file (or ':memory:' for in-memory)

        Note:
            If both db_config and db_path are provided, db_config takes precedence.
            If neither is provided, defaults to in-memory database.
            The connection is established lazily (on first operation).
        """
        if db_config:
            if db_config.db_type != "duckdb":
                raise StorageError(
                    f"DatabaseConfig type '{db_config.db_type}' does not match DuckDB adapter",
                    operation="__init__"
                )
            self.db_config = db_config
            self.db_path = db_config.get_connection_string()
        else:
            self.db_path = db_path or ":memory:"
            if self.db_path != ":memory:" and not Path(self.db_path).parent.exists():
                raise StorageError(
                    f"Database directory does not exist: {Path(self.db_path).parent}",
                    operation="__init__"
                )
            self.db_config = DatabaseConfig(db_type="duckdb", db_path=self.db_path)

        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._initialized = False
        self._lock = threading.RLock()

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        """Get or create DuckDB connection."""
        if self._connection is None:
            try:
                self._connection = duckdb.connect(self.db_path)
                logger.info(f"Connected to DuckDB database: {self.db_path}")
            except Exception as e:
                raise StorageError(
                    f"Failed to connect to DuckDB: {str(e)}",
                    operation="connect",
                    details={"db_path": self.db_path}
                )
        return self._connection

    def _ensure_schema(self) -> None:
        if not self._initialized:
            init_result = self.initialize_schema()
            if not init_result.is_success():
                raise StorageError(init_result.error, operation="initialize_schema")

    def _failure(self, operation: str, error: Exception, **details: Any) -> Result:
        error_msg = f"Failed to {operation.replace('_', ' ')}: {str(error)}"
        logger.error(
            error_msg,
            exc_info=True,
            extra={"extra_fields": {"operation": operation, **details}}
        )
        return Result.failure_result(
            StorageError(error_msg, operation=operation, details=details),
            error_type="StorageError",
            error_details={"operation": operation, **details}
        )

    def _fetch_dicts(self, sql: str, params: Optional[list] = None) -> list[dict]:
        cursor = self._get_connection().execute(sql, params or [])
        columns = [d[0] for d in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _exists(self, table: str, record_id: str) -> bool:
        row = self._get_connection().execute(
            f"SELECT 1 FROM {table} WHERE id = ?", [record_id]
        ).fetchone()
        return row is not None

    def _upsert(self, table: str, columns: list[str], values: dict) -> None:
        conn = self._get_connection()
        if self._exists(table, values["id"]):
            # The primary key is never part of SET
            assignments = ", ".join(f'"{c}" = ?' for c in columns if c != "id")
            params = [values[c] for c in columns if c != "id"] + [values["id"]]
            conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", params)
        else:
            placeholders = ", ".join("?" for _ in columns)
            conn.execute(
                f"INSERT INTO {table} ({_quoted(columns)}) VALUES ({placeholders})",
                [values[c] for c in columns]
            )

    def _stamp(self, table: str, record_id: str, created_at: Optional[datetime]) -> tuple[datetime, datetime]:
        """created_at is kept from the stored row, updated_at is always now."""
        now = datetime.now()
        if created_at is None:
            row = self._get_connection().execute(
                f"SELECT created_at FROM {table} WHERE id = ?", [record_id]
            ).fetchone()
            created_at = row[0] if row and row[0] else now
        return created_at, now

    def initialize_schema(self) -> Result[None]:
        """Initialize database schema.

        Creates tables for:
        - patients: Patient records with JSON diagnoses/allergies
        - todos: Care tasks
        - notifications: Per-user notifications

        Returns:
            Result[None]: Success or failure result
        """
        try:
            with self._lock:
                conn = self._get_connection()

                conn.execute("""
                    CREATE TABLE IF NOT EXISTS patients (
                        id VARCHAR PRIMARY KEY,
                        first_name VARCHAR NOT NULL,
                        last_name VARCHAR NOT NULL,
                        date_of_birth DATE NOT NULL,
                        weight DECIMAL(5, 2) NOT NULL,
                        gender VARCHAR NOT NULL,
                        diagnoses VARCHAR NOT NULL DEFAULT '[]',
                        allergies VARCHAR NOT NULL DEFAULT '[]',
                        room_number VARCHAR,
                        notes VARCHAR,
                        created_at TIMESTAMP NOT NULL,
                        updated_at TIMESTAMP NOT NULL
                    )
                """)

                conn.execute("""
                    CREATE TABLE IF NOT EXISTS todos (
                        id VARCHAR PRIMARY KEY,
                        title VARCHAR NOT NULL,
                        description VARCHAR,
                        category VARCHAR NOT NULL,
                        priority VARCHAR NOT NULL DEFAULT 'medium',
                        due_date TIMESTAMP NOT NULL,
                        completed BOOLEAN NOT NULL DEFAULT FALSE,
                        completed_at TIMESTAMP,
                        notification_sent BOOLEAN NOT NULL DEFAULT FALSE,
                        patient_id VARCHAR NOT NULL,
                        assigned_to_id VARCHAR,
                        created_at TIMESTAMP NOT NULL,
                        updated_at TIMESTAMP NOT NULL
                    )
                """)

                conn.execute("""
                    CREATE TABLE IF NOT EXISTS notifications (
                        id VARCHAR PRIMARY KEY,
                        "type" VARCHAR NOT NULL,
                        message VARCHAR NOT NULL,
                        "read" BOOLEAN NOT NULL DEFAULT FALSE,
                        read_at TIMESTAMP,
                        user_id VARCHAR NOT NULL,
                        todo_id VARCHAR,
                        created_at TIMESTAMP NOT NULL
                    )
                """)

                self._initialized = True
            logger.info("Database schema initialized successfully")
            return Result.success_result(None)

        except Exception as e:
            return self._failure("initialize_schema", e)

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    @staticmethod
    def _patient_from_row(row: dict) -> Patient:
        row = dict(row)
        row["diagnoses"] = json.loads(row.get("diagnoses") or "[]")
        row["allergies"] = json.loads(row.get("allergies") or "[]")
        return Patient.model_validate(row)

    def save_patient(self, patient: Patient) -> Result[Patient]:
        """Insert or update a patient.

        Parameters:
            patient: Validated patient (diagnoses already normalized)

        Returns:
            Result[Patient]: Stored patient with timestamps stamped
        """
        try:
            with self._lock:
                self._ensure_schema()
                created_at, updated_at = self._stamp("patients", patient.id, patient.created_at)
                stored = patient.model_copy(update={"created_at": created_at, "updated_at": updated_at})

                values = stored.model_dump(exclude={"age"})
                values["gender"] = stored.gender.value
                values["diagnoses"] = json.dumps([d.model_dump() for d in stored.diagnoses])
                values["allergies"] = json.dumps(stored.allergies)
                self._upsert("patients", PATIENT_COLUMNS, values)

            logger.debug(f"Saved patient {stored.id}")
            return Result.success_result(stored)

        except Exception as e:
            return self._failure("save_patient", e, patient_id=patient.id)

    def get_patient(self, patient_id: str) -> Result[Optional[Patient]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(
                    f"SELECT {_quoted(PATIENT_COLUMNS)} FROM patients WHERE id = ?", [patient_id]
                )
            return Result.success_result(self._patient_from_row(rows[0]) if rows else None)

        except Exception as e:
            return self._failure("get_patient", e, patient_id=patient_id)

    def list_patients(self) -> Result[list[Patient]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(
                    f"SELECT {_quoted(PATIENT_COLUMNS)} FROM patients "
                    "ORDER BY last_name ASC, first_name ASC"
                )
            return Result.success_result([self._patient_from_row(r) for r in rows])

        except Exception as e:
            return self._failure("list_patients", e)

    def delete_patient(self, patient_id: str) -> Result[bool]:
        """Delete a patient, its todos and their notifications in one transaction."""
        try:
            with self._lock:
                self._ensure_schema()
                if not self._exists("patients", patient_id):
                    return Result.success_result(False)

                conn = self._get_connection()
                conn.begin()
                try:
                    conn.execute(
                        "DELETE FROM notifications WHERE todo_id IN "
                        "(SELECT id FROM todos WHERE patient_id = ?)",
                        [patient_id]
                    )
                    conn.execute("DELETE FROM todos WHERE patient_id = ?", [patient_id])
                    conn.execute("DELETE FROM patients WHERE id = ?", [patient_id])
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise

            logger.info(f"Deleted patient {patient_id} with its todos")
            return Result.success_result(True)

        except Exception as e:
            return self._failure("delete_patient", e, patient_id=patient_id)

    # ------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------

    def save_todo(self, todo: Todo) -> Result[Todo]:
        try:
            with self._lock:
                self._ensure_schema()
                created_at, updated_at = self._stamp("todos", todo.id, todo.created_at)
                stored = todo.model_copy(update={"created_at": created_at, "updated_at": updated_at})

                values = stored.model_dump()
                values["category"] = stored.category.value
                values["priority"] = stored.priority.value
                self._upsert("todos", TODO_COLUMNS, values)

            logger.debug(f"Saved todo {stored.id}")
            return Result.success_result(stored)

        except Exception as e:
            return self._failure("save_todo", e, todo_id=todo.id)

    def get_todo(self, todo_id: str) -> Result[Optional[Todo]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(
                    f"SELECT {_quoted(TODO_COLUMNS)} FROM todos WHERE id = ?", [todo_id]
                )
            return Result.success_result(Todo.model_validate(rows[0]) if rows else None)

        except Exception as e:
            return self._failure("get_todo", e, todo_id=todo_id)

    def list_todos(self, filters: Optional[TodoFilter] = None) -> Result[list[Todo]]:
        """List todos matching equality filters, ordered by due date."""
        filters = filters or TodoFilter()
        try:
            query = f"SELECT {_quoted(TODO_COLUMNS)} FROM todos WHERE 1=1"
            params: list = []

            if filters.patient_id:
                query += " AND patient_id = ?"
                params.append(filters.patient_id)

            if filters.assigned_to_id:
                query += " AND assigned_to_id = ?"
                params.append(filters.assigned_to_id)

            if filters.category:
                query += " AND category = ?"
                params.append(filters.category.value)

            if filters.completed is not None:
                query += " AND completed = ?"
                params.append(filters.completed)

            query += " ORDER BY due_date ASC"

            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(query, params)
            return Result.success_result([Todo.model_validate(r) for r in rows])

        except Exception as e:
            return self._failure("list_todos", e)

    def delete_todo(self, todo_id: str) -> Result[bool]:
        try:
            with self._lock:
                self._ensure_schema()
                if not self._exists("todos", todo_id):
                    return Result.success_result(False)

                conn = self._get_connection()
                conn.begin()
                try:
                    conn.execute("DELETE FROM notifications WHERE todo_id = ?", [todo_id])
                    conn.execute("DELETE FROM todos WHERE id = ?", [todo_id])
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise

            return Result.success_result(True)

        except Exception as e:
            return self._failure("delete_todo", e, todo_id=todo_id)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def save_notification(self, notification: Notification) -> Result[Notification]:
        try:
            with self._lock:
                self._ensure_schema()
                created_at, _ = self._stamp("notifications", notification.id, notification.created_at)
                stored = notification.model_copy(update={"created_at": created_at})

                values = stored.model_dump()
                values["type"] = stored.type.value
                self._upsert("notifications", NOTIFICATION_COLUMNS, values)

            return Result.success_result(stored)

        except Exception as e:
            return self._failure("save_notification", e, notification_id=notification.id)

    def get_notification(self, notification_id: str) -> Result[Optional[Notification]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(
                    f"SELECT {_quoted(NOTIFICATION_COLUMNS)} FROM notifications WHERE id = ?",
                    [notification_id]
                )
            return Result.success_result(Notification.model_validate(rows[0]) if rows else None)

        except Exception as e:
            return self._failure("get_notification", e, notification_id=notification_id)

    def list_notifications(self, user_id: str, unread_only: bool = False) -> Result[list[Notification]]:
        try:
            query = f"SELECT {_quoted(NOTIFICATION_COLUMNS)} FROM notifications WHERE user_id = ?"
            if unread_only:
                query += ' AND "read" = FALSE'
            query += " ORDER BY created_at DESC"

            with self._lock:
                self._ensure_schema()
                rows = self._fetch_dicts(query, [user_id])
            return Result.success_result([Notification.model_validate(r) for r in rows])

        except Exception as e:
            return self._failure("list_notifications", e, user_id=user_id)

    def delete_notification(self, notification_id: str) -> Result[bool]:
        try:
            with self._lock:
                self._ensure_schema()
                if not self._exists("notifications", notification_id):
                    return Result.success_result(False)
                self._get_connection().execute(
                    "DELETE FROM notifications WHERE id = ?", [notification_id]
                )
            return Result.success_result(True)

        except Exception as e:
            return self._failure("delete_notification", e, notification_id=notification_id)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def query(self, sql: str) -> Result[list]:
        """Run a raw query and return all rows (used by the health probe)."""
        try:
            with self._lock:
                rows = self._get_connection().execute(sql).fetchall()
            return Result.success_result(rows)
        except Exception as e:
            return self._failure("query", e)

    def close(self) -> None:
        """Close storage connection and release resources."""
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.close()
                    logger.info("Closed DuckDB connection")
                except Exception as e:
                    logger.warning(f"Error closing connection: {str(e)}")
                finally:
                    self._connection = None
                    self._initialized = False
