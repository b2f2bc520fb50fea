"""Domain Ports - Abstract Contracts for Persistence.

This module defines the Port interfaces (abstract contracts) that storage
adapters must implement, together with the Result type and the exception
hierarchy shared by the whole application.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (DuckDB, ...) implement StoragePort
    - Domain Core is isolated from storage specifics
    - Adapters report failures through Result, services raise exceptions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from nursecare.domain.enums import TodoCategory
from nursecare.domain.models import Notification, Patient, Todo

T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Storage adapters return Result objects so that callers can decide how a
    failure is surfaced (HTTP status, CLI exit code, log entry).

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error information (only present if success=False)
        error_type: Type of error (StorageError, ValidationError, etc.)
        error_details: Additional error context (operation, entity id, etc.)

    Example:
        ```python
        result = storage.get_patient(patient_id)
        if result.is_success():
            patient = result.value
        else:
            logger.error(result.error, extra={"extra_fields": result.error_details})
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (e.g., "StorageError")
            error_details: Additional context (operation, entity id, etc.)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class NurseCareError(Exception):
    """Base exception for all NurseCare errors."""
    pass


class ValidationError(NurseCareError):
    """Raised when input fails a domain rule.

    Covers malformed timestamps, non-positive hour windows, empty
    required text and failed form submission rules. Never retried.

    Attributes:
        field: Name of the offending field, if known
        details: Additional error details or validation messages
    """

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.field = field
        self.details = details or {}


class NotFoundError(NurseCareError):
    """Raised when a requested entity does not exist.

    Attributes:
        entity: Entity kind (patient, todo, notification)
        entity_id: Identifier that was looked up
    """

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[str] = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class StorageError(NurseCareError):
    """Raised when the storage layer cannot complete an operation.

    Attributes:
        operation: Storage operation that failed
        details: Additional error context
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}


# ============================================================================
# Storage Port
# ============================================================================

@dataclass(frozen=True)
class TodoFilter:
    """Equality filters for listing todos. None means "any"."""

    patient_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    category: Optional[TodoCategory] = None
    completed: Optional[bool] = None


class StoragePort(ABC):
    """Abstract contract for persisting patients, todos and notifications.

    Key Principles:
        - Repository-style: find/save/delete with simple filter predicates
        - Adapters stamp created_at/updated_at at write time
        - Failures are returned as Result.failure_result(), not raised
        - Deleting a patient removes its todos and their notifications

    Example Usage:
        ```python
        storage = DuckDBAdapter(db_config=get_database_config())
        storage.initialize_schema()
        result = storage.save_patient(patient)
        if result.is_success():
            saved = result.value
        ```
    """

    @abstractmethod
    def initialize_schema(self) -> Result[None]:
        """Create tables if they do not exist."""
        pass

    @abstractmethod
    def save_patient(self, patient: Patient) -> Result[Patient]:
        """Insert or replace a patient.

        Returns:
            Result[Patient]: The stored patient with timestamps stamped
        """
        pass

    @abstractmethod
    def get_patient(self, patient_id: str) -> Result[Optional[Patient]]:
        """Fetch one patient, value is None when it does not exist."""
        pass

    @abstractmethod
    def list_patients(self) -> Result[list[Patient]]:
        """List all patients ordered by last name, then first name."""
        pass

    @abstractmethod
    def delete_patient(self, patient_id: str) -> Result[bool]:
        """Delete a patient and everything that references it.

        Returns:
            Result[bool]: True if a row was deleted, False if none matched
        """
        pass

    @abstractmethod
    def save_todo(self, todo: Todo) -> Result[Todo]:
        """Insert or replace a todo."""
        pass

    @abstractmethod
    def get_todo(self, todo_id: str) -> Result[Optional[Todo]]:
        """Fetch one todo, value is None when it does not exist."""
        pass

    @abstractmethod
    def list_todos(self, filters: Optional[TodoFilter] = None) -> Result[list[Todo]]:
        """List todos matching the filters, ordered by due date ascending."""
        pass

    @abstractmethod
    def delete_todo(self, todo_id: str) -> Result[bool]:
        """Delete a todo and its notifications."""
        pass

    @abstractmethod
    def save_notification(self, notification: Notification) -> Result[Notification]:
        """Insert or replace a notification."""
        pass

    @abstractmethod
    def get_notification(self, notification_id: str) -> Result[Optional[Notification]]:
        """Fetch one notification, value is None when it does not exist."""
        pass

    @abstractmethod
    def list_notifications(self, user_id: str, unread_only: bool = False) -> Result[list[Notification]]:
        """List a user's notifications, newest first."""
        pass

    @abstractmethod
    def delete_notification(self, notification_id: str) -> Result[bool]:
        """Delete a notification."""
        pass

    def query(self, sql: str) -> Result[list]:
        """Run a raw read-only query (health probes). Optional.

        Note:
            This is a default implementation that reports the operation
            as unsupported. Adapters can override it.
        """
        return Result.failure_result(
            StorageError("Raw queries are not supported by this adapter", operation="query"),
            error_type="StorageError"
        )

    def close(self) -> None:
        """Release any held connection. Optional."""
        return None
