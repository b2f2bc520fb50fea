"""Helpers shared by the application services."""

from datetime import datetime
from typing import Callable, TypeVar

from nursecare.domain.ports import Result, StorageError, ValidationError

T = TypeVar('T')

Clock = Callable[[], datetime]


def unwrap(result: Result[T], operation: str) -> T:
    """Return the value of a successful result.

    Raises:
        StorageError: If the storage operation failed
    """
    if result.is_failure():
        raise StorageError(
            result.error or f"{operation} failed",
            operation=operation,
            details=result.error_details
        )
    return result.value


def ensure_new(existing: Result, entity: str, record_id: str) -> None:
    """Reject a create whose id is already taken.

    Parameters:
        existing: Result of the storage lookup for record_id
        entity: Entity name for the error message
        record_id: Identifier supplied with the new record

    Raises:
        ValidationError: If a record with this id already exists
        StorageError: If the lookup failed
    """
    if unwrap(existing, f"get_{entity}") is not None:
        raise ValidationError(
            f"A {entity} with id {record_id} already exists",
            field="id",
            details={"entity": entity, "entity_id": record_id}
        )
