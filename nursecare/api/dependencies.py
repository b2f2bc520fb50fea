"""Dependency injection for the REST API.

This module provides dependency injection functions for FastAPI. Routes
depend on application services, which in turn depend on the cached
storage adapter.
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from nursecare.adapters.storage import DuckDBAdapter
from nursecare.domain.ports import StorageError, StoragePort
from nursecare.infrastructure.config_manager import get_database_config
from nursecare.services import NotificationService, PatientService, TodoService
from nursecare.services.common import Clock

logger = logging.getLogger(__name__)


@lru_cache()
def get_storage_adapter() -> StoragePort:
    """Get storage adapter instance (cached).

    The adapter is created from environment configuration and its schema
    is initialized once. The result is cached to avoid recreating the
    adapter on every request.

    Returns:
        StoragePort: Configured storage adapter instance

    Raises:
        ValueError: If database type is unsupported
        StorageError: If the schema cannot be created
    """
    db_config = get_database_config()

    if db_config.db_type != "duckdb":
        raise ValueError(f"Unsupported database type: {db_config.db_type}")

    logger.debug(f"Creating DuckDB adapter with path: {db_config.db_path or ':memory:'}")
    adapter = DuckDBAdapter(db_config=db_config)
    result = adapter.initialize_schema()
    if result.is_failure():
        raise StorageError(result.error, operation="initialize_schema")
    return adapter


def get_clock() -> Clock:
    """Source of the current local time (overridden in tests)."""
    return datetime.now


# Type aliases for dependency injection
StorageDep = Annotated[StoragePort, Depends(get_storage_adapter)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_patient_service(storage: StorageDep) -> PatientService:
    return PatientService(storage)


def get_todo_service(storage: StorageDep, clock: ClockDep) -> TodoService:
    return TodoService(storage, clock=clock)


def get_notification_service(storage: StorageDep, clock: ClockDep) -> NotificationService:
    return NotificationService(storage, clock=clock)


PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
