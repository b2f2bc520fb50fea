"""Todo endpoints.

Besides CRUD this router serves the dashboard queries: overdue, due today
and upcoming within an hour window. Static paths are declared before
``/{todo_id}`` so they are not captured as identifiers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response, status

from nursecare.api.dependencies import TodoServiceDep
from nursecare.domain.enums import TodoCategory
from nursecare.domain.models import Todo, TodoUpdate
from nursecare.domain.ports import TodoFilter
from nursecare.infrastructure.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


@router.post("", response_model=Todo, status_code=status.HTTP_201_CREATED)
async def create_todo(todo: Todo, service: TodoServiceDep) -> Todo:
    """Create a todo for an existing patient."""
    return service.create(todo)


@router.get("", response_model=list[Todo])
async def list_todos(
    service: TodoServiceDep,
    patient_id: Optional[str] = Query(None, alias="patientId", description="Filter by patient"),
    assigned_to_id: Optional[str] = Query(None, alias="assignedToId", description="Filter by assignee"),
    category: Optional[TodoCategory] = Query(None, description="Filter by care category"),
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
    search: Optional[str] = Query(None, description="Free-text search; replaces the other filters"),
) -> list[Todo]:
    """List todos ordered by due date."""
    filters = TodoFilter(
        patient_id=patient_id,
        assigned_to_id=assigned_to_id,
        category=category,
        completed=completed,
    )
    return service.find_all(filters=filters, search=search)


@router.get("/overdue", response_model=list[Todo])
async def get_overdue(service: TodoServiceDep) -> list[Todo]:
    """Open todos whose due date has passed."""
    return service.overdue()


@router.get("/today", response_model=list[Todo])
async def get_today(service: TodoServiceDep) -> list[Todo]:
    """Open todos due on the current local calendar day."""
    return service.today()


@router.get("/upcoming", response_model=list[Todo])
async def get_upcoming(
    service: TodoServiceDep,
    hours: Optional[float] = Query(None, description="Window size in hours (defaults to NC_UPCOMING_HOURS)"),
) -> list[Todo]:
    """Open, not yet notified todos due within the next hours."""
    return service.upcoming(settings.upcoming_hours if hours is None else hours)


@router.get("/{todo_id}", response_model=Todo)
async def get_todo(todo_id: str, service: TodoServiceDep) -> Todo:
    return service.get(todo_id)


@router.put("/{todo_id}", response_model=Todo)
async def update_todo(todo_id: str, update: TodoUpdate, service: TodoServiceDep) -> Todo:
    """Update the fields present in the request body.

    Setting ``completed`` to true stamps ``completedAt``.
    """
    return service.update(todo_id, update)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(todo_id: str, service: TodoServiceDep) -> Response:
    service.delete(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
