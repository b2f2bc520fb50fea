"""Application services.

Services orchestrate the storage port and the pure domain rules, and turn
storage failures and missing rows into NurseCare exceptions.
"""

from nursecare.services.notification_service import NotificationService
from nursecare.services.patient_service import PatientService
from nursecare.services.todo_service import TodoService

__all__ = ["NotificationService", "PatientService", "TodoService"]
