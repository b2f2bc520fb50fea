"""Response models for the REST API."""

from nursecare.api.models.health import DatabaseHealth, HealthResponse

__all__ = ['DatabaseHealth', 'HealthResponse']
