"""Infrastructure layer - External adapters for the parliament session service.

This layer contains:
- PostgreSQL document store (SQLAlchemy async)
- SSE broadcaster
- Password hashing and the tally webhook
- Logging and Prometheus metrics

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
