"""
API layer - FastAPI routes and HTTP concerns for the parliament session.

This layer contains:
- FastAPI route definitions
- Request/Response models
- HTTP middleware
- Member identity extraction

IMPORT RULES:
- CAN import from: application, bootstrap
- Services are injected through src.api.dependencies
"""

__all__: list[str] = []
