"""
Domain layer - Pure business logic for the parliament session service.

This layer contains:
- Domain models (Member, Proposal, Vote, SystemParameters, ...)
- Domain events (session state changes)
- Pure domain services (redistribution and pass rule)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from src.domain.exceptions import ParliamentError

__all__: list[str] = ["ParliamentError"]
