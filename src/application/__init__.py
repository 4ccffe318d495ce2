"""
Application layer - Use cases and orchestration for the parliament session.

This layer contains:
- Application services (seat registry, sequencer, vote ledger, tally)
- Port definitions (abstract interfaces for infrastructure)
- DTOs passed across the API boundary

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, api
"""
