"""
API routes for the parliament session service.

Routes are organized by domain concern:
- auth, members, seats: member directory and seat registry
- proposals, votes, voting: proposal sequencing, ballots and tally
- chamber: breaks, system parameters and fines
- events: SSE stream of session events
- health, metrics: operational endpoints
"""

from src.api.routes.auth import router as auth_router
from src.api.routes.chamber import router as chamber_router
from src.api.routes.events import router as events_router
from src.api.routes.health import router as health_router
from src.api.routes.members import router as members_router
from src.api.routes.metrics import router as metrics_router
from src.api.routes.proposals import router as proposals_router
from src.api.routes.seats import router as seats_router
from src.api.routes.votes import router as votes_router
from src.api.routes.voting import router as voting_router

__all__: list[str] = [
    "auth_router",
    "chamber_router",
    "events_router",
    "health_router",
    "members_router",
    "metrics_router",
    "proposals_router",
    "seats_router",
    "votes_router",
    "voting_router",
]
