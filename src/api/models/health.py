"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Health status string (e.g., "healthy").
        store: Active document store backend ("postgres" or "memory").
        observers: Connected event stream clients.
    """

    status: str
    store: str
    observers: int
