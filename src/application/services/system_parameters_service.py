"""Store-backed access to the chamber's scalar parameters.

Both parameters live as documents ``{"id": <name>, "value": ...}`` in
the systemParameters collection. Missing documents are created with
their defaults on first use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.ports.document_store import SYSTEM_PARAMETERS
from src.domain.errors import DuplicateDocumentError
from src.domain.models.chamber import (
    BREAK_STATUS_PARAMETER,
    FIRST_MEETING_NUMBER,
    MEETING_NUMBER_PARAMETER,
    SystemParameters,
)

if TYPE_CHECKING:
    from src.application.ports.document_store import DocumentStoreProtocol

logger = get_logger(__name__)

_DEFAULTS: dict[str, object] = {
    BREAK_STATUS_PARAMETER: False,
    MEETING_NUMBER_PARAMETER: FIRST_MEETING_NUMBER,
}


class SystemParametersService:
    """Reads and updates break status and the meeting number."""

    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._store = store
        self._log = logger.bind(component="system_parameters")

    async def ensure_initialized(self) -> None:
        """Create any missing parameter document with its default value."""
        for name, default in _DEFAULTS.items():
            if await self._store.find_one(SYSTEM_PARAMETERS, {"id": name}) is not None:
                continue
            try:
                await self._store.insert_one(
                    SYSTEM_PARAMETERS, {"id": name, "value": default}
                )
                self._log.info("Initialized system parameter", name=name)
            except DuplicateDocumentError:
                # Another caller created it first
                pass

    async def get(self) -> SystemParameters:
        """Return a snapshot of both parameters."""
        documents = {
            document["id"]: document
            for document in await self._store.find_many(SYSTEM_PARAMETERS)
        }
        if any(name not in documents for name in _DEFAULTS):
            await self.ensure_initialized()
            documents = {
                document["id"]: document
                for document in await self._store.find_many(SYSTEM_PARAMETERS)
            }
        return SystemParameters(
            break_active=bool(documents[BREAK_STATUS_PARAMETER]["value"]),
            meeting_number=int(documents[MEETING_NUMBER_PARAMETER]["value"]),
        )

    async def set_break_active(self, active: bool) -> None:
        await self.ensure_initialized()
        await self._store.update_one(
            SYSTEM_PARAMETERS, {"id": BREAK_STATUS_PARAMETER}, {"value": active}
        )

    async def advance_meeting(self, expected: int) -> int:
        """Advance the meeting number from ``expected`` to ``expected + 1``.

        The update is a compare-and-set on the current value, so running
        it twice for the same meeting advances the counter only once.

        Returns:
            The meeting number stored after the attempt.
        """
        await self.ensure_initialized()
        updated = await self._store.find_one_and_update(
            SYSTEM_PARAMETERS,
            {"id": MEETING_NUMBER_PARAMETER, "value": expected},
            {"value": expected + 1},
        )
        if updated is not None:
            self._log.info("Meeting number advanced", meeting_number=expected + 1)
            return int(updated["value"])

        current = await self.get()
        self._log.warning(
            "Meeting number already moved past expected value",
            expected=expected,
            current=current.meeting_number,
        )
        return current.meeting_number
