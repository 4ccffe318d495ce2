"""Persistence failures surfaced by document store adapters."""

from __future__ import annotations

from typing import Any

from src.domain.exceptions import ParliamentError


class StoreError(ParliamentError):
    """Raised when the underlying store fails an operation.

    Attributes:
        operation: Store operation that failed (e.g. "update_one").
        collection: Collection the operation targeted.
    """

    status_code = 503
    problem_type = "store:unavailable"
    title = "Store Unavailable"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        collection: str | None = None,
    ) -> None:
        self.operation = operation
        self.collection = collection
        super().__init__(message)


class DuplicateDocumentError(StoreError):
    """Raised when inserting a document whose id already exists."""

    status_code = 409
    problem_type = "store:duplicate-document"
    title = "Duplicate Document"

    def __init__(self, collection: str, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(
            f"Document '{document_id}' already exists in '{collection}'",
            operation="insert_one",
            collection=collection,
        )


class TallyIncompleteError(StoreError):
    """Raised when an end-voting run failed part way through.

    The meeting counter has not advanced. Re-running end-voting finishes
    the proposals listed here together with any still open.

    Attributes:
        meeting_number: Meeting whose cycle is incomplete.
        failed_proposal_ids: Proposals whose close or tally failed.
        completed_proposal_ids: Proposals tallied during this attempt.
    """

    problem_type = "tally:incomplete"
    title = "Tally Incomplete"

    def __init__(
        self,
        meeting_number: int,
        failed_proposal_ids: list[str],
        completed_proposal_ids: list[str],
    ) -> None:
        self.meeting_number = meeting_number
        self.failed_proposal_ids = tuple(failed_proposal_ids)
        self.completed_proposal_ids = tuple(completed_proposal_ids)
        super().__init__(
            f"End of voting for meeting {meeting_number} incomplete: "
            f"{len(failed_proposal_ids)} proposal(s) failed, "
            f"{len(completed_proposal_ids)} completed. Retry to finish."
        )

    def problem_extensions(self) -> dict[str, Any]:
        return {
            "meeting_number": self.meeting_number,
            "failed_proposal_ids": list(self.failed_proposal_ids),
            "completed_proposal_ids": list(self.completed_proposal_ids),
            "retryable": True,
        }
