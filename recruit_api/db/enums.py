"""Enum definitions for application constants."""

from enum import Enum


class TransferStatus(str, Enum):
    """
    Lifecycle of a team transfer request.

    Only PENDING -> APPROVED and PENDING -> REJECTED transitions exist.
    CANCELLED is stored by the schema but no operation produces it yet.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class TransferAction(str, Enum):
    """Decision an approver can take on a pending transfer request."""
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> TransferStatus:
        if self is TransferAction.APPROVE:
            return TransferStatus.APPROVED
        return TransferStatus.REJECTED


class TeamSortField(str, Enum):
    """Columns a team listing can be ordered by."""
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class OutboxEventType(str, Enum):
    """Side effects handed off to asynchronous consumers."""
    MEMBER_TRANSFER_REQUESTED = "MemberTransferRequested"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CandidateProjectStatus(str, Enum):
    """Status of a candidate within a single project pipeline."""
    NOMINATED = "nominated"
    DOCUMENTS_SUBMITTED = "documents_submitted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    HIRED = "hired"
    REJECTED_DOCUMENTS = "rejected_documents"
    REJECTED_INTERVIEW = "rejected_interview"
    REJECTED_SELECTION = "rejected_selection"


IN_PROGRESS_CANDIDATE_STATUSES = (
    CandidateProjectStatus.NOMINATED,
    CandidateProjectStatus.DOCUMENTS_SUBMITTED,
    CandidateProjectStatus.INTERVIEW_SCHEDULED,
)

REJECTED_CANDIDATE_STATUSES = (
    CandidateProjectStatus.REJECTED_DOCUMENTS,
    CandidateProjectStatus.REJECTED_INTERVIEW,
    CandidateProjectStatus.REJECTED_SELECTION,
)

DEFAULT_TRANSFER_STATUS = TransferStatus.PENDING
