"""
Team transfer workflow.

A transfer request proposes moving a user's membership from one team to
another. Requests start pending and are approved or rejected exactly once;
approval moves the membership in the same transaction as the status change.
"""

import logging
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from recruit_api.core.structured_logging import build_log_context
from recruit_api.db.base import utcnow
from recruit_api.db.enums import OutboxEventType, TransferAction, TransferStatus
from recruit_api.db.models import Team, TeamTransferRequest, UserTeam
from recruit_api.schemas.transfer import TransferRequestCreate
from recruit_api.services import outbox_service, team_membership_service
from recruit_api.services.errors import ConflictError, NotFoundError
from recruit_api.utils.pagination import DEFAULT_TRANSFER_LIMIT, paginate_query

logger = logging.getLogger(__name__)


def _with_parties(query):
    return query.options(
        joinedload(TeamTransferRequest.user),
        joinedload(TeamTransferRequest.from_team),
        joinedload(TeamTransferRequest.to_team),
        joinedload(TeamTransferRequest.requester),
        joinedload(TeamTransferRequest.approver),
    )


def _involves_team(team_id: UUID):
    return or_(
        TeamTransferRequest.from_team_id == team_id,
        TeamTransferRequest.to_team_id == team_id,
    )


def _get_pending_for_user(db: Session, user_id: UUID) -> TeamTransferRequest | None:
    return (
        db.query(TeamTransferRequest)
        .filter(
            TeamTransferRequest.user_id == user_id,
            TeamTransferRequest.status == TransferStatus.PENDING.value,
        )
        .first()
    )


def get_transfer_request(db: Session, request_id: UUID) -> TeamTransferRequest | None:
    """Get a transfer request with user and team details loaded."""
    return (
        _with_parties(db.query(TeamTransferRequest))
        .filter(TeamTransferRequest.id == request_id)
        .first()
    )


def create_transfer_request(
    db: Session,
    from_team_id: UUID,
    data: TransferRequestCreate,
    requested_by: UUID,
) -> TeamTransferRequest:
    """
    Open a pending request to move a user out of from_team_id.

    Checks run in order and the first failure wins:
    source membership, target team, target membership, existing pending request.

    Raises:
        NotFoundError: user not in source team, or target team missing
        ConflictError: user already in target team, or already has a pending request
    """
    if not team_membership_service.is_member(db, from_team_id, data.user_id):
        raise NotFoundError("User is not a member of the source team")

    if not db.get(Team, data.to_team_id):
        raise NotFoundError("Target team not found")

    if team_membership_service.is_member(db, data.to_team_id, data.user_id):
        raise ConflictError("User is already a member of the target team")

    if _get_pending_for_user(db, data.user_id):
        raise ConflictError("User already has a pending transfer request")

    request = TeamTransferRequest(
        user_id=data.user_id,
        from_team_id=from_team_id,
        to_team_id=data.to_team_id,
        requested_by=requested_by,
        reason=data.reason,
        status=TransferStatus.PENDING.value,
    )
    try:
        with db.begin_nested():
            db.add(request)
    except IntegrityError:
        # Partial unique index: one pending request per user
        raise ConflictError("User already has a pending transfer request")

    outbox_service.publish_event(
        db,
        OutboxEventType.MEMBER_TRANSFER_REQUESTED,
        {
            "transfer_id": str(request.id),
            "user_id": str(data.user_id),
            "from_team_id": str(from_team_id),
            "to_team_id": str(data.to_team_id),
            "requested_by": str(requested_by),
        },
    )

    logger.info(
        "Transfer request created",
        extra=build_log_context(user_id=str(requested_by), team_id=str(from_team_id)),
    )
    return get_transfer_request(db, request.id)


def list_transfer_requests(
    db: Session,
    team_id: UUID,
    user_id: UUID,
    status: TransferStatus | None = None,
    limit: int = DEFAULT_TRANSFER_LIMIT,
    offset: int = 0,
) -> tuple[list[TeamTransferRequest], int]:
    """
    List requests where the team is the source or the target, newest first.

    Only members of the team may list its requests.

    Returns:
        (requests, total_count) where total_count ignores pagination
    """
    if not team_membership_service.is_member(db, team_id, user_id):
        raise NotFoundError("Access denied: User is not a member of this team")

    query = db.query(TeamTransferRequest).filter(_involves_team(team_id))
    if status:
        query = query.filter(TeamTransferRequest.status == status.value)

    query = _with_parties(query).order_by(TeamTransferRequest.created_at.desc())
    return paginate_query(query, offset, limit)


def process_transfer_request(
    db: Session,
    team_id: UUID,
    request_id: UUID,
    action: TransferAction,
    approver_id: UUID,
    reason: str | None = None,
) -> TeamTransferRequest:
    """
    Approve or reject a pending transfer request.

    The lookup matches id, pending status and team involvement at once, so a
    missing request, an already processed one, and one the team is not a
    party to all look the same to the caller.

    On approval the membership moves from the source team to the target team
    in the same transaction as the status change; nothing is written if the
    move cannot be made.

    Raises:
        NotFoundError: no actionable request for this team
        ConflictError: membership changed since the request was opened
    """
    # Lock row for update (a request is processed once)
    request = (
        db.query(TeamTransferRequest)
        .filter(
            TeamTransferRequest.id == request_id,
            TeamTransferRequest.status == TransferStatus.PENDING.value,
            _involves_team(team_id),
        )
        .with_for_update()
        .first()
    )
    if not request:
        raise NotFoundError("Transfer request not found or already processed")

    if action == TransferAction.APPROVE:
        source = team_membership_service.get_membership(
            db, request.from_team_id, request.user_id
        )
        if not source:
            raise ConflictError("User is no longer a member of the source team")
        if team_membership_service.is_member(db, request.to_team_id, request.user_id):
            raise ConflictError("User is already a member of the target team")

    try:
        with db.begin_nested():
            request.status = action.resulting_status.value
            request.approved_by = approver_id
            request.approved_at = utcnow()
            request.decision_reason = reason

            if action == TransferAction.APPROVE:
                db.delete(source)
                db.flush()
                db.add(UserTeam(user_id=request.user_id, team_id=request.to_team_id))
    except IntegrityError:
        raise ConflictError("User is already a member of the target team")

    logger.info(
        "Transfer request %s",
        request.status,
        extra=build_log_context(user_id=str(approver_id), team_id=str(team_id)),
    )
    db.expire(request)
    return get_transfer_request(db, request.id)


def get_user_transfer_history(
    db: Session,
    user_id: UUID,
    current_user_id: UUID,
) -> list[TeamTransferRequest]:
    """All transfer requests for a user, any status, newest first."""
    logger.debug(
        "Transfer history lookup",
        extra=build_log_context(user_id=str(current_user_id)),
    )
    return (
        _with_parties(db.query(TeamTransferRequest))
        .filter(TeamTransferRequest.user_id == user_id)
        .order_by(TeamTransferRequest.created_at.desc())
        .all()
    )
