import uuid
from datetime import datetime, timedelta, timezone

import pytest

from recruit_api.db.enums import OutboxEventType, TransferAction, TransferStatus
from recruit_api.db.models import OutboxEvent, TeamTransferRequest, UserTeam
from recruit_api.schemas.transfer import TransferRequestCreate
from recruit_api.services import team_membership_service, transfer_service
from recruit_api.services.errors import ConflictError, NotFoundError


@pytest.fixture
def teams(make_user, make_team, test_user):
    """Source team (with the member and the actor) and an empty target team."""
    member = make_user(name="Mover")
    source = make_team(name="Source", members=(member, test_user))
    target = make_team(name="Target")
    return member, source, target


def _request(db, source, target, member, actor, reason="Better fit"):
    return transfer_service.create_transfer_request(
        db,
        source.id,
        TransferRequestCreate(user_id=member.id, to_team_id=target.id, reason=reason),
        actor.id,
    )


def test_create_transfer_request(db, teams, test_user):
    member, source, target = teams

    request = _request(db, source, target, member, test_user)

    assert request.status == TransferStatus.PENDING.value
    assert request.user.id == member.id
    assert request.from_team.name == "Source"
    assert request.to_team.name == "Target"
    assert request.requester.id == test_user.id
    assert request.reason == "Better fit"
    assert request.approver is None

    event = db.query(OutboxEvent).one()
    assert event.event_type == OutboxEventType.MEMBER_TRANSFER_REQUESTED.value
    assert event.processed_at is None
    assert event.payload == {
        "transfer_id": str(request.id),
        "user_id": str(member.id),
        "from_team_id": str(source.id),
        "to_team_id": str(target.id),
        "requested_by": str(test_user.id),
    }


def test_create_requires_source_membership(db, make_user, teams, test_user):
    _, source, target = teams
    outsider = make_user()

    with pytest.raises(NotFoundError) as exc:
        _request(db, source, target, outsider, test_user)

    assert str(exc.value) == "User is not a member of the source team"
    assert db.query(OutboxEvent).count() == 0


def test_create_requires_target_team(db, teams, test_user):
    member, source, _ = teams

    with pytest.raises(NotFoundError) as exc:
        transfer_service.create_transfer_request(
            db,
            source.id,
            TransferRequestCreate(user_id=member.id, to_team_id=uuid.uuid4()),
            test_user.id,
        )

    assert str(exc.value) == "Target team not found"


def test_create_rejects_member_of_target(db, teams, test_user):
    member, source, target = teams
    db.add(UserTeam(user_id=member.id, team_id=target.id))
    db.flush()

    with pytest.raises(ConflictError) as exc:
        _request(db, source, target, member, test_user)

    assert str(exc.value) == "User is already a member of the target team"


def test_single_pending_request_per_user(db, make_team, teams, test_user):
    member, source, target = teams
    other_target = make_team(name="Other")
    _request(db, source, target, member, test_user)

    with pytest.raises(ConflictError) as exc:
        _request(db, source, other_target, member, test_user)

    assert str(exc.value) == "User already has a pending transfer request"
    assert (
        db.query(TeamTransferRequest)
        .filter(TeamTransferRequest.user_id == member.id)
        .count()
        == 1
    )


def test_approve_moves_membership(db, make_user, teams, test_user):
    member, source, target = teams
    approver = make_user(name="Approver")
    request = _request(db, source, target, member, test_user)

    processed = transfer_service.process_transfer_request(
        db, target.id, request.id, TransferAction.APPROVE, approver.id, reason="Welcome"
    )

    assert processed.status == TransferStatus.APPROVED.value
    assert processed.approver.id == approver.id
    assert processed.approved_at is not None
    assert processed.decision_reason == "Welcome"
    assert processed.reason == "Better fit"
    assert not team_membership_service.is_member(db, source.id, member.id)
    assert team_membership_service.is_member(db, target.id, member.id)


def test_reject_keeps_membership(db, teams, test_user):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)

    processed = transfer_service.process_transfer_request(
        db, source.id, request.id, TransferAction.REJECT, test_user.id
    )

    assert processed.status == TransferStatus.REJECTED.value
    assert processed.approver.id == test_user.id
    assert team_membership_service.is_member(db, source.id, member.id)
    assert not team_membership_service.is_member(db, target.id, member.id)


def test_processed_request_cannot_be_processed_again(db, teams, test_user):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)
    transfer_service.process_transfer_request(
        db, source.id, request.id, TransferAction.REJECT, test_user.id
    )

    with pytest.raises(NotFoundError) as exc:
        transfer_service.process_transfer_request(
            db, source.id, request.id, TransferAction.APPROVE, test_user.id
        )

    assert str(exc.value) == "Transfer request not found or already processed"
    assert team_membership_service.is_member(db, source.id, member.id)


def test_new_request_allowed_after_rejection(db, teams, test_user):
    member, source, target = teams
    first = _request(db, source, target, member, test_user)
    transfer_service.process_transfer_request(
        db, source.id, first.id, TransferAction.REJECT, test_user.id
    )

    second = _request(db, source, target, member, test_user, reason="Try again")

    assert second.id != first.id
    assert second.status == TransferStatus.PENDING.value


def test_process_requires_team_involvement(db, make_team, teams, test_user):
    member, source, target = teams
    unrelated = make_team(name="Unrelated")
    request = _request(db, source, target, member, test_user)

    with pytest.raises(NotFoundError):
        transfer_service.process_transfer_request(
            db, unrelated.id, request.id, TransferAction.APPROVE, test_user.id
        )

    db.refresh(request)
    assert request.status == TransferStatus.PENDING.value


def test_approve_conflicts_when_member_left_source(db, teams, test_user):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)
    team_membership_service.remove_user(db, source.id, member.id, test_user.id)

    with pytest.raises(ConflictError) as exc:
        transfer_service.process_transfer_request(
            db, target.id, request.id, TransferAction.APPROVE, test_user.id
        )

    assert str(exc.value) == "User is no longer a member of the source team"
    db.refresh(request)
    assert request.status == TransferStatus.PENDING.value
    assert not team_membership_service.is_member(db, target.id, member.id)


def test_list_transfer_requests_for_member(db, make_user, make_team, teams, test_user):
    member, source, target = teams
    other = make_user()
    source.members.append(UserTeam(user_id=other.id))
    db.flush()
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    older = _request(db, source, target, member, test_user)
    older_row = db.get(TeamTransferRequest, older.id)
    older_row.created_at = base
    newer = _request(db, source, make_team(name="Elsewhere"), other, test_user)
    newer_row = db.get(TeamTransferRequest, newer.id)
    newer_row.created_at = base + timedelta(days=1)
    db.flush()

    requests, total = transfer_service.list_transfer_requests(db, source.id, test_user.id)
    assert total == 2
    assert [r.id for r in requests] == [newer.id, older.id]

    requests, total = transfer_service.list_transfer_requests(
        db, source.id, test_user.id, limit=1, offset=1
    )
    assert total == 2
    assert [r.id for r in requests] == [older.id]


def test_list_transfer_requests_status_filter(db, teams, test_user):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)
    transfer_service.process_transfer_request(
        db, source.id, request.id, TransferAction.REJECT, test_user.id
    )

    pending, total = transfer_service.list_transfer_requests(
        db, source.id, test_user.id, status=TransferStatus.PENDING
    )
    assert pending == []
    assert total == 0

    rejected, total = transfer_service.list_transfer_requests(
        db, source.id, test_user.id, status=TransferStatus.REJECTED
    )
    assert total == 1
    assert rejected[0].id == request.id


def test_list_transfer_requests_requires_membership(db, teams, test_user):
    member, source, target = teams
    _request(db, source, target, member, test_user)

    # test_user belongs to the source team only
    with pytest.raises(NotFoundError) as exc:
        transfer_service.list_transfer_requests(db, target.id, test_user.id)

    assert str(exc.value) == "Access denied: User is not a member of this team"


def test_user_transfer_history(db, teams, test_user):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)
    transfer_service.process_transfer_request(
        db, target.id, request.id, TransferAction.APPROVE, test_user.id
    )

    history = transfer_service.get_user_transfer_history(db, member.id, test_user.id)

    assert [r.id for r in history] == [request.id]
    assert history[0].status == TransferStatus.APPROVED.value
    assert transfer_service.get_user_transfer_history(db, test_user.id, test_user.id) == []


# =============================================================================
# Constraints behind the pre-checks
# =============================================================================


def test_pending_unique_index_conflict(db, make_team, teams, test_user, monkeypatch):
    member, source, target = teams
    _request(db, source, target, member, test_user)
    monkeypatch.setattr(transfer_service, "_get_pending_for_user", lambda *args: None)

    with pytest.raises(ConflictError) as exc:
        _request(db, source, make_team(name="Other"), member, test_user)

    assert str(exc.value) == "User already has a pending transfer request"
    assert (
        db.query(TeamTransferRequest)
        .filter(
            TeamTransferRequest.user_id == member.id,
            TeamTransferRequest.status == TransferStatus.PENDING.value,
        )
        .count()
        == 1
    )
    assert db.query(OutboxEvent).count() == 1


def test_approve_membership_key_conflict_rolls_back(db, teams, test_user, monkeypatch):
    member, source, target = teams
    request = _request(db, source, target, member, test_user)
    # Target membership appears after the request; only the primary key sees it
    existing = UserTeam(user_id=member.id, team_id=target.id)
    db.add(existing)
    db.flush()
    db.expunge(existing)
    monkeypatch.setattr(team_membership_service, "is_member", lambda *args: False)

    with pytest.raises(ConflictError) as exc:
        transfer_service.process_transfer_request(
            db, target.id, request.id, TransferAction.APPROVE, test_user.id
        )

    assert str(exc.value) == "User is already a member of the target team"
    db.refresh(request)
    assert request.status == TransferStatus.PENDING.value
    assert request.approved_by is None
    assert team_membership_service.get_membership(db, source.id, member.id) is not None
    assert db.query(UserTeam).filter(UserTeam.user_id == member.id).count() == 2
