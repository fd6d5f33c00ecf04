"""Team directory, membership and transfer request endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from recruit_api.core.deps import get_current_session, get_db, require_csrf_header
from recruit_api.db.enums import SortOrder, TeamSortField, TransferAction, TransferStatus
from recruit_api.schemas.auth import UserSession
from recruit_api.schemas.common import ApiResponse, MessageResult
from recruit_api.schemas.team import (
    AssignUserRequest,
    PaginationMeta,
    TeamCandidateRead,
    TeamCreate,
    TeamDeleteResult,
    TeamListQuery,
    TeamListResponse,
    TeamMemberDetail,
    TeamPerformance,
    TeamProjectRead,
    TeamRead,
    TeamStats,
    TeamSuccessRates,
    TeamSummaryStats,
    TeamUpdate,
)
from recruit_api.schemas.transfer import (
    TransferRequestCreate,
    TransferRequestList,
    TransferRequestProcess,
    TransferRequestRead,
)
from recruit_api.services import team_membership_service, team_service, transfer_service
from recruit_api.services.errors import ConflictError, NotFoundError
from recruit_api.utils.pagination import (
    DEFAULT_PAGE,
    DEFAULT_TEAM_LIMIT,
    DEFAULT_TRANSFER_LIMIT,
    MAX_PER_PAGE,
    total_pages,
)

router = APIRouter()


# =============================================================================
# Team CRUD Endpoints
# =============================================================================


@router.post(
    "",
    response_model=ApiResponse[TeamRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_team(
    data: TeamCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a new team."""
    try:
        team = team_service.create_team(db, data, session.user_id)
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ApiResponse(
        data=TeamRead.model_validate(team), message="Team created successfully"
    )


@router.get("", response_model=ApiResponse[TeamListResponse])
def list_teams(
    search: str | None = None,
    lead_id: UUID | None = None,
    head_id: UUID | None = None,
    manager_id: UUID | None = None,
    user_id: UUID | None = None,
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        DEFAULT_TEAM_LIMIT, ge=1, le=MAX_PER_PAGE, description=f"Items per page (max {MAX_PER_PAGE})"
    ),
    sort_by: TeamSortField = TeamSortField.NAME,
    sort_order: SortOrder = SortOrder.ASC,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List teams with search, filters, sorting and pagination."""
    params = TeamListQuery(
        search=search,
        lead_id=lead_id,
        head_id=head_id,
        manager_id=manager_id,
        user_id=user_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    teams, total = team_service.list_teams(db, params)
    return ApiResponse(
        data=TeamListResponse(
            teams=[TeamRead.model_validate(t) for t in teams],
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=total_pages(total, limit),
            ),
        ),
        message="Teams retrieved successfully",
    )


@router.get("/stats", response_model=ApiResponse[TeamStats])
def get_team_stats(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Aggregate statistics across all teams."""
    return ApiResponse(
        data=team_service.get_team_stats(db),
        message="Team statistics retrieved successfully",
    )


@router.get(
    "/users/{user_id}/transfer-history",
    response_model=ApiResponse[list[TransferRequestRead]],
)
def get_user_transfer_history(
    user_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """All transfer requests for a user, newest first."""
    requests = transfer_service.get_user_transfer_history(db, user_id, session.user_id)
    return ApiResponse(
        data=[TransferRequestRead.model_validate(r) for r in requests],
        message="Transfer history retrieved successfully",
    )


@router.get("/{team_id}", response_model=ApiResponse[TeamRead])
def get_team(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get a specific team."""
    try:
        team = team_service.get_team(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(
        data=TeamRead.model_validate(team), message="Team retrieved successfully"
    )


@router.patch(
    "/{team_id}",
    response_model=ApiResponse[TeamRead],
    dependencies=[Depends(require_csrf_header)],
)
def update_team(
    team_id: UUID,
    data: TeamUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Partially update a team."""
    try:
        team = team_service.update_team(db, team_id, data, session.user_id)
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ApiResponse(
        data=TeamRead.model_validate(team), message="Team updated successfully"
    )


@router.delete(
    "/{team_id}",
    response_model=ApiResponse[TeamDeleteResult],
    dependencies=[Depends(require_csrf_header)],
)
def delete_team(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Delete a team with no projects or candidates."""
    try:
        result = team_service.delete_team(db, team_id, session.user_id)
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ApiResponse(
        data=TeamDeleteResult(**result), message="Team deleted successfully"
    )


# =============================================================================
# Team Member Management
# =============================================================================


@router.get("/{team_id}/members", response_model=ApiResponse[list[TeamMemberDetail]])
def list_team_members(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List members of a team ordered by name."""
    try:
        members = team_membership_service.get_team_members(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(
        data=[TeamMemberDetail.model_validate(m) for m in members],
        message="Team members retrieved successfully",
    )


@router.post(
    "/{team_id}/assign-user",
    response_model=ApiResponse[MessageResult],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def assign_user(
    team_id: UUID,
    data: AssignUserRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Add a user to a team."""
    try:
        team_membership_service.assign_user(db, team_id, data.user_id, session.user_id)
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    message = "User assigned to team successfully"
    return ApiResponse(data=MessageResult(message=message), message=message)


@router.delete(
    "/{team_id}/remove-user/{user_id}",
    response_model=ApiResponse[MessageResult],
    dependencies=[Depends(require_csrf_header)],
)
def remove_user(
    team_id: UUID,
    user_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Remove a user from a team."""
    try:
        team_membership_service.remove_user(db, team_id, user_id, session.user_id)
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    message = "User removed from team successfully"
    return ApiResponse(data=MessageResult(message=message), message=message)


# =============================================================================
# Per-team Listings and Analytics
# =============================================================================


@router.get("/{team_id}/projects", response_model=ApiResponse[list[TeamProjectRead]])
def get_team_projects(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        projects = team_service.get_team_projects(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(data=projects, message="Team projects retrieved successfully")


@router.get("/{team_id}/candidates", response_model=ApiResponse[list[TeamCandidateRead]])
def get_team_candidates(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        candidates = team_service.get_team_candidates(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(data=candidates, message="Team candidates retrieved successfully")


@router.get("/{team_id}/stats", response_model=ApiResponse[TeamSummaryStats])
def get_team_summary(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        summary = team_service.get_team_summary(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(data=summary, message="Team statistics retrieved successfully")


@router.get(
    "/{team_id}/analytics/performance", response_model=ApiResponse[TeamPerformance]
)
def get_team_performance(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Monthly placements and revenue over the last 12 months."""
    try:
        performance = team_service.get_team_performance(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(
        data=performance, message="Team performance analytics retrieved successfully"
    )


@router.get(
    "/{team_id}/analytics/success-rate", response_model=ApiResponse[TeamSuccessRates]
)
def get_team_success_rates(
    team_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        rates = team_service.get_team_success_rates(db, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(
        data=rates, message="Team success rate distribution retrieved successfully"
    )


# =============================================================================
# Transfer Requests
# =============================================================================


@router.post(
    "/{team_id}/transfer-requests",
    response_model=ApiResponse[TransferRequestRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_transfer_request(
    team_id: UUID,
    data: TransferRequestCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Request moving a member of this team to another team.

    - User must be a member of this team and not of the target team
    - Only one pending request per user
    """
    try:
        request = transfer_service.create_transfer_request(
            db, team_id, data, session.user_id
        )
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ApiResponse(
        data=TransferRequestRead.model_validate(request),
        message="Transfer request created successfully",
    )


@router.get(
    "/{team_id}/transfer-requests",
    response_model=ApiResponse[TransferRequestList],
)
def list_transfer_requests(
    team_id: UUID,
    status: TransferStatus | None = None,
    limit: int = Query(DEFAULT_TRANSFER_LIMIT, ge=1, le=MAX_PER_PAGE),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List transfer requests into or out of this team (members only)."""
    try:
        requests, total = transfer_service.list_transfer_requests(
            db,
            team_id,
            session.user_id,
            status=status,
            limit=limit,
            offset=offset,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse(
        data=TransferRequestList(
            transfer_requests=[TransferRequestRead.model_validate(r) for r in requests],
            total=total,
            count=len(requests),
            offset=offset,
        ),
        message="Transfer requests retrieved successfully",
    )


@router.post(
    "/{team_id}/transfer-requests/{request_id}/{action}",
    response_model=ApiResponse[TransferRequestRead],
    dependencies=[Depends(require_csrf_header)],
)
def process_transfer_request(
    team_id: UUID,
    request_id: UUID,
    action: TransferAction,
    data: TransferRequestProcess | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Approve or reject a pending transfer request.

    Approval moves the membership to the target team in the same transaction.
    """
    try:
        request = transfer_service.process_transfer_request(
            db,
            team_id,
            request_id,
            action,
            session.user_id,
            reason=data.reason if data else None,
        )
        db.commit()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ApiResponse(
        data=TransferRequestRead.model_validate(request),
        message=f"Transfer request {request.status} successfully",
    )
