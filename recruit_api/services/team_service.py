"""Team directory service: CRUD, aggregate statistics and per-team analytics."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from recruit_api.core.structured_logging import build_log_context
from recruit_api.db.base import utcnow
from recruit_api.db.enums import (
    IN_PROGRESS_CANDIDATE_STATUSES,
    REJECTED_CANDIDATE_STATUSES,
    CandidateProjectStatus,
    ProjectStatus,
    SortOrder,
    TeamSortField,
)
from recruit_api.db.models import (
    Candidate,
    CandidateProject,
    Project,
    Team,
    TeamTransferRequest,
    UserTeam,
)
from recruit_api.schemas.team import (
    AssignedProject,
    ClientSummary,
    MonthlyPerformance,
    RecruiterSummary,
    SuccessRateBreakdown,
    TeamCandidateRead,
    TeamCreate,
    TeamListQuery,
    TeamPerformance,
    TeamProjectRead,
    TeamStats,
    TeamSuccessRates,
    TeamSummaryStats,
    TeamUpdate,
)
from recruit_api.services import user_service
from recruit_api.services.errors import ConflictError, NotFoundError
from recruit_api.utils.pagination import PaginationParams

logger = logging.getLogger(__name__)

LEADERSHIP_FIELDS = ("lead_id", "head_id", "manager_id")

# Explicit mapping keeps sorting to a closed set of columns
SORT_COLUMNS = {
    TeamSortField.NAME: Team.name,
    TeamSortField.CREATED_AT: Team.created_at,
    TeamSortField.UPDATED_AT: Team.updated_at,
}

PERFORMANCE_WINDOW_MONTHS = 12
REVENUE_PER_PLACEMENT = 50_000


# =============================================================================
# Helpers
# =============================================================================


def _with_relations(query):
    return query.options(
        selectinload(Team.members).joinedload(UserTeam.user),
        selectinload(Team.projects),
        selectinload(Team.candidates),
    )


def _get_by_name(db: Session, name: str) -> Team | None:
    return db.query(Team).filter(Team.name == name).first()


def _duplicate_name_error(name: str) -> ConflictError:
    return ConflictError(f'Team with name "{name}" already exists')


def _validate_leadership(db: Session, values: dict) -> None:
    """Every leadership reference that is set must point at an existing user."""
    for field in LEADERSHIP_FIELDS:
        user_id = values.get(field)
        if user_id is not None:
            user_service.require_user(db, user_id)


def _require_team(db: Session, team_id: UUID) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise NotFoundError(f"Team with ID {team_id} not found")
    return team


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0


# =============================================================================
# Team CRUD
# =============================================================================


def get_team(db: Session, team_id: UUID) -> Team:
    """Get a team with members, projects and candidates loaded."""
    team = _with_relations(db.query(Team)).filter(Team.id == team_id).first()
    if not team:
        raise NotFoundError(f"Team with ID {team_id} not found")
    return team


def list_teams(db: Session, params: TeamListQuery) -> tuple[list[Team], int]:
    """
    List teams matching filters, one page at a time.

    Returns:
        (teams, total_count) where total_count ignores pagination
    """
    query = db.query(Team)

    if params.search:
        query = query.filter(Team.name.ilike(f"%{params.search}%"))
    if params.lead_id:
        query = query.filter(Team.lead_id == params.lead_id)
    if params.head_id:
        query = query.filter(Team.head_id == params.head_id)
    if params.manager_id:
        query = query.filter(Team.manager_id == params.manager_id)
    if params.user_id:
        query = query.filter(Team.members.any(UserTeam.user_id == params.user_id))

    total = query.count()

    column = SORT_COLUMNS[params.sort_by]
    ordering = column.desc() if params.sort_order == SortOrder.DESC else column.asc()
    teams = (
        _with_relations(query)
        .order_by(ordering, Team.id)
        .offset(PaginationParams(params.page, params.limit).offset)
        .limit(params.limit)
        .all()
    )
    return teams, total


def create_team(db: Session, data: TeamCreate, actor_id: UUID) -> Team:
    """
    Create a team.

    Raises:
        ConflictError: a team with the same name exists
        NotFoundError: a leadership reference points at a missing user
    """
    if _get_by_name(db, data.name):
        raise _duplicate_name_error(data.name)

    _validate_leadership(db, data.model_dump())

    team = Team(
        name=data.name,
        lead_id=data.lead_id,
        head_id=data.head_id,
        manager_id=data.manager_id,
    )
    try:
        with db.begin_nested():
            db.add(team)
    except IntegrityError:
        if _get_by_name(db, data.name):
            raise _duplicate_name_error(data.name)
        raise

    logger.info(
        "Team created",
        extra=build_log_context(user_id=str(actor_id), team_id=str(team.id)),
    )
    return get_team(db, team.id)


def update_team(db: Session, team_id: UUID, data: TeamUpdate, actor_id: UUID) -> Team:
    """
    Apply a partial update to a team.

    Only fields present in the request are written; an explicit null clears
    a leadership reference. Name cannot be cleared.
    """
    team = _require_team(db, team_id)

    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)

    new_name = changes.get("name")
    if new_name and new_name != team.name and _get_by_name(db, new_name):
        raise _duplicate_name_error(new_name)

    _validate_leadership(db, changes)

    try:
        with db.begin_nested():
            for key, value in changes.items():
                setattr(team, key, value)
    except IntegrityError:
        if new_name and _get_by_name(db, new_name):
            raise _duplicate_name_error(new_name)
        raise

    logger.info(
        "Team updated",
        extra=build_log_context(user_id=str(actor_id), team_id=str(team_id)),
    )
    return get_team(db, team_id)


def delete_team(db: Session, team_id: UUID, actor_id: UUID) -> dict:
    """
    Delete a team that has no projects, no candidates and no transfer history.

    Membership rows are removed with the team.

    Raises:
        NotFoundError: team does not exist
        ConflictError: team still has projects, candidates or transfer requests
    """
    team = _require_team(db, team_id)

    project_count = (
        db.query(func.count(Project.id)).filter(Project.team_id == team_id).scalar()
    )
    if project_count > 0:
        raise ConflictError(
            f"Cannot delete team with ID {team_id} because it has {project_count} "
            "project(s) assigned. Please reassign or delete the projects first."
        )

    candidate_count = (
        db.query(func.count(Candidate.id)).filter(Candidate.team_id == team_id).scalar()
    )
    if candidate_count > 0:
        raise ConflictError(
            f"Cannot delete team with ID {team_id} because it has {candidate_count} "
            "candidate(s) assigned. Please reassign the candidates first."
        )

    transfer_count = (
        db.query(func.count(TeamTransferRequest.id))
        .filter(
            or_(
                TeamTransferRequest.from_team_id == team_id,
                TeamTransferRequest.to_team_id == team_id,
            )
        )
        .scalar()
    )
    if transfer_count > 0:
        raise ConflictError(
            f"Cannot delete team with ID {team_id} because it is referenced by "
            f"{transfer_count} transfer request(s)."
        )

    db.delete(team)
    db.flush()

    logger.info(
        "Team deleted",
        extra=build_log_context(user_id=str(actor_id), team_id=str(team_id)),
    )
    return {"id": team_id, "message": "Team deleted successfully"}


# =============================================================================
# Statistics
# =============================================================================


def get_team_stats(db: Session) -> TeamStats:
    """Aggregate statistics across all teams."""
    total_teams = db.query(func.count(Team.id)).scalar()

    teams_with_leads = (
        db.query(func.count(Team.id)).filter(Team.lead_id.is_not(None)).scalar()
    )
    teams_with_heads = (
        db.query(func.count(Team.id)).filter(Team.head_id.is_not(None)).scalar()
    )
    teams_with_managers = (
        db.query(func.count(Team.id)).filter(Team.manager_id.is_not(None)).scalar()
    )

    # Only teams with at least one member appear in the grouping
    member_counts = [
        count
        for _, count in db.query(UserTeam.team_id, func.count(UserTeam.user_id))
        .group_by(UserTeam.team_id)
        .all()
    ]
    teams_by_member_count: dict[str, int] = {}
    for count in member_counts:
        key = str(count)
        teams_by_member_count[key] = teams_by_member_count.get(key, 0) + 1
    average_team_size = (
        sum(member_counts) / len(member_counts) if member_counts else 0
    )

    teams_with_projects = (
        db.query(func.count(Team.id)).filter(Team.projects.any()).scalar()
    )
    teams_with_candidates = (
        db.query(func.count(Team.id)).filter(Team.candidates.any()).scalar()
    )

    total_projects = db.query(func.count(Project.id)).scalar()
    total_candidates = db.query(func.count(Candidate.id)).scalar()

    return TeamStats(
        total_teams=total_teams,
        teams_with_leads=teams_with_leads,
        teams_with_heads=teams_with_heads,
        teams_with_managers=teams_with_managers,
        average_team_size=average_team_size,
        teams_by_member_count=teams_by_member_count,
        teams_with_projects=teams_with_projects,
        teams_with_candidates=teams_with_candidates,
        average_projects_per_team=total_projects / total_teams if total_teams > 0 else 0,
        average_candidates_per_team=(
            total_candidates / total_teams if total_teams > 0 else 0
        ),
    )


def get_team_summary(db: Session, team_id: UUID) -> TeamSummaryStats:
    """Member, project and candidate counts for a single team."""
    _require_team(db, team_id)

    total_members = (
        db.query(func.count(UserTeam.user_id)).filter(UserTeam.team_id == team_id).scalar()
    )
    statuses = [
        status for (status,) in db.query(Project.status).filter(Project.team_id == team_id)
    ]
    active_projects = sum(1 for s in statuses if s == ProjectStatus.ACTIVE.value)
    completed_projects = sum(1 for s in statuses if s == ProjectStatus.COMPLETED.value)

    total_candidates = (
        db.query(func.count(func.distinct(CandidateProject.candidate_id)))
        .join(Project, CandidateProject.project_id == Project.id)
        .filter(Project.team_id == team_id)
        .scalar()
    )

    return TeamSummaryStats(
        total_members=total_members,
        total_projects=len(statuses),
        active_projects=active_projects,
        completed_projects=completed_projects,
        completion_rate=_percent(completed_projects, len(statuses)),
        total_candidates=total_candidates,
    )


# =============================================================================
# Per-team listings
# =============================================================================


def get_team_projects(db: Session, team_id: UUID) -> list[TeamProjectRead]:
    """Projects owned by a team, with client and assignment counts."""
    _require_team(db, team_id)

    projects = (
        db.query(Project)
        .options(joinedload(Project.client), selectinload(Project.candidate_projects))
        .filter(Project.team_id == team_id)
        .order_by(Project.created_at.desc())
        .all()
    )
    return [
        TeamProjectRead(
            id=project.id,
            title=project.title,
            description=project.description,
            status=project.status,
            priority=project.priority,
            deadline=project.deadline,
            client=ClientSummary.model_validate(project.client) if project.client else None,
            candidates_assigned=len(project.candidate_projects),
            # TODO: derive progress from candidate pipeline statuses once roles-needed tracking lands
            progress=0,
        )
        for project in projects
    ]


def _team_candidates(db: Session, team_id: UUID) -> list[Candidate]:
    """Candidates nominated to at least one of the team's projects."""
    return (
        db.query(Candidate)
        .filter(
            Candidate.candidate_projects.any(
                CandidateProject.project.has(Project.team_id == team_id)
            )
        )
        .options(
            selectinload(Candidate.candidate_projects)
            .joinedload(CandidateProject.project)
            .joinedload(Project.client),
            joinedload(Candidate.recruiter),
        )
        .order_by(Candidate.updated_at.desc())
        .all()
    )


def _team_links(candidate: Candidate, team_id: UUID) -> list[CandidateProject]:
    links = [cp for cp in candidate.candidate_projects if cp.project.team_id == team_id]
    return sorted(links, key=lambda cp: cp.created_at)


def get_team_candidates(db: Session, team_id: UUID) -> list[TeamCandidateRead]:
    """Candidates working on the team's projects, with assignment details."""
    _require_team(db, team_id)

    results = []
    for candidate in _team_candidates(db, team_id):
        links = _team_links(candidate, team_id)
        project = links[0].project if links else None
        recruiter = candidate.recruiter
        results.append(
            TeamCandidateRead(
                id=candidate.id,
                name=f"{candidate.first_name} {candidate.last_name}",
                contact=candidate.contact,
                email=candidate.email,
                current_status=candidate.current_status,
                experience=candidate.total_experience or 0,
                skills=candidate.skills or [],
                assigned_project=(
                    AssignedProject(
                        id=project.id,
                        title=project.title,
                        client=(
                            ClientSummary.model_validate(project.client)
                            if project.client
                            else None
                        ),
                    )
                    if project
                    else None
                ),
                assigned_by=(
                    RecruiterSummary(id=recruiter.id, name=recruiter.name)
                    if recruiter
                    else RecruiterSummary()
                ),
                last_activity=candidate.updated_at,
            )
        )
    return results


# =============================================================================
# Analytics
# =============================================================================


def _month_starts(now: datetime, months: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `months` calendar months, oldest first."""
    pairs = []
    for back in range(months - 1, -1, -1):
        index = now.year * 12 + (now.month - 1) - back
        pairs.append((index // 12, index % 12 + 1))
    return pairs


def get_team_performance(
    db: Session, team_id: UUID, now: datetime | None = None
) -> TeamPerformance:
    """Monthly projects, candidates, placements and revenue for the last 12 months."""
    _require_team(db, team_id)
    now = now or utcnow()

    months = _month_starts(now, PERFORMANCE_WINDOW_MONTHS)
    first_year, first_month = months[0]
    window_start = now.replace(
        year=first_year, month=first_month, day=1, hour=0, minute=0, second=0, microsecond=0
    )

    projects = (
        db.query(Project)
        .options(selectinload(Project.candidate_projects))
        .filter(Project.team_id == team_id, Project.created_at >= window_start)
        .all()
    )

    monthly_data = []
    for year, month in months:
        month_projects = [
            p for p in projects if (p.created_at.year, p.created_at.month) == (year, month)
        ]
        placements = sum(
            1
            for p in month_projects
            for cp in p.candidate_projects
            if cp.status == CandidateProjectStatus.HIRED.value
        )
        monthly_data.append(
            MonthlyPerformance(
                month=f"{year:04d}-{month:02d}",
                placements=placements,
                revenue=placements * REVENUE_PER_PLACEMENT,
                projects=len(month_projects),
                candidates=sum(len(p.candidate_projects) for p in month_projects),
            )
        )

    total_placements = sum(m.placements for m in monthly_data)
    return TeamPerformance(
        monthly_data=monthly_data,
        total_placements=total_placements,
        total_revenue=sum(m.revenue for m in monthly_data),
        average_monthly_placements=total_placements / PERFORMANCE_WINDOW_MONTHS,
    )


def get_team_success_rates(db: Session, team_id: UUID) -> TeamSuccessRates:
    """
    Hired / in-progress / rejected distribution of the team's candidates.

    A candidate is classified only by their links to this team's projects;
    links to other teams' projects are ignored, so one candidate can count
    as hired here and in progress for another team.
    """
    _require_team(db, team_id)

    in_progress_values = {s.value for s in IN_PROGRESS_CANDIDATE_STATUSES}
    rejected_values = {s.value for s in REJECTED_CANDIDATE_STATUSES}

    hired = in_progress = rejected = 0
    candidates = _team_candidates(db, team_id)
    for candidate in candidates:
        statuses = {cp.status for cp in _team_links(candidate, team_id)}
        if CandidateProjectStatus.HIRED.value in statuses:
            hired += 1
        if statuses & in_progress_values:
            in_progress += 1
        if statuses & rejected_values:
            rejected += 1

    total = len(candidates)
    return TeamSuccessRates(
        total_candidates=total,
        hired=hired,
        in_progress=in_progress,
        rejected=rejected,
        success_rate=_percent(hired, total),
        distribution=SuccessRateBreakdown(
            hired=_percent(hired, total),
            in_progress=_percent(in_progress, total),
            rejected=_percent(rejected, total),
        ),
    )
