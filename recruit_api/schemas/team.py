"""Pydantic schemas for teams, memberships and team analytics."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from recruit_api.db.enums import SortOrder, TeamSortField
from recruit_api.utils.pagination import DEFAULT_PAGE, DEFAULT_TEAM_LIMIT, MAX_PER_PAGE


# =============================================================================
# Requests
# =============================================================================


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    lead_id: UUID | None = None
    head_id: UUID | None = None
    manager_id: UUID | None = None


class TeamUpdate(BaseModel):
    """
    Partial update. Only fields present in the body are applied; an explicit
    null clears a leadership reference.
    """
    name: str | None = Field(None, min_length=2, max_length=100)
    lead_id: UUID | None = None
    head_id: UUID | None = None
    manager_id: UUID | None = None


class TeamListQuery(BaseModel):
    search: str | None = None
    lead_id: UUID | None = None
    head_id: UUID | None = None
    manager_id: UUID | None = None
    user_id: UUID | None = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_TEAM_LIMIT, ge=1, le=MAX_PER_PAGE)
    sort_by: TeamSortField = TeamSortField.NAME
    sort_order: SortOrder = SortOrder.ASC


class AssignUserRequest(BaseModel):
    user_id: UUID = Field(..., description="User ID to add to the team")


# =============================================================================
# Responses
# =============================================================================


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class TeamMemberRead(BaseModel):
    user_id: UUID
    team_id: UUID
    created_at: datetime
    user: UserSummary

    model_config = {"from_attributes": True}


class MemberUser(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    date_of_birth: date | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TeamMemberDetail(BaseModel):
    user_id: UUID
    team_id: UUID
    created_at: datetime
    user: MemberUser

    model_config = {"from_attributes": True}


class ProjectSummary(BaseModel):
    id: UUID
    title: str
    status: str
    priority: str
    deadline: date | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CandidateSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str | None = None
    current_status: str

    model_config = {"from_attributes": True}


class TeamRead(BaseModel):
    id: UUID
    name: str
    lead_id: UUID | None = None
    head_id: UUID | None = None
    manager_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    members: list[TeamMemberRead] = []
    projects: list[ProjectSummary] = []
    candidates: list[CandidateSummary] = []

    model_config = {"from_attributes": True}


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TeamListResponse(BaseModel):
    teams: list[TeamRead]
    pagination: PaginationMeta


class TeamDeleteResult(BaseModel):
    id: UUID
    message: str


class TeamStats(BaseModel):
    total_teams: int
    teams_with_leads: int
    teams_with_heads: int
    teams_with_managers: int
    average_team_size: float
    teams_by_member_count: dict[str, int]
    teams_with_projects: int
    teams_with_candidates: int
    average_projects_per_team: float
    average_candidates_per_team: float


# =============================================================================
# Per-team listings and analytics
# =============================================================================


class ClientSummary(BaseModel):
    id: UUID
    name: str
    type: str | None = None

    model_config = {"from_attributes": True}


class TeamProjectRead(BaseModel):
    id: UUID
    title: str
    description: str | None = None
    status: str
    priority: str
    deadline: date | None = None
    client: ClientSummary | None = None
    candidates_assigned: int
    progress: int = 0


class AssignedProject(BaseModel):
    id: UUID
    title: str
    client: ClientSummary | None = None


class RecruiterSummary(BaseModel):
    id: UUID | None = None
    name: str = "Unknown"


class TeamCandidateRead(BaseModel):
    id: UUID
    name: str
    contact: str | None = None
    email: str | None = None
    current_status: str
    experience: float = 0
    skills: list[str] = []
    assigned_project: AssignedProject | None = None
    assigned_by: RecruiterSummary
    last_activity: datetime


class TeamSummaryStats(BaseModel):
    total_members: int
    total_projects: int
    active_projects: int
    completed_projects: int
    completion_rate: float
    total_candidates: int


class MonthlyPerformance(BaseModel):
    month: str  # YYYY-MM
    placements: int
    revenue: int
    projects: int
    candidates: int


class TeamPerformance(BaseModel):
    monthly_data: list[MonthlyPerformance]
    total_placements: int
    total_revenue: int
    average_monthly_placements: float


class SuccessRateBreakdown(BaseModel):
    hired: float
    in_progress: float
    rejected: float


class TeamSuccessRates(BaseModel):
    total_candidates: int
    hired: int
    in_progress: int
    rejected: int
    success_rate: float
    distribution: SuccessRateBreakdown
