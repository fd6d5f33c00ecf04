"""SQLAlchemy ORM models."""

from recruit_api.db.models.auth import User
from recruit_api.db.models.outbox import OutboxEvent
from recruit_api.db.models.projects import Candidate, CandidateProject, Client, Project
from recruit_api.db.models.teams import Team, TeamTransferRequest, UserTeam

__all__ = [
    "Candidate",
    "CandidateProject",
    "Client",
    "OutboxEvent",
    "Project",
    "Team",
    "TeamTransferRequest",
    "User",
    "UserTeam",
]
