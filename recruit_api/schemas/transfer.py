"""Pydantic schemas for team transfer requests."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from recruit_api.db.enums import TransferStatus
from recruit_api.schemas.team import UserSummary


class TransferRequestCreate(BaseModel):
    user_id: UUID = Field(..., description="User to move out of this team")
    to_team_id: UUID = Field(..., description="Team to move the user into")
    reason: str | None = Field(None, max_length=500)


class TransferRequestProcess(BaseModel):
    reason: str | None = Field(None, max_length=500)


class TeamRef(BaseModel):
    id: UUID
    name: str

    model_config = {"from_attributes": True}


class TransferRequestRead(BaseModel):
    id: UUID
    user: UserSummary
    from_team: TeamRef
    to_team: TeamRef
    requester: UserSummary
    status: TransferStatus
    reason: str | None = None
    approver: UserSummary | None = None
    approved_at: datetime | None = None
    decision_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransferRequestList(BaseModel):
    transfer_requests: list[TransferRequestRead]
    total: int
    count: int
    offset: int
