from datetime import datetime

from pydantic import BaseModel, Field

from familink.models.enums import FamilyRole, InvitationStatus


class InvitationCreate(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: FamilyRole = FamilyRole.MEMBER


class InvitationAccept(BaseModel):
    token: str = Field(min_length=1)


class InvitationRead(BaseModel):
    id: int
    email: str
    token: str
    role: FamilyRole
    family_id: int
    invited_by_id: int | None
    status: InvitationStatus
    sent_at: datetime
    expires_at: datetime
    accepted_at: datetime | None

    model_config = {"from_attributes": True}
