from datetime import datetime

from pydantic import BaseModel, Field

from familink.models.enums import FamilyRole, Language
from familink.schemas.user import UserSummary


class FamilyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    language: Language = Language.FR
    gazette_day: int | None = Field(default=None, ge=1, le=31)
    max_photos_per_gazette: int = Field(default=20, ge=1)
    auto_generate_gazette: bool = True


class FamilyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    cover_photo: str | None = Field(default=None, max_length=500)
    language: Language | None = None
    gazette_day: int | None = Field(default=None, ge=1, le=31)
    max_photos_per_gazette: int | None = Field(default=None, ge=1)
    auto_generate_gazette: bool | None = None


class FamilyRead(BaseModel):
    id: int
    name: str
    description: str | None
    cover_photo: str | None
    language: Language
    gazette_day: int | None
    max_photos_per_gazette: int
    auto_generate_gazette: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberRead(BaseModel):
    id: int
    family_id: int
    user_id: int
    role: FamilyRole
    joined_at: datetime
    user: UserSummary

    model_config = {"from_attributes": True}


class FamilyWithRole(FamilyRead):
    role: FamilyRole


class FamilyDetail(FamilyWithRole):
    members: list[MemberRead]


class MemberRoleUpdate(BaseModel):
    role: FamilyRole


class LeaveResult(BaseModel):
    family_id: int
    family_deleted: bool
