from fastapi import APIRouter, status

from familink.dependencies import CurrentUser, Families
from familink.models.enums import FamilyRole
from familink.models.family import Family
from familink.schemas.family import (
    FamilyCreate,
    FamilyDetail,
    FamilyRead,
    FamilyUpdate,
    FamilyWithRole,
    LeaveResult,
    MemberRead,
    MemberRoleUpdate,
)
from familink.schemas.invitation import InvitationCreate, InvitationRead

router = APIRouter(prefix="/families", tags=["families"])


def _with_role(family: Family, role: FamilyRole) -> FamilyWithRole:
    return FamilyWithRole(**FamilyRead.model_validate(family).model_dump(), role=role)


@router.post("", response_model=FamilyDetail, status_code=status.HTTP_201_CREATED)
def create_family(request: FamilyCreate, user: CurrentUser, families: Families):
    family = families.create_family(user.id, request.model_dump())
    return FamilyDetail(
        **_with_role(family, FamilyRole.ADMIN).model_dump(),
        members=[MemberRead.model_validate(m) for m in family.members],
    )


@router.get("", response_model=list[FamilyWithRole])
def list_families(user: CurrentUser, families: Families):
    return [_with_role(family, role) for family, role in families.list_families(user.id)]


@router.get("/{family_id}", response_model=FamilyDetail)
def get_family(family_id: int, user: CurrentUser, families: Families):
    family, role = families.get_family(user.id, family_id)
    return FamilyDetail(
        **_with_role(family, role).model_dump(),
        members=[MemberRead.model_validate(m) for m in family.members],
    )


@router.patch("/{family_id}", response_model=FamilyRead)
def update_family(
    family_id: int, updates: FamilyUpdate, user: CurrentUser, families: Families
):
    attrs = {
        field: value
        for field, value in updates.model_dump(exclude_unset=True).items()
        if value is not None or field in ("description", "cover_photo", "gazette_day")
    }
    return families.update_family(user.id, family_id, attrs)


@router.delete("/{family_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_family(family_id: int, user: CurrentUser, families: Families):
    families.delete_family(user.id, family_id)


@router.get("/{family_id}/members", response_model=list[MemberRead])
def list_members(family_id: int, user: CurrentUser, families: Families):
    return families.list_members(user.id, family_id)


@router.delete(
    "/{family_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT
)
def remove_member(
    family_id: int, member_id: int, user: CurrentUser, families: Families
):
    families.remove_member(user.id, family_id, member_id)


@router.patch("/{family_id}/members/{member_id}/role", response_model=MemberRead)
def update_member_role(
    family_id: int,
    member_id: int,
    request: MemberRoleUpdate,
    user: CurrentUser,
    families: Families,
):
    return families.update_member_role(user.id, family_id, member_id, request.role)


@router.post("/{family_id}/leave", response_model=LeaveResult)
def leave_family(family_id: int, user: CurrentUser, families: Families):
    family_deleted = families.leave_family(user.id, family_id)
    return LeaveResult(family_id=family_id, family_deleted=family_deleted)


@router.post(
    "/{family_id}/invitations",
    response_model=InvitationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    family_id: int, request: InvitationCreate, user: CurrentUser, families: Families
):
    return families.create_invitation(user.id, family_id, request.email, request.role)


@router.get("/{family_id}/invitations", response_model=list[InvitationRead])
def list_invitations(family_id: int, user: CurrentUser, families: Families):
    return families.list_invitations(user.id, family_id)
