from fastapi import APIRouter

from familink.dependencies import CurrentUser, Families
from familink.schemas.family import MemberRead
from familink.schemas.invitation import InvitationAccept, InvitationRead

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post("/accept", response_model=MemberRead)
def accept_invitation(request: InvitationAccept, user: CurrentUser, families: Families):
    return families.accept_invitation(user.id, request.token)


@router.delete("/{invitation_id}", response_model=InvitationRead)
def cancel_invitation(invitation_id: int, user: CurrentUser, families: Families):
    return families.cancel_invitation(user.id, invitation_id)
