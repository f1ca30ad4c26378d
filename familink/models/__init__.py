from familink.models.enums import FamilyRole, InvitationStatus, Language
from familink.models.user import User
from familink.models.family import Family
from familink.models.family_member import FamilyMember
from familink.models.invitation import Invitation

__all__ = [
    "User",
    "Family",
    "FamilyMember",
    "Invitation",
    "FamilyRole",
    "InvitationStatus",
    "Language",
]
