from sqlalchemy import func, select
from sqlalchemy.orm import Session

from familink.errors import QuorumViolation
from familink.models.enums import FamilyRole
from familink.models.family_member import FamilyMember


def get_membership(db: Session, user_id: int, family_id: int) -> FamilyMember | None:
    return db.execute(
        select(FamilyMember).where(
            FamilyMember.user_id == user_id,
            FamilyMember.family_id == family_id,
        )
    ).scalar_one_or_none()


def is_member(db: Session, user_id: int, family_id: int) -> bool:
    return get_membership(db, user_id, family_id) is not None


def role_of(db: Session, user_id: int, family_id: int) -> FamilyRole | None:
    membership = get_membership(db, user_id, family_id)
    return membership.role if membership is not None else None


def admin_count(db: Session, family_id: int) -> int:
    return db.execute(
        select(func.count(FamilyMember.id)).where(
            FamilyMember.family_id == family_id,
            FamilyMember.role == FamilyRole.ADMIN,
        )
    ).scalar_one()


def member_count(db: Session, family_id: int) -> int:
    return db.execute(
        select(func.count(FamilyMember.id)).where(
            FamilyMember.family_id == family_id
        )
    ).scalar_one()


def assert_admin_quorum(db: Session, family_id: int) -> None:
    """Raise if the family still has members but none of them is an admin.

    Parameters:
        db: Database session, with pending changes flushed.
        family_id: The family to check.

    Raises:
        QuorumViolation: The family has members and zero admins.
    """
    if member_count(db, family_id) > 0 and admin_count(db, family_id) == 0:
        raise QuorumViolation(f"family {family_id} would be left without an admin")
