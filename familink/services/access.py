from sqlalchemy.orm import Session

from familink.errors import Forbidden
from familink.models.family_member import FamilyMember
from familink.services.membership import get_membership


def require_member(db: Session, user_id: int, family_id: int) -> FamilyMember:
    """Return the caller's membership in the family.

    A missing family and a non-member caller are reported the same way so the
    response does not reveal whether the family exists.

    Raises:
        Forbidden: The caller holds no membership in the family.
    """
    membership = get_membership(db, user_id, family_id)
    if membership is None:
        raise Forbidden("You are not a member of this family.")
    return membership


def require_admin(db: Session, user_id: int, family_id: int) -> FamilyMember:
    """Return the caller's membership if it carries the admin role.

    Raises:
        Forbidden: The caller is not a member, or is a plain member.
    """
    membership = get_membership(db, user_id, family_id)
    if membership is None or not membership.is_admin:
        raise Forbidden("You do not have admin rights for this family.")
    return membership
