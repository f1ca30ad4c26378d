"""Family membership mutations.

Every mutation runs in one transaction. When the mutation depends on who is
in a family (roles, counts), the family row is locked first so concurrent
requests against the same family are serialized and cannot both pass the
admin quorum check.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from familink.errors import Conflict, Expired, FamilyError, Forbidden, NotFound
from familink.models.enums import FamilyRole
from familink.models.family import Family
from familink.models.family_member import FamilyMember
from familink.models.invitation import Invitation
from familink.models.user import User
from familink.services import invitations
from familink.services.access import require_admin, require_member
from familink.services.membership import (
    admin_count,
    assert_admin_quorum,
    get_membership,
    member_count,
)
from familink.services.notifications import InvitationCreated, InvitationNotifier

logger = logging.getLogger(__name__)


class FamilyService:
    def __init__(self, db: Session, notifier: InvitationNotifier):
        self.db = db
        self.notifier = notifier

    @contextmanager
    def _transaction(self, family_id: int | None = None) -> Iterator[None]:
        """Commit on success, roll back on any error.

        Parameters:
            family_id: If given, the family row is locked for the duration.
                The lock is the first statement of a new transaction, so no
                read made before it (the caller's identity lookup, say) can
                pin an older snapshot.
        """
        if family_id is not None and self.db.in_transaction():
            self.db.commit()
        try:
            if family_id is not None:
                self._lock_family(family_id)
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _lock_family(self, family_id: int) -> Family | None:
        return self.db.execute(
            select(Family).where(Family.id == family_id).with_for_update()
        ).scalar_one_or_none()

    def _get_family_member(self, family_id: int, member_id: int) -> FamilyMember:
        member = self.db.get(FamilyMember, member_id)
        if member is None or member.family_id != family_id:
            raise NotFound("Member not found.")
        return member

    # Families

    def create_family(self, user_id: int, attrs: dict[str, Any]) -> Family:
        with self._transaction():
            family = Family(**attrs)
            family.members.append(FamilyMember(user_id=user_id, role=FamilyRole.ADMIN))
            self.db.add(family)
            self.db.flush()
        logger.info("Family %s created by user %s", family.id, user_id)
        return family

    def list_families(self, user_id: int) -> list[tuple[Family, FamilyRole]]:
        rows = self.db.execute(
            select(Family, FamilyMember.role)
            .join(FamilyMember, FamilyMember.family_id == Family.id)
            .where(FamilyMember.user_id == user_id)
            .order_by(Family.id)
        ).all()
        return [(family, role) for family, role in rows]

    def get_family(self, user_id: int, family_id: int) -> tuple[Family, FamilyRole]:
        membership = require_member(self.db, user_id, family_id)
        return membership.family, membership.role

    def update_family(
        self, user_id: int, family_id: int, attrs: dict[str, Any]
    ) -> Family:
        with self._transaction(family_id):
            membership = require_admin(self.db, user_id, family_id)
            family = membership.family
            for field, value in attrs.items():
                setattr(family, field, value)
            self.db.flush()
        return family

    def delete_family(self, user_id: int, family_id: int) -> None:
        with self._transaction(family_id):
            membership = require_admin(self.db, user_id, family_id)
            self.db.delete(membership.family)
            self.db.flush()
        logger.info("Family %s deleted by user %s", family_id, user_id)

    # Members

    def list_members(self, user_id: int, family_id: int) -> list[FamilyMember]:
        require_member(self.db, user_id, family_id)
        return list(
            self.db.execute(
                select(FamilyMember)
                .where(FamilyMember.family_id == family_id)
                .order_by(FamilyMember.id)
            ).scalars()
        )

    def remove_member(self, user_id: int, family_id: int, member_id: int) -> None:
        with self._transaction(family_id):
            require_admin(self.db, user_id, family_id)
            target = self._get_family_member(family_id, member_id)
            if target.user_id == user_id:
                raise Forbidden(
                    "You cannot remove yourself; leave the family instead."
                )
            self.db.delete(target)
            self.db.flush()
            assert_admin_quorum(self.db, family_id)
        logger.info(
            "Member %s removed from family %s by user %s", member_id, family_id, user_id
        )

    def update_member_role(
        self, user_id: int, family_id: int, member_id: int, role: FamilyRole
    ) -> FamilyMember:
        with self._transaction(family_id):
            require_admin(self.db, user_id, family_id)
            target = self._get_family_member(family_id, member_id)
            if target.user_id == user_id and role != FamilyRole.ADMIN:
                raise Forbidden("You cannot demote yourself.")
            target.role = role
            self.db.flush()
            assert_admin_quorum(self.db, family_id)
        logger.info(
            "Member %s of family %s is now %s", member_id, family_id, role.value
        )
        return target

    def leave_family(self, user_id: int, family_id: int) -> bool:
        """Remove the caller's own membership.

        The last remaining member takes the family with them: the family and
        its invitations are deleted in the same transaction.

        Returns:
            True if the family was deleted.

        Raises:
            NotFound: The caller is not a member.
            Forbidden: The caller is the only admin and other members remain.
        """
        with self._transaction(family_id):
            membership = get_membership(self.db, user_id, family_id)
            if membership is None:
                raise NotFound("You are not a member of this family.")

            members = member_count(self.db, family_id)
            if membership.is_admin and members > 1 and admin_count(self.db, family_id) == 1:
                raise Forbidden(
                    "You are the only admin of this family. "
                    "Promote another member to admin before leaving."
                )

            family_deleted = members == 1
            if family_deleted:
                self.db.delete(membership.family)
            else:
                self.db.delete(membership)
            self.db.flush()
            if not family_deleted:
                assert_admin_quorum(self.db, family_id)

        if family_deleted:
            logger.info("User %s left family %s; family disbanded", user_id, family_id)
        else:
            logger.info("User %s left family %s", user_id, family_id)
        return family_deleted

    # Invitations

    def create_invitation(
        self,
        user_id: int,
        family_id: int,
        email: str,
        role: FamilyRole = FamilyRole.MEMBER,
    ) -> Invitation:
        with self._transaction(family_id):
            require_admin(self.db, user_id, family_id)
            invitation = invitations.create(self.db, family_id, email, role, user_id)

        self.notifier.invitation_created(
            InvitationCreated(
                token=invitation.token,
                email=invitation.email,
                family_id=invitation.family_id,
                expires_at=invitations.as_utc(invitation.expires_at),
            )
        )
        return invitation

    def list_invitations(self, user_id: int, family_id: int) -> list[Invitation]:
        require_admin(self.db, user_id, family_id)
        return list(
            self.db.execute(
                select(Invitation)
                .where(Invitation.family_id == family_id)
                .order_by(Invitation.sent_at.desc(), Invitation.id.desc())
            ).scalars()
        )

    def accept_invitation(self, user_id: int, token: str) -> FamilyMember:
        """Join a family with an invitation token.

        Expiry and "already a member" both consume the invitation (EXPIRED and
        ACCEPTED respectively); those transitions are committed before the
        error is raised.

        Raises:
            NotFound: No invitation has this token, or the user is unknown.
            InvalidState: The invitation is no longer pending.
            Expired: The invitation was past its expiry.
            Forbidden: The invitation was sent to another email address.
            Conflict: The caller was already a member.
        """
        invitation = self.db.execute(
            select(Invitation).where(Invitation.token == token)
        ).scalar_one_or_none()
        if invitation is None:
            raise NotFound("Invitation not found.")

        family_id = invitation.family_id
        outcome: FamilyError | None = None
        membership: FamilyMember | None = None
        with self._transaction(family_id):
            self.db.refresh(invitation)
            invitations.require_pending(invitation)
            if invitations.mark_expired_if_due(invitation):
                outcome = Expired()
            else:
                user = self.db.get(User, user_id)
                if user is None:
                    raise NotFound("User not found.")
                if user.email.lower() != invitation.email.lower():
                    raise Forbidden("This invitation was not sent to you.")

                already_member = get_membership(self.db, user_id, family_id) is not None
                invitations.accept(invitation)
                if already_member:
                    outcome = Conflict("You are already a member of this family.")
                else:
                    membership = FamilyMember(
                        family_id=family_id, user_id=user_id, role=invitation.role
                    )
                    self.db.add(membership)
                    self.db.flush()

        if outcome is not None:
            raise outcome
        logger.info(
            "User %s joined family %s as %s", user_id, family_id, membership.role.value
        )
        return membership

    def cancel_invitation(self, user_id: int, invitation_id: int) -> Invitation:
        """Cancel a pending invitation.

        Raises:
            NotFound: No such invitation, or the caller is not a member of
                its family; the two are indistinguishable.
            Forbidden: The caller is a member but not an admin.
            InvalidState: The invitation is no longer pending.
        """
        invitation = self.db.get(Invitation, invitation_id)
        if invitation is None:
            raise NotFound("Invitation not found.")

        family_id = invitation.family_id
        with self._transaction(family_id):
            if get_membership(self.db, user_id, family_id) is None:
                raise NotFound("Invitation not found.")
            require_admin(self.db, user_id, family_id)
            self.db.refresh(invitation)
            invitations.cancel(invitation)
        logger.info("Invitation %s cancelled by user %s", invitation_id, user_id)
        return invitation
