"""Invitation lifecycle.

PENDING is the only non-terminal status. ACCEPTED, EXPIRED and CANCELLED are
terminal: once an invitation leaves PENDING it is never modified again.
Expiry is evaluated lazily, before any transition is attempted.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from familink.config import settings
from familink.errors import Conflict, Expired, InvalidState
from familink.models.enums import FamilyRole, InvitationStatus
from familink.models.invitation import Invitation
from familink.models.user import User
from familink.services.membership import get_membership

logger = logging.getLogger(__name__)

INVITATION_TTL = timedelta(days=settings.invitation_ttl_days)
TOKEN_BYTES = 32
MAX_TOKEN_ATTEMPTS = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Stored datetimes come back naive; they are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def unique_token(db: Session) -> str:
    """Generate a token not used by any invitation, past or present."""
    for _ in range(MAX_TOKEN_ATTEMPTS):
        token = generate_token()
        taken = db.execute(
            select(Invitation.id).where(Invitation.token == token)
        ).first()
        if taken is None:
            return token
    raise RuntimeError("could not generate a unique invitation token")


def is_due(invitation: Invitation, now: datetime | None = None) -> bool:
    now = as_utc(now or utcnow())
    return now >= as_utc(invitation.expires_at)


def mark_expired_if_due(invitation: Invitation, now: datetime | None = None) -> bool:
    """Move a PENDING invitation past its expiry to EXPIRED.

    Returns:
        True if the transition happened.
    """
    if invitation.status != InvitationStatus.PENDING or not is_due(invitation, now):
        return False
    invitation.status = InvitationStatus.EXPIRED
    logger.info("Invitation %s expired", invitation.id)
    return True


def require_pending(invitation: Invitation) -> None:
    if invitation.status != InvitationStatus.PENDING:
        raise InvalidState(
            f"This invitation is {invitation.status.value.lower()} and can no longer be used."
        )


def accept(invitation: Invitation, now: datetime | None = None) -> Invitation:
    """PENDING -> ACCEPTED.

    Raises:
        InvalidState: The invitation is already terminal.
        Expired: The invitation was due; it is now EXPIRED.
    """
    now = now or utcnow()
    require_pending(invitation)
    if mark_expired_if_due(invitation, now):
        raise Expired()
    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = now
    return invitation


def cancel(invitation: Invitation) -> Invitation:
    """PENDING -> CANCELLED.

    Raises:
        InvalidState: The invitation is already terminal.
    """
    require_pending(invitation)
    invitation.status = InvitationStatus.CANCELLED
    return invitation


def find_pending(db: Session, family_id: int, email: str) -> Invitation | None:
    return db.execute(
        select(Invitation).where(
            Invitation.family_id == family_id,
            Invitation.email == email,
            Invitation.status == InvitationStatus.PENDING,
        )
    ).scalars().first()


def create(
    db: Session,
    family_id: int,
    email: str,
    role: FamilyRole,
    invited_by_id: int,
    now: datetime | None = None,
) -> Invitation:
    """Issue a new PENDING invitation valid for ``INVITATION_TTL``.

    Parameters:
        db: Database session.
        family_id: Family the invitation grants access to.
        email: Recipient email; compared case-insensitively.
        role: Role granted on acceptance.
        invited_by_id: The inviting admin's user id.
        now: Clock override.

    Returns:
        The flushed invitation.

    Raises:
        Conflict: The email belongs to a member, or a pending invitation exists.
    """
    now = now or utcnow()
    email = email.strip().lower()

    invited_user = db.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()
    if invited_user is not None and get_membership(db, invited_user.id, family_id):
        raise Conflict("This user is already a member of the family.")

    pending = find_pending(db, family_id, email)
    if pending is not None and not mark_expired_if_due(pending, now):
        raise Conflict("An invitation has already been sent to this email.")

    invitation = Invitation(
        email=email,
        token=unique_token(db),
        role=role,
        family_id=family_id,
        invited_by_id=invited_by_id,
        status=InvitationStatus.PENDING,
        sent_at=now,
        expires_at=now + INVITATION_TTL,
    )
    db.add(invitation)
    db.flush()
    logger.info(
        "Invitation %s created for family %s (token %s...)",
        invitation.id,
        family_id,
        invitation.token[:6],
    )
    return invitation


def expire_due(db: Session, now: datetime | None = None) -> int:
    """Bulk-expire every PENDING invitation past its expiry.

    Returns:
        Number of invitations moved to EXPIRED.
    """
    now = as_utc(now or utcnow()).replace(tzinfo=None)
    result = db.execute(
        update(Invitation)
        .where(
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at <= now,
        )
        .values(status=InvitationStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
