import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvitationCreated:
    token: str
    email: str
    family_id: int
    expires_at: datetime


class InvitationNotifier(ABC):
    """Delivers invitation links. Called only after the invitation is committed."""

    @abstractmethod
    def invitation_created(self, event: InvitationCreated) -> None: ...


class LoggingInvitationNotifier(InvitationNotifier):
    """Default notifier: records the event in the log for an external mailer."""

    def invitation_created(self, event: InvitationCreated) -> None:
        logger.info(
            "Invitation created for %s in family %s, expires %s",
            event.email,
            event.family_id,
            event.expires_at.isoformat(),
        )
