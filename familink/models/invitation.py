from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familink.database import Base
from familink.models.enums import FamilyRole, InvitationStatus


class Invitation(Base):
    __tablename__ = "invitations"
    __table_args__ = (
        Index("ix_invitations_family_email_status", "family_id", "email", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255))
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    role: Mapped[FamilyRole] = mapped_column(
        Enum(FamilyRole, native_enum=False, length=20), default=FamilyRole.MEMBER
    )
    family_id: Mapped[int] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE")
    )
    invited_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus, native_enum=False, length=20),
        default=InvitationStatus.PENDING,
    )
    sent_at: Mapped[datetime] = mapped_column()
    expires_at: Mapped[datetime] = mapped_column()
    accepted_at: Mapped[datetime | None] = mapped_column(default=None)

    family: Mapped["Family"] = relationship("Family", back_populates="invitations")

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING
