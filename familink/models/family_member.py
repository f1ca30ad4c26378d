from datetime import datetime

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familink.database import Base
from familink.models.enums import FamilyRole


class FamilyMember(Base):
    __tablename__ = "family_members"
    __table_args__ = (
        UniqueConstraint("family_id", "user_id", name="uq_family_members_family_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    family_id: Mapped[int] = mapped_column(
        ForeignKey("families.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    role: Mapped[FamilyRole] = mapped_column(
        Enum(FamilyRole, native_enum=False, length=20), default=FamilyRole.MEMBER
    )
    joined_at: Mapped[datetime] = mapped_column(server_default=func.now())

    family: Mapped["Family"] = relationship("Family", back_populates="members")
    user: Mapped["User"] = relationship(
        "User", back_populates="memberships", lazy="selectin"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == FamilyRole.ADMIN
