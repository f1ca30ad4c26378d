from datetime import datetime

from sqlalchemy import Boolean, Enum, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from familink.database import Base
from familink.models.enums import Language


class Family(Base):
    __tablename__ = "families"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(500), default=None)
    cover_photo: Mapped[str | None] = mapped_column(String(500), default=None)
    language: Mapped[Language] = mapped_column(
        Enum(Language, native_enum=False, length=8), default=Language.FR
    )
    gazette_day: Mapped[int | None] = mapped_column(default=None)
    max_photos_per_gazette: Mapped[int] = mapped_column(default=20)
    auto_generate_gazette: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    members: Mapped[list["FamilyMember"]] = relationship(
        "FamilyMember",
        back_populates="family",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FamilyMember.id",
    )
    invitations: Mapped[list["Invitation"]] = relationship(
        "Invitation",
        back_populates="family",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
