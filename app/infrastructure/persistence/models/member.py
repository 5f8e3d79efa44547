"""Member ORM model (fields automations read and patch)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import MemberStatus, MemberTier
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampedModel


class Member(TimestampedModel, Base):
    """Member record. Table: member."""

    __tablename__ = "member"

    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tier: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=MemberTier.BRONZE.value,
        server_default=MemberTier.BRONZE.value,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=MemberStatus.ACTIVE.value,
        server_default=MemberStatus.ACTIVE.value,
    )
