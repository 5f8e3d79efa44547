"""Member API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.enums import MemberStatus, MemberTier


class MemberCreateRequest(BaseModel):
    """Request body for creating a member."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    tier: MemberTier = MemberTier.BRONZE
    status: MemberStatus = MemberStatus.ACTIVE


class MemberResponse(BaseModel):
    """Member response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None
    first_name: str
    last_name: str
    tier: str
    status: str
    created_at: datetime | None
