"""Request/response schemas for support requests."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from taskboard.models.enums import SupportStatus
from taskboard.schemas.common import UserSummary


class SupportRequestCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=10_000)

    @field_validator("subject", "message")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide subject and message.")
        return v


class SupportDecision(BaseModel):
    admin_response: str | None = Field(default=None, max_length=10_000)


class SupportRequestResponse(BaseModel):
    id: int
    user: UserSummary
    subject: str
    message: str
    status: SupportStatus
    admin_response: str | None = None
    resolved_by: UserSummary | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupportRequestsListResponse(BaseModel):
    count: int
    data: list[SupportRequestResponse]
