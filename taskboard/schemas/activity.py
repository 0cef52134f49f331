"""Response schemas for the project activity log."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from taskboard.models.enums import ActivityAction, EntityType
from taskboard.schemas.common import UserSummary


class ActivityResponse(BaseModel):
    id: int
    project_id: int
    user: UserSummary | None = Field(default=None, description="Null once the user is deleted.")
    action: ActivityAction
    description: str
    entity_type: EntityType
    entity_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ActivityListResponse(BaseModel):
    count: int
    data: list[ActivityResponse]
