"""WayShare Backend - Notification Transfer Object (/api/notifications)."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from wayshare.schemas.common import EntityDTO, RefDTO, partial_model


class NotificationDTO(EntityDTO):
    message: str = Field(min_length=1, max_length=1024)
    timestamp: datetime
    is_read: Optional[bool] = Field(default=None, description="Whether the member has seen it")
    member: Optional[RefDTO] = Field(default=None, description="Recipient")


NotificationPatchDTO = partial_model(NotificationDTO)
