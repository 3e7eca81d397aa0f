"""
Notification Domain Model
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from invenhub.domain.catalog import NotificationType


class Notification(BaseModel):
    """
    In-app notification shown in the dashboard bell.

    dedupe_key groups repeated alerts (e.g. the same product running low on
    every stock check); only one unread notification per key is kept.
    """
    id: int
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    dedupe_key: Optional[str] = None
    read: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
