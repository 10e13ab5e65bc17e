# app/schemas/digest.py
from pydantic import BaseModel, computed_field
from datetime import datetime
from typing import List
from app.schemas.task import TaskOut

class UserDigest(BaseModel):
    user_id: int
    email: str
    due_today: List[TaskOut] = []
    overdue: List[TaskOut] = []
    recently_completed: List[TaskOut] = []

    @computed_field
    @property
    def due_today_count(self) -> int:
        return len(self.due_today)

    @computed_field
    @property
    def overdue_count(self) -> int:
        return len(self.overdue)

    @computed_field
    @property
    def recently_completed_count(self) -> int:
        return len(self.recently_completed)

class DigestSummary(BaseModel):
    generated_at: datetime
    total_users: int
    total_upcoming: int
    total_overdue: int
    total_recently_completed: int
    users: List[UserDigest] = []
