# app/schemas/analytics.py
from pydantic import BaseModel
from typing import List
from app.schemas.task import TaskOut

class CompletionRateOut(BaseModel):
    total: int
    completed: int
    inProgress: int
    pending: int
    completionRate: float
    inProgressRate: float
    pendingRate: float
    timeframe: str

class OverdueTasksOut(BaseModel):
    overdueTasks: List[TaskOut]
    count: int
