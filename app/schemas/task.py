# app/schemas/task.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional, List

class CategoryBrief(BaseModel):
    name: str

    model_config = {
        "from_attributes": True
    }

class StatusLogOut(BaseModel):
    id: int
    task_id: int
    status: str
    changed_by: int
    changed_at: datetime

    model_config = {
        "from_attributes": True
    }

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    category_id: int
    status: Optional[str] = None
    due_date: Optional[date] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    status: Optional[str] = None
    due_date: Optional[date] = None

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    category_id: int
    user_id: int
    status: str
    due_date: Optional[date]
    created_at: datetime

    # joined category name
    category: Optional[CategoryBrief] = None

    model_config = {
        "from_attributes": True
    }

class TaskDetailOut(TaskOut):
    # status history, oldest first
    status_logs: List[StatusLogOut] = []
