"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PATCH to modify a task (all optional)
- TaskRead: what the API returns

Models are strict: "completed": "yes" or "title": 5 are rejected at the
boundary instead of being coerced.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TaskCreate(BaseModel):
    title: str

    model_config = {"strict": True}


class TaskUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    title: Optional[str] = None
    completed: Optional[bool] = None

    model_config = {"strict": True}


class TaskRead(BaseModel):
    id: int
    title: str
    completed: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskDeleted(BaseModel):
    deleted: bool = True
    id: int
