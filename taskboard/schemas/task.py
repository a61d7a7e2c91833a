from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from datetime import date, datetime, time, timezone
from typing import Optional

from ..models import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    """Fields a client may send for a task. Owner is never among them."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("priority", "due_date", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        # Date inputs send "YYYY-MM-DD"; treat as midnight
        if isinstance(value, str) and len(value.strip()) == 10:
            try:
                return datetime.combine(date.fromisoformat(value.strip()), time.min)
            except ValueError:
                return value
        return value

    @field_validator("due_date")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored due dates are always timezone-aware
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TaskCreate(TaskBase):
    """Schema for creating new tasks; title is checked by the handler."""
    pass


class TaskUpdate(TaskBase):
    """Schema for partial updates; only keys present in the body apply."""

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TaskRead(BaseModel):
    """Task response schema for API responses."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    user_id: str
    created_at: datetime
    updated_at: datetime


def task_payload(task) -> dict:
    return TaskRead.model_validate(task).model_dump(by_alias=True, mode="json")
