import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db, store_operation
from ..exceptions import ValidationError
from ..models import Task as TaskModel, TaskStatus, User
from ..ownership import require_owner
from ..schemas.task import TaskCreate, TaskUpdate, task_payload
from ..validation import parse_resource_id
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

TASK_NOT_FOUND = "Task not found"
NOT_NULLABLE = ("title", "status")


def _check_changes(changes: dict) -> dict:
    for field in NOT_NULLABLE:
        if field in changes and changes[field] is None:
            raise ValidationError(f"Task {field} cannot be empty")
    if "title" in changes and not changes["title"].strip():
        raise ValidationError("Task title cannot be empty")
    return changes


@router.post("/task", status_code=status.HTTP_201_CREATED)
def create_task(
    task: Optional[TaskCreate] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a task owned by the caller."""
    if task is None:
        task = TaskCreate()
    if not task.title or not task.title.strip():
        raise ValidationError("Task title is required")

    db_task = TaskModel(
        title=task.title,
        description=task.description,
        status=task.status or TaskStatus.PENDING,
        priority=task.priority,
        due_date=task.due_date,
        user_id=current_user.id,
    )
    with store_operation(db, "creating task"):
        db.add(db_task)
        db.commit()
        db.refresh(db_task)

    logger.info(f"Task {db_task.id} created for user {current_user.id}")
    return {"success": True, "data": task_payload(db_task)}


@router.get("/task")
def get_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get every task the caller owns."""
    with store_operation(db, "listing tasks"):
        tasks = (
            db.query(TaskModel)
            .filter(TaskModel.user_id == current_user.id)
            .order_by(TaskModel.created_at.asc())
            .all()
        )
    return {"success": True, "data": [task_payload(task) for task in tasks]}


@router.get("/task/{task_id}")
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a specific task; another user's task reads as missing."""
    task_id = parse_resource_id(task_id, "task")

    with store_operation(db, "reading task"):
        task = db.get(TaskModel, task_id)
    task = require_owner(task, current_user.id, not_found=TASK_NOT_FOUND)
    return {"success": True, "data": task_payload(task)}


@router.put("/task/{task_id}")
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply the fields present in the body to a task the caller owns.

    Unlike reads, a task owned by someone else answers 403.
    """
    task_id = parse_resource_id(task_id, "task")

    with store_operation(db, "reading task for update"):
        task = db.get(TaskModel, task_id)
    task = require_owner(
        task,
        current_user.id,
        not_found=TASK_NOT_FOUND,
        forbidden="Unauthorized action",
    )

    changes = _check_changes(task_update.changes())
    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = datetime.now(timezone.utc)

    with store_operation(db, "updating task"):
        db.commit()
        db.refresh(task)

    logger.debug(f"Task {task.id} updated fields {sorted(changes)}")
    return {"success": True, "data": task_payload(task)}


@router.delete("/task/{task_id}")
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a task the caller owns."""
    task_id = parse_resource_id(task_id, "task")

    with store_operation(db, "reading task for delete"):
        task = db.get(TaskModel, task_id)
    task = require_owner(task, current_user.id, not_found=TASK_NOT_FOUND)

    with store_operation(db, "deleting task"):
        db.delete(task)
        db.commit()

    logger.info(f"Task {task_id} deleted by user {current_user.id}")
    return {"success": True, "message": "Task deleted"}
