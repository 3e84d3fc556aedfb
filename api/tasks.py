"""
Task routes.  Every endpoint is scoped to the authenticated user; a task that
belongs to someone else is reported exactly like one that does not exist.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_task_store
from auth.dependencies import get_current_user_id
from database.stores import TaskStore
from utils.schemas import MessageResponse, TaskCreate, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    completed: Optional[bool] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: TaskStore = Depends(get_task_store),
) -> List[TaskOut]:
    tasks = await store.list_for_owner(user_id, completed=completed)
    return [TaskOut.model_validate(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    store: TaskStore = Depends(get_task_store),
) -> TaskOut:
    task = await store.get_for_owner(user_id, task_id)
    return TaskOut.model_validate(task)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    store: TaskStore = Depends(get_task_store),
) -> TaskOut:
    task = await store.create(user_id, body.title, body.description)
    return TaskOut.model_validate(task)


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    store: TaskStore = Depends(get_task_store),
) -> TaskOut:
    task = await store.update(user_id, task_id, body.model_dump(exclude_unset=True))
    return TaskOut.model_validate(task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    store: TaskStore = Depends(get_task_store),
) -> MessageResponse:
    await store.delete(user_id, task_id)
    return MessageResponse(message="Task deleted")
