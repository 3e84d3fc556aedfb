"""
Credential and task stores.

The API layer only sees the abstract ``CredentialStore`` / ``TaskStore``
interfaces; the SQLAlchemy implementations below are wired up in
``main.create_app``.  Every operation runs in its own session, so each one
is a single atomic unit of work that either returns or raises one of the
``core.errors`` types.  Database faults propagate unchanged.
"""

from __future__ import annotations

import abc
import logging
import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import DuplicateEmailError, NotFoundError, ValidationError
from database.models import Task, User, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_TASK_FIELDS = ("title", "description", "completed")

# Upper bound of the ``tasks.task_id`` column (PostgreSQL int4).
MAX_TASK_ID = 2**31 - 1


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        raise NotFoundError("User not found") from None


def _check_task_id(task_id: int) -> int:
    # Ids the column cannot hold cannot exist; answer like any missing task.
    if not 1 <= task_id <= MAX_TASK_ID:
        raise NotFoundError("Task not found")
    return task_id


def validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title


def _validate_description(description: Any) -> Optional[str]:
    if description is not None and not isinstance(description, str):
        raise ValidationError("Description must be a string")
    return description


# ── Interfaces ─────────────────────────────────────────────────────────


class CredentialStore(abc.ABC):
    @abc.abstractmethod
    async def create(self, email: str, password_hash: str) -> User:
        """Insert a user; ``DuplicateEmailError`` if the email is taken."""

    @abc.abstractmethod
    async def find_by_email(self, email: str) -> User:
        """Case-insensitive lookup; ``NotFoundError`` if absent."""


class TaskStore(abc.ABC):
    @abc.abstractmethod
    async def create(self, owner_id: str, title: str, description: Optional[str] = None) -> Task:
        ...

    @abc.abstractmethod
    async def list_for_owner(self, owner_id: str, completed: Optional[bool] = None) -> List[Task]:
        ...

    @abc.abstractmethod
    async def get_for_owner(self, owner_id: str, task_id: int) -> Task:
        ...

    @abc.abstractmethod
    async def update(self, owner_id: str, task_id: int, fields: Mapping[str, Any]) -> Task:
        ...

    @abc.abstractmethod
    async def delete(self, owner_id: str, task_id: int) -> None:
        ...


# ── SQLAlchemy implementations ─────────────────────────────────────────


class SqlCredentialStore(CredentialStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, email: str, password_hash: str) -> User:
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationError("Email is required")

        user = User(
            user_id=uuid.uuid4(),
            email=normalized,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        async with self._session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise DuplicateEmailError() from None
        return user

    async def find_by_email(self, email: str) -> User:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User).where(User.email == normalize_email(email))
            )
            user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user


class SqlTaskStore(TaskStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, owner_id: str, title: str, description: Optional[str] = None) -> Task:
        uid = _to_uuid(owner_id)
        validate_title(title)
        _validate_description(description)

        now = utcnow()
        task = Task(
            user_id=uid,
            title=title,
            description=description,
            completed=False,
            created_at=now,
            updated_at=now,
        )
        async with self._session_factory() as session:
            session.add(task)
            await session.commit()
        logger.info("Task %s created for user %s", task.task_id, uid)
        return task

    async def list_for_owner(self, owner_id: str, completed: Optional[bool] = None) -> List[Task]:
        uid = _to_uuid(owner_id)
        stmt = select(Task).where(Task.user_id == uid)
        if completed is not None:
            stmt = stmt.where(Task.completed == completed)
        stmt = stmt.order_by(Task.created_at.desc(), Task.task_id.desc())

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_for_owner(self, owner_id: str, task_id: int) -> Task:
        uid = _to_uuid(owner_id)
        _check_task_id(task_id)
        async with self._session_factory() as session:
            result = await session.execute(
                select(Task).where(Task.task_id == task_id, Task.user_id == uid)
            )
            task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def update(self, owner_id: str, task_id: int, fields: Mapping[str, Any]) -> Task:
        """
        Apply ``title`` / ``description`` / ``completed`` from *fields*.

        Any other key (``user_id``, ``task_id``...) is ignored.  The row is
        locked for the read-modify-write, so concurrent updates serialize
        and the last writer wins.
        """
        uid = _to_uuid(owner_id)
        _check_task_id(task_id)
        changes = {key: fields[key] for key in UPDATABLE_TASK_FIELDS if key in fields}
        if "title" in changes:
            validate_title(changes["title"])
        if "description" in changes:
            _validate_description(changes["description"])
        if "completed" in changes and not isinstance(changes["completed"], bool):
            raise ValidationError("Completed must be a boolean")

        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(Task)
                    .where(Task.task_id == task_id, Task.user_id == uid)
                    .with_for_update()
                )
                task = result.scalar_one_or_none()
                if task is None:
                    raise NotFoundError("Task not found")
                for key, value in changes.items():
                    setattr(task, key, value)
                task.updated_at = utcnow()
        logger.info("Task %s updated by user %s (%s)", task_id, uid, ", ".join(changes) or "touch")
        return task

    async def delete(self, owner_id: str, task_id: int) -> None:
        uid = _to_uuid(owner_id)
        _check_task_id(task_id)
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(Task).where(Task.task_id == task_id, Task.user_id == uid)
                )
        if result.rowcount == 0:
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted by user %s", task_id, uid)
