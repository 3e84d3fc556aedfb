"""
FastAPI dependencies (shared across routes).

Stores are built once in the application lifespan and parked on
``app.state``; routes pull them from here so nothing is module-global.
"""

from __future__ import annotations

from fastapi import Request

from database.stores import CredentialStore, TaskStore


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store
