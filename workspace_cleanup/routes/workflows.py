"""Workflow-related HTTP routes."""

from __future__ import annotations

from fastapi import APIRouter

from .workflow import deletion

router = APIRouter(tags=["workflows"])
router.include_router(deletion.router)
