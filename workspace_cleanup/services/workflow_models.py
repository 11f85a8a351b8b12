"""Shared workflow service models."""

from __future__ import annotations

from dataclasses import dataclass, field

from .workspace_groups import build_qualified_name


@dataclass(frozen=True)
class WorkflowRef:
    """One workflow run as known to the deletion flow."""

    id: str
    name: str
    run: str | int | None = None
    size_human_readable: str | None = None
    status: str | None = None

    @property
    def qualified_name(self) -> str:
        return build_qualified_name(self.name, self.run)


@dataclass(frozen=True)
class WorkflowListPage:
    """A page of workflow runs plus the service-side total."""

    items: list[WorkflowRef] = field(default_factory=list)
    total: int = 0
