"""Parsing helpers for workflow list payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .workflow_errors import WorkflowServiceAPIError
from .workflow_models import WorkflowListPage, WorkflowRef
from .workspace_groups import split_qualified_name


def extract_size_human_readable(workflow_data: Mapping[str, Any]) -> str | None:
    size = workflow_data.get("size")
    if isinstance(size, Mapping):
        return size.get("human_readable") or None
    return None


def parse_workflow_ref(workflow_data: Mapping[str, Any]) -> WorkflowRef | None:
    """Build a WorkflowRef from one list item, or None when it carries no id."""
    workflow_id = workflow_data.get("id")
    if not workflow_id:
        return None

    qualified_name = str(workflow_data.get("name") or "")
    base, numeric = split_qualified_name(qualified_name)
    if base and numeric:
        name, run = base, ".".join(numeric)
    else:
        name, run = qualified_name, None

    return WorkflowRef(
        id=str(workflow_id),
        name=name,
        run=run,
        size_human_readable=extract_size_human_readable(workflow_data),
        status=workflow_data.get("status"),
    )


def parse_workflow_list_payload(data: dict | list) -> WorkflowListPage:
    """Normalize workflow list responses into a page of WorkflowRef items."""
    if isinstance(data, dict):
        workflows_data = data.get("items") or data.get("workflows") or []
        total = data.get("total")
        if total is None:
            total = len(workflows_data)
    elif isinstance(data, list):
        workflows_data = data
        total = len(workflows_data)
    else:
        workflows_data = []
        total = 0

    items: list[WorkflowRef] = []
    for item in workflows_data:
        if not isinstance(item, Mapping):
            continue
        ref = parse_workflow_ref(item)
        if ref is not None:
            items.append(ref)

    try:
        total_count = int(total)
    except (TypeError, ValueError) as exc:
        raise WorkflowServiceAPIError(f"Invalid workflow list total: {total!r}") from exc

    return WorkflowListPage(items=items, total=total_count)
