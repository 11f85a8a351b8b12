"""REANA workflow service operations used by the deletion flow."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .workflow_client import delete_workflow_raw, list_workflows_raw
from .workflow_config import NON_DELETED_STATUSES, get_related_runs_page_size
from .workflow_models import WorkflowListPage
from .workflow_parsers import parse_workflow_list_payload

logger = logging.getLogger(__name__)


async def list_workflows(
    workflow_id_or_name: str,
    status: Iterable[str] = NON_DELETED_STATUSES,
    size: int | None = None,
    page: int = 1,
) -> WorkflowListPage:
    """
    List the runs of a workflow.

    Args:
        workflow_id_or_name: Workflow name (or id) to search for
        status: Workflow statuses to include
        size: Page size (defaults to the related-runs page size)
        page: 1-based page number

    Returns:
        WorkflowListPage with the parsed runs and the service-side total
    """
    page_size = size or get_related_runs_page_size()
    data = await list_workflows_raw(
        workflow_id_or_name,
        status=status,
        size=page_size,
        page=page,
    )
    result = parse_workflow_list_payload(data)

    logger.info(
        "Listed workflow runs",
        extra={
            "workflowIdOrName": workflow_id_or_name,
            "returned": len(result.items),
            "total": result.total,
        },
    )
    return result


async def delete_workflow(
    workflow_id: str,
    all_runs: bool = False,
    delete_workspace: bool | None = None,
) -> None:
    """Delete one workflow run, optionally all runs of the workflow or keeping its workspace."""
    logger.info(
        "Deleting workflow run",
        extra={
            "workflowId": workflow_id,
            "allRuns": all_runs,
            "deleteWorkspace": delete_workspace,
        },
    )
    await delete_workflow_raw(
        workflow_id,
        all_runs=all_runs,
        delete_workspace=delete_workspace,
    )
