"""Low-level HTTP calls to the REANA workflow API."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

import httpx

from .workflow_config import get_request_timeout
from .workflow_errors import WorkflowServiceAPIError, WorkflowServiceConfigurationError

logger = logging.getLogger(__name__)


def _get_required_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise WorkflowServiceConfigurationError(f"Missing required environment variable: {key}")
    return value


def _get_api_context() -> tuple[str, dict[str, str]]:
    api_url = _get_required_env("REANA_SERVER_URL").rstrip("/")
    token = _get_required_env("REANA_ACCESS_TOKEN")
    return api_url, {"access_token": token}


def _headers() -> dict[str, str]:
    return {"Accept": "application/json"}


def _masked_params(params: dict[str, object]) -> dict[str, object]:
    """Mask the access token before logging."""
    masked = dict(params)
    if "access_token" in masked:
        masked["access_token"] = "***"
    return masked


async def list_workflows_raw(
    workflow_id_or_name: str,
    status: Iterable[str] | None = None,
    size: int = 1000,
    page: int = 1,
) -> dict | list:
    api_url, params = _get_api_context()
    query: dict[str, object] = {
        **params,
        "type": "batch",
        "workflow_id_or_name": workflow_id_or_name,
        "size": size,
        "page": page,
    }
    statuses = list(status or [])
    if statuses:
        query["status"] = statuses

    url = f"{api_url}/api/workflows"
    logger.debug("Listing workflows: url=%s params=%s", url, _masked_params(query))
    async with httpx.AsyncClient(timeout=httpx.Timeout(get_request_timeout())) as client:
        response = await client.get(url, headers=_headers(), params=query)

    if response.is_error:
        raise WorkflowServiceAPIError(
            f"Failed to list workflows: {response.status_code} {response.text}"
        )
    try:
        return response.json()
    except ValueError as exc:
        raise WorkflowServiceAPIError(f"Failed to list workflows: invalid JSON response: {exc}") from exc


async def delete_workflow_raw(
    workflow_id: str,
    all_runs: bool = False,
    delete_workspace: bool | None = None,
) -> dict | None:
    api_url, params = _get_api_context()
    url = f"{api_url}/api/workflows/{workflow_id}/status"
    body: dict[str, bool] = {"all_runs": all_runs}
    if delete_workspace is not None:
        body["workspace"] = delete_workspace

    async with httpx.AsyncClient(timeout=httpx.Timeout(get_request_timeout())) as client:
        response = await client.put(
            url,
            headers=_headers(),
            params={**params, "status": "deleted"},
            json=body,
        )

    if response.status_code == 404:
        logger.warning("Workflow already gone", extra={"workflowId": workflow_id})
        return None
    if response.is_error:
        raise WorkflowServiceAPIError(
            f"Failed to delete workflow {workflow_id}: {response.status_code} {response.text}"
        )
    return response.json() if response.text else None
