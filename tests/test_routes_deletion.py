"""Tests for related-run and deletion endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, call, patch

import pytest
from fastapi.testclient import TestClient

from workspace_cleanup.services.workflow_errors import (
    WorkflowServiceAPIError,
    WorkflowServiceConfigurationError,
)

ROUTES = "workspace_cleanup.routes.workflow.deletion"


@pytest.fixture
def mock_list(restart_chain_page):
    with patch(f"{ROUTES}.list_workflows", new_callable=AsyncMock) as mock:
        mock.return_value = restart_chain_page
        yield mock


@pytest.fixture
def mock_delete():
    with patch(f"{ROUTES}.delete_workflow", new_callable=AsyncMock) as mock:
        yield mock


def test_get_related_runs(client: TestClient, mock_list):
    response = client.get("/api/workflows/x/related-runs", params={"run": "7.1"})

    assert response.status_code == 200
    assert response.json() == {
        "total": 4,
        "relatedIds": ["5", "6", "7"],
        "hasRelatedRuns": True,
        "showAllRunsOption": True,
    }
    assert mock_list.call_args.args[0] == "x"


def test_get_related_runs_degrades_on_service_error(client: TestClient):
    with patch(
        f"{ROUTES}.list_workflows",
        new_callable=AsyncMock,
        side_effect=WorkflowServiceAPIError("Failed to list workflows: 500"),
    ):
        response = client.get("/api/workflows/x/related-runs", params={"run": "7.1"})

    assert response.status_code == 200
    assert response.json() == {
        "total": None,
        "relatedIds": [],
        "hasRelatedRuns": False,
        "showAllRunsOption": False,
    }


def test_preview_restart_chain(client: TestClient, mock_list, mock_delete):
    response = client.post(
        "/api/workflows/5/delete/preview",
        json={"name": "x", "run": "7.1", "sizeHumanReadable": "12 MiB"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is False
    assert data["label"] == 'Delete workflow "x#7.1"'
    assert data["choice"] == "restart_chain"
    assert data["hasRelatedRuns"] is True
    assert data["relatedRunsOptionLabel"] == "Also delete related runs from the restart chain (3)"
    assert data["allRunsOptionLabel"] == "Delete all the runs of the workflow (4)"
    assert "(12 MiB)" in data["warning"]
    assert "restart chain" in data["warning"]
    mock_delete.assert_not_called()


def test_preview_confirmed_restart_chain(client: TestClient, mock_list):
    response = client.post(
        "/api/workflows/5/delete/preview",
        json={"name": "x", "run": "7.1", "confirmRelatedDeletion": True},
    )

    assert response.status_code == 200
    assert response.json()["enabled"] is True
    assert response.json()["label"] == 'Delete 3 runs in restart chain of "x#7"'


def test_delete_requires_confirmation(client: TestClient, mock_list, mock_delete):
    response = client.post("/api/workflows/5/delete", json={"name": "x", "run": "7.1"})

    assert response.status_code == 409
    assert "restart chain of 3 runs" in response.json()["detail"]
    mock_delete.assert_not_called()


def test_delete_restart_chain(client: TestClient, mock_list, mock_delete):
    response = client.post(
        "/api/workflows/5/delete",
        json={"name": "x", "run": "7.1", "confirmRelatedDeletion": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == 'Delete 3 runs in restart chain of "x#7"'
    assert data["choice"] == "restart_chain"
    assert sorted(data["deletedIds"]) == ["5", "6", "7"]
    assert data["failed"] == {}
    assert mock_delete.await_args_list[0] == call("5", all_runs=False, delete_workspace=True)
    assert mock_delete.await_count == 3


def test_delete_all_runs(client: TestClient, mock_list, mock_delete):
    response = client.post(
        "/api/workflows/5/delete",
        json={"name": "x", "run": "7.1", "allRuns": True},
    )

    assert response.status_code == 200
    assert response.json()["message"] == 'Delete 4 runs of "x"'
    mock_delete.assert_awaited_once_with("5", all_runs=True)


def test_delete_single_run_without_siblings(client: TestClient, mock_list, mock_delete):
    response = client.post("/api/workflows/8/delete", json={"name": "x", "run": "8"})

    assert response.status_code == 200
    assert response.json()["deletedIds"] == ["8"]
    mock_delete.assert_awaited_once_with("8", all_runs=False, delete_workspace=True)


@pytest.mark.parametrize(
    "error,status_code",
    [
        (WorkflowServiceAPIError("Failed to delete workflow 8: 500"), 502),
        (WorkflowServiceConfigurationError("Missing required environment variable"), 500),
    ],
)
def test_delete_service_errors(client: TestClient, mock_list, error, status_code):
    with patch(f"{ROUTES}.delete_workflow", new_callable=AsyncMock, side_effect=error):
        response = client.post("/api/workflows/8/delete", json={"name": "x", "run": "8"})

    assert response.status_code == status_code
    assert response.json()["detail"] == str(error)


def test_delete_rejects_blank_name(client: TestClient, mock_delete):
    response = client.post("/api/workflows/8/delete", json={"name": "  "})

    assert response.status_code == 422
    mock_delete.assert_not_called()


def test_delete_uses_listed_run_instead_of_request_run(client: TestClient, mock_list, mock_delete):
    """Run 8 is deleted on its own even when the request names the x.7 chain."""
    response = client.post(
        "/api/workflows/8/delete",
        json={"name": "x", "run": "7.1", "confirmRelatedDeletion": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["deletedIds"] == ["8"]
    assert data["choice"] == "single"
    assert data["message"] == 'Delete workflow "x#8"'
    mock_delete.assert_awaited_once_with("8", all_runs=False, delete_workspace=True)


def test_delete_unknown_run(client: TestClient, mock_list, mock_delete):
    response = client.post("/api/workflows/99/delete", json={"name": "x", "run": "7.1"})

    assert response.status_code == 404
    mock_delete.assert_not_called()


def test_delete_single_run_when_listing_fails(client: TestClient, mock_delete):
    with patch(
        f"{ROUTES}.list_workflows",
        new_callable=AsyncMock,
        side_effect=WorkflowServiceAPIError("Failed to list workflows: 500"),
    ):
        response = client.post("/api/workflows/5/delete", json={"name": "x", "run": "7.1"})

    assert response.status_code == 200
    assert response.json()["deletedIds"] == ["5"]
    mock_delete.assert_awaited_once_with("5", all_runs=False, delete_workspace=True)


def test_get_related_runs_degrades_on_malformed_payload(client: TestClient):
    with patch(
        f"{ROUTES}.list_workflows",
        new_callable=AsyncMock,
        side_effect=ValueError("Expecting value"),
    ):
        response = client.get("/api/workflows/x/related-runs", params={"run": "7.1"})

    assert response.status_code == 200
    assert response.json()["total"] is None
    assert response.json()["relatedIds"] == []
