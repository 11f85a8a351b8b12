"""Shared test fixtures and configuration."""
from __future__ import annotations

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000,http://localhost:4200"
os.environ["REANA_SERVER_URL"] = "https://reana.test"
os.environ["REANA_ACCESS_TOKEN"] = "test_token_12345"

from workspace_cleanup.main import create_app
from workspace_cleanup.services.workflow_models import WorkflowListPage, WorkflowRef


@pytest.fixture
def app():
    """Create a FastAPI app instance for testing."""
    return create_app()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_list_payload():
    """Sample REANA workflow list response with a restart chain."""
    return {
        "items": [
            {
                "id": "wf-1",
                "name": "helloworld-demo.7",
                "status": "finished",
                "size": {"raw": 2048, "human_readable": "2 KiB"},
            },
            {
                "id": "wf-2",
                "name": "helloworld-demo.7.1",
                "status": "failed",
                "size": {"raw": 2048, "human_readable": "2 KiB"},
            },
            {
                "id": "wf-3",
                "name": "helloworld-demo.8",
                "status": "running",
                "size": {"raw": -1, "human_readable": ""},
            },
        ],
        "total": 3,
    }


@pytest.fixture
def restart_chain_page():
    """Parsed page where runs 5, 6 and 7 share the workspace of run x.7."""
    return WorkflowListPage(
        items=[
            WorkflowRef(id="5", name="x", run="7.1"),
            WorkflowRef(id="6", name="x", run="7"),
            WorkflowRef(id="7", name="x", run="7.2"),
            WorkflowRef(id="8", name="x", run="8"),
        ],
        total=4,
    )
