"""Pydantic models shared across workflow deletion endpoints."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RelatedRunsResponse(BaseModel):
    total: Optional[int] = None
    relatedIds: List[str] = Field(default_factory=list)
    hasRelatedRuns: bool
    showAllRunsOption: bool


class DeleteWorkflowRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Workflow name without the run number")
    run: Optional[Union[str, int]] = Field(
        default=None, description="Run number of the targeted run, e.g. '7.1'"
    )
    sizeHumanReadable: Optional[str] = Field(
        default=None, description="Human-readable workspace size shown in the warning"
    )
    allRuns: bool = Field(default=False, description="Delete every run of the workflow")
    confirmRelatedDeletion: bool = Field(
        default=False, description="Also mark runs of the same restart chain as deleted"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name is required")
        return value.strip()


class DeletePreviewResponse(BaseModel):
    runId: str
    label: str
    enabled: bool
    choice: str
    warningTitle: str
    warning: str
    hasRelatedRuns: bool
    relatedIds: List[str] = Field(default_factory=list)
    relatedRunsOptionLabel: Optional[str] = None
    showAllRunsOption: bool
    allRunsOptionLabel: Optional[str] = None
    total: Optional[int] = None


class DeleteWorkflowResponse(BaseModel):
    message: str
    runId: str
    choice: str
    deletedIds: List[str]
    failed: Dict[str, str] = Field(default_factory=dict)
