"""Related-run lookup and workspace-aware deletion endpoints."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.workflows import (
    DeletePreviewResponse,
    DeleteWorkflowRequest,
    DeleteWorkflowResponse,
    RelatedRunsResponse,
)
from ...services.deletion import WARNING_TITLE, DeletionOrchestrator
from ...services.related_runs import (
    RelatedRunsState,
    RelatedRunsTracker,
    classify_related_ids,
)
from ...services.workflow_errors import (
    WorkflowServiceAPIError,
    WorkflowServiceConfigurationError,
)
from ...services.workflow_models import WorkflowListPage, WorkflowRef
from ...services.workflows import delete_workflow, list_workflows
from ...services.workspace_groups import resolve_workspace_group

router = APIRouter()


async def load_related_runs(name: str, run: str | int | None) -> RelatedRunsTracker:
    tracker = RelatedRunsTracker(list_workflows=list_workflows)
    await tracker.refresh(True, name, run)
    return tracker


def resolve_target(
    workflow_id: str, payload: DeleteWorkflowRequest, tracker: RelatedRunsTracker
) -> tuple[WorkflowRef, RelatedRunsState]:
    """Return the targeted run as listed by the service and the runs sharing its workspace."""
    related = tracker.state
    if related.total is None:
        # listing failed: delete the run on its own, without related-run knowledge
        return (
            WorkflowRef(
                id=workflow_id,
                name=payload.name,
                run=payload.run,
                size_human_readable=payload.sizeHumanReadable,
            ),
            related,
        )

    target = next((item for item in tracker.runs if item.id == workflow_id), None)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Run {workflow_id} is not a non-deleted run of workflow {payload.name}",
        )
    if target.size_human_readable is None and payload.sizeHumanReadable:
        target = replace(target, size_human_readable=payload.sizeHumanReadable)

    page = WorkflowListPage(items=list(tracker.runs), total=related.total)
    related_ids = classify_related_ids(page, resolve_workspace_group(target.qualified_name))
    return target, replace(related, related_ids=related_ids)


async def build_orchestrator(
    workflow_id: str, payload: DeleteWorkflowRequest
) -> DeletionOrchestrator:
    tracker = await load_related_runs(payload.name, payload.run)
    workflow, related = resolve_target(workflow_id, payload, tracker)
    orchestrator = DeletionOrchestrator(
        workflow=workflow,
        related=related,
        delete_workflow=delete_workflow,
    )
    orchestrator.set_confirm_related_deletion(payload.confirmRelatedDeletion)
    orchestrator.toggle_all_runs(payload.allRuns)
    return orchestrator


@router.get("/{name}/related-runs", response_model=RelatedRunsResponse)
async def get_related_runs(
    name: str,
    run: str | None = Query(None, description="Run number of the selected run"),
) -> RelatedRunsResponse:
    """Return the non-deleted runs sharing a workspace with the selected run."""
    tracker = await load_related_runs(name, run)
    related = tracker.state
    orchestrator = DeletionOrchestrator(related=related)
    return RelatedRunsResponse(
        total=related.total,
        relatedIds=list(related.related_ids),
        hasRelatedRuns=orchestrator.has_related_runs,
        showAllRunsOption=orchestrator.show_all_runs_option,
    )


@router.post("/{workflow_id}/delete/preview", response_model=DeletePreviewResponse)
async def preview_delete(workflow_id: str, payload: DeleteWorkflowRequest) -> DeletePreviewResponse:
    """Describe what deleting the run would do, without issuing any command."""
    orchestrator = await build_orchestrator(workflow_id, payload)
    related = orchestrator.related
    return DeletePreviewResponse(
        runId=workflow_id,
        label=orchestrator.delete_label,
        enabled=orchestrator.can_delete,
        choice=orchestrator.choice.value,
        warningTitle=WARNING_TITLE,
        warning=orchestrator.warning_message,
        hasRelatedRuns=orchestrator.has_related_runs,
        relatedIds=list(related.related_ids),
        relatedRunsOptionLabel=orchestrator.related_runs_option_label,
        showAllRunsOption=orchestrator.show_all_runs_option,
        allRunsOptionLabel=orchestrator.all_runs_option_label,
        total=related.total,
    )


@router.post("/{workflow_id}/delete", response_model=DeleteWorkflowResponse)
async def delete_workflow_run(
    workflow_id: str, payload: DeleteWorkflowRequest
) -> DeleteWorkflowResponse:
    """Delete a run. Runs of the same restart chain are marked deleted without removing the workspace again."""
    orchestrator = await build_orchestrator(workflow_id, payload)
    if not orchestrator.can_delete:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Run is part of a restart chain of {orchestrator.related_count} runs; "
                "confirm related deletion or delete all runs"
            ),
        )

    label = orchestrator.delete_label
    try:
        outcome = await orchestrator.delete()
    except WorkflowServiceConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
    except WorkflowServiceAPIError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    if outcome is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nothing to delete")

    return DeleteWorkflowResponse(
        message=label,
        runId=workflow_id,
        choice=outcome.plan.choice.value,
        deletedIds=outcome.deleted_ids,
        failed=outcome.failed,
    )
