"""Deletion of workflow runs that may share a workspace with restarted runs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from .related_runs import RelatedRunsState
from .workflow_models import WorkflowRef
from .workflows import delete_workflow as delete_service_workflow

logger = logging.getLogger(__name__)

DeleteWorkflow = Callable[..., Awaitable[object]]

WARNING_TITLE = "Deletion of workspace and interactive sessions!"
RESTART_CHAIN_WARNING = (
    "This workflow run is part of a restart chain. Restarted runs share the same "
    "workspace. Deleting this run would remove the shared workspace and leave the "
    "other runs in an inconsistent state. If you proceed, the related runs will "
    "also be marked as deleted."
)


class DeletionChoice(str, Enum):
    SINGLE = "single"
    RESTART_CHAIN = "restart_chain"
    ALL_RUNS = "all_runs"


@dataclass(frozen=True)
class DeleteCommand:
    workflow_id: str
    all_runs: bool
    delete_workspace: bool | None = None

    def options(self) -> dict[str, bool]:
        options = {"all_runs": self.all_runs}
        if self.delete_workspace is not None:
            options["delete_workspace"] = self.delete_workspace
        return options


@dataclass(frozen=True)
class DeletionPlan:
    """Commands to issue: ``primary`` first, then ``siblings`` concurrently."""

    choice: DeletionChoice
    primary: DeleteCommand
    siblings: tuple[DeleteCommand, ...] = ()


@dataclass
class DeletionOutcome:
    plan: DeletionPlan
    deleted_ids: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    closed: bool = False


def build_delete_warning(size_human_readable: str | None, has_related_runs: bool) -> str:
    size = f" ({size_human_readable})" if size_human_readable else ""
    message = (
        f"This action will delete also the workflow's workspace{size} and any open "
        "interactive session attached to it. Please make sure to download all the "
        "files you want to keep before proceeding."
    )
    if has_related_runs:
        message = f"{message}\n\n{RESTART_CHAIN_WARNING}"
    return message


def build_related_runs_option_label(related_count: int) -> str:
    return f"Also delete related runs from the restart chain ({related_count})"


def build_all_runs_option_label(total: int | None) -> str:
    label = "Delete all the runs of the workflow"
    return f"{label} ({total})" if total else label


class DeletionOrchestrator:
    """Decide and issue the delete commands for one deletion interaction.

    The orchestrator owns the user's choices (``all_runs`` and
    ``confirm_related_deletion``) for the targeted run and derives from them,
    together with the related runs known for that run, the confirmation
    label, whether deleting is allowed and the command plan.

    When the run shares its workspace with other runs of a restart chain, the
    targeted run's command removes the workspace and the siblings are only
    marked as deleted, so the shared workspace is never removed twice.
    """

    def __init__(
        self,
        workflow: WorkflowRef | None = None,
        related: RelatedRunsState | None = None,
        delete_workflow: DeleteWorkflow | None = None,
        on_close: Callable[[], object] | None = None,
    ) -> None:
        self.workflow = workflow
        self.related = related or RelatedRunsState()
        self._delete_workflow = delete_workflow
        self._on_close = on_close
        self.all_runs = False
        self.confirm_related_deletion = False
        self.closed = False

    def reset(self) -> None:
        self.all_runs = False
        self.confirm_related_deletion = False

    def open(self, workflow: WorkflowRef | None) -> None:
        self.workflow = workflow
        self.closed = False
        self.reset()

    def retarget(self, workflow: WorkflowRef | None) -> None:
        current_id = self.workflow.id if self.workflow else None
        new_id = workflow.id if workflow else None
        self.workflow = workflow
        if current_id != new_id:
            self.reset()

    def update_related(self, related: RelatedRunsState) -> None:
        self.related = related

    def toggle_all_runs(self, checked: bool) -> None:
        self.all_runs = bool(checked)
        # deleting all runs deletes every workspace, restart chains included
        if self.all_runs:
            self.confirm_related_deletion = True

    def set_confirm_related_deletion(self, checked: bool) -> None:
        # locked while all runs are selected
        if self.all_runs:
            return
        self.confirm_related_deletion = bool(checked)

    @property
    def related_count(self) -> int:
        return len(self.related.related_ids)

    @property
    def has_related_runs(self) -> bool:
        return self.related_count > 1

    @property
    def show_all_runs_option(self) -> bool:
        return self.related.total is not None and self.related.total > 1

    @property
    def can_delete(self) -> bool:
        return not self.has_related_runs or self.all_runs or self.confirm_related_deletion

    @property
    def choice(self) -> DeletionChoice:
        if self.all_runs:
            return DeletionChoice.ALL_RUNS
        if self.has_related_runs:
            return DeletionChoice.RESTART_CHAIN
        return DeletionChoice.SINGLE

    @property
    def delete_label(self) -> str:
        workflow = self.workflow
        if workflow is None or not workflow.name:
            return "Delete"
        name = workflow.name
        run = workflow.run
        if self.all_runs:
            total = self.related.total if self.related.total is not None else "all"
            return f'Delete {total} runs of "{name}"'
        if self.has_related_runs and self.confirm_related_deletion:
            base_run = str(run if run is not None else "").split(".")[0]
            run_label = f"{name}#{base_run}" if base_run else name
            return f'Delete {self.related_count or "all"} runs in restart chain of "{run_label}"'
        if run is not None and str(run) != "":
            return f'Delete workflow "{name}#{run}"'
        return f'Delete workflow "{name}"'

    @property
    def warning_message(self) -> str:
        size = self.workflow.size_human_readable if self.workflow else None
        return build_delete_warning(size, self.has_related_runs)

    @property
    def related_runs_option_label(self) -> str | None:
        if not self.has_related_runs:
            return None
        return build_related_runs_option_label(self.related_count)

    @property
    def all_runs_option_label(self) -> str | None:
        if not self.show_all_runs_option:
            return None
        return build_all_runs_option_label(self.related.total)

    def plan(self) -> DeletionPlan | None:
        """Return the commands for the current choice, or None when nothing may be issued."""
        if self.workflow is None or not self.workflow.id:
            return None
        workflow_id = self.workflow.id
        choice = self.choice

        if choice is DeletionChoice.ALL_RUNS:
            return DeletionPlan(choice, DeleteCommand(workflow_id, all_runs=True))

        primary = DeleteCommand(workflow_id, all_runs=False, delete_workspace=True)
        if choice is DeletionChoice.RESTART_CHAIN:
            if not self.confirm_related_deletion:
                return None
            if workflow_id not in self.related.related_ids:
                logger.warning(
                    "Target run is not part of the restart chain",
                    extra={"workflowId": workflow_id, "relatedIds": list(self.related.related_ids)},
                )
                return None
            siblings = tuple(
                DeleteCommand(other_id, all_runs=False, delete_workspace=False)
                for other_id in self.related.related_ids
                if other_id != workflow_id
            )
            return DeletionPlan(choice, primary, siblings)

        return DeletionPlan(choice, primary)

    async def _issue(self, delete_workflow: DeleteWorkflow, command: DeleteCommand) -> None:
        logger.info(
            "Issuing delete command",
            extra={"workflowId": command.workflow_id, **command.options()},
        )
        await delete_workflow(command.workflow_id, **command.options())

    async def delete(self) -> DeletionOutcome | None:
        """Issue the planned commands and close the interaction once they settled.

        A failure of the primary command propagates; sibling commands are then
        never issued and the interaction stays open. Sibling failures are
        collected in the outcome.
        """
        plan = self.plan()
        if plan is None:
            return None
        delete_workflow = self._delete_workflow or delete_service_workflow

        await self._issue(delete_workflow, plan.primary)
        outcome = DeletionOutcome(plan=plan, deleted_ids=[plan.primary.workflow_id])

        if plan.siblings:
            results = await asyncio.gather(
                *(self._issue(delete_workflow, command) for command in plan.siblings),
                return_exceptions=True,
            )
            for command, result in zip(plan.siblings, results):
                if isinstance(result, Exception):
                    logger.error(
                        "Failed to mark related run as deleted",
                        extra={"workflowId": command.workflow_id, "error": str(result)},
                    )
                    outcome.failed[command.workflow_id] = str(result)
                elif isinstance(result, BaseException):
                    raise result
                else:
                    outcome.deleted_ids.append(command.workflow_id)

        self.close()
        outcome.closed = True
        return outcome

    def close(self) -> None:
        self.closed = True
        if self._on_close is not None:
            self._on_close()

    def cancel(self) -> None:
        """Discard the local choices without issuing any command."""
        self.reset()
        self.close()
