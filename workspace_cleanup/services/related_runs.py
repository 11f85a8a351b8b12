"""Tracking of runs that share a workspace with a selected workflow run."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

import httpx

from .workflow_config import NON_DELETED_STATUSES, get_related_runs_page_size
from .workflow_errors import WorkflowServiceError
from .workflow_models import WorkflowListPage, WorkflowRef
from .workflows import list_workflows as list_service_workflows
from .workspace_groups import build_qualified_name, resolve_workspace_group

logger = logging.getLogger(__name__)

ListWorkflows = Callable[..., Awaitable[WorkflowListPage]]


@dataclass(frozen=True)
class RelatedRunsState:
    total: int | None = None
    related_ids: tuple[str, ...] = field(default_factory=tuple)
    loading: bool = False


@dataclass(frozen=True)
class RelatedRunsQuery:
    """A fetch issued by one activation of the tracker."""

    generation: int
    name: str
    selected_key: str | None


def classify_related_ids(page: WorkflowListPage, selected_key: str | None) -> tuple[str, ...]:
    """Return ids of the runs in ``page`` belonging to the ``selected_key`` workspace group."""
    if not selected_key:
        return ()
    return tuple(
        item.id
        for item in page.items
        if item.id and resolve_workspace_group(item.qualified_name) == selected_key
    )


class RelatedRunsTracker:
    """State machine keeping RelatedRunsState in sync with the selected run.

    Each call to :meth:`activate` starts a new generation. Results and failures
    are applied only when they belong to the current generation, so a fetch
    superseded by a later activation never touches the state.
    """

    def __init__(
        self,
        list_workflows: ListWorkflows | None = None,
        statuses: Iterable[str] = NON_DELETED_STATUSES,
        page_size: int | None = None,
    ) -> None:
        self._list_workflows = list_workflows
        self._statuses = tuple(statuses)
        self._page_size = page_size
        self._generation = 0
        self.state = RelatedRunsState()
        self.runs: tuple[WorkflowRef, ...] = ()

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, query: RelatedRunsQuery) -> bool:
        return query.generation == self._generation

    def activate(
        self, active: bool, name: str | None, run: str | int | None = None
    ) -> RelatedRunsQuery | None:
        """Start tracking ``name``/``run``; returns the query to run, or None when idle."""
        self._generation += 1
        self.runs = ()
        if not active or not name:
            self.state = RelatedRunsState()
            return None

        selected_key = resolve_workspace_group(build_qualified_name(name, run))
        self.state = RelatedRunsState(loading=True)
        return RelatedRunsQuery(
            generation=self._generation,
            name=name,
            selected_key=selected_key,
        )

    def deactivate(self) -> None:
        self.activate(False, None)

    def apply_page(self, query: RelatedRunsQuery, page: WorkflowListPage) -> bool:
        if not self.is_current(query):
            logger.debug(
                "Discarding stale related runs result",
                extra={"workflowName": query.name, "generation": query.generation},
            )
            return False
        self.runs = tuple(page.items)
        self.state = RelatedRunsState(
            total=page.total,
            related_ids=classify_related_ids(page, query.selected_key),
            loading=False,
        )
        return True

    def apply_failure(self, query: RelatedRunsQuery, exc: BaseException) -> bool:
        if not self.is_current(query):
            return False
        logger.error(
            f"Error while fetching runs for workflow {query.name}",
            extra={"workflowName": query.name, "error": str(exc)},
        )
        self.state = RelatedRunsState()
        return True

    async def fetch(self, query: RelatedRunsQuery) -> RelatedRunsState:
        """Run ``query`` against the workflow service and apply its outcome."""
        list_workflows = self._list_workflows or list_service_workflows
        try:
            page = await list_workflows(
                query.name,
                status=self._statuses,
                size=self._page_size or get_related_runs_page_size(),
                page=1,
            )
        except (WorkflowServiceError, httpx.HTTPError, ValueError) as exc:
            self.apply_failure(query, exc)
        else:
            self.apply_page(query, page)
        return self.state

    async def refresh(
        self, active: bool, name: str | None, run: str | int | None = None
    ) -> RelatedRunsState:
        query = self.activate(active, name, run)
        if query is None:
            return self.state
        return await self.fetch(query)
