import logging
from typing import AsyncIterator, AbstractSet, Callable, Optional

from actiontools.purge.err import ApiError, FetchError
from actiontools.purge.model import Repository, WorkflowRun
from actiontools.purge.retention import RetentionPolicy

log = logging.getLogger(__name__)


async def enumerate_runs(client,
                         repo: Repository,
                         policy: RetentionPolicy,
                         excluded: AbstractSet[str] = frozenset(),
                         *,
                         on_skip: Optional[Callable[[WorkflowRun], None]] = None) -> AsyncIterator[WorkflowRun]:
    """
    Yield workflow runs of the repository which are subject to artifact evaluation.

    Runs without an ID are dropped silently. Runs for tagged commits are dropped when the policy says so
    and reported to the `on_skip` callback.

    Raises:
        FetchError: If listing of the workflow runs fails
    """
    try:
        async for raw_run in client.list_workflow_runs(repo):
            run = WorkflowRun.deserialize(raw_run)
            if not run.valid:
                continue

            if policy.is_protected(run, excluded):
                log.info(f"[tagged_run_skipped] run=[{run.id}] commit=[{run.head_sha}]")
                if on_skip:
                    on_skip(run)
                continue

            yield run
    except ApiError as e:
        raise FetchError('workflow_runs', str(e)) from e
