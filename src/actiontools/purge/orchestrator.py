"""
Fan-out/fan-in of artifact deletions.

Every admitted workflow run gets its own task which lists the run's artifacts and issues one deletion per artifact
marked for deletion. All deletions are independent: a failure is recorded in the result and never interrupts
the sibling deletions. :meth:`DeletionOrchestrator.purge` returns only after every issued deletion resolved.
"""

import asyncio
import contextlib
import logging
from typing import AsyncIterable, List, AbstractSet

from actiontools.purge.err import ApiError, DeletionError, FetchError
from actiontools.purge.evaluate import evaluate
from actiontools.purge.model import Artifact, Decision, DeletionResult, PurgeReport, Repository, WorkflowRun
from actiontools.purge.retention import RetentionPolicy

log = logging.getLogger(__name__)


class DeletionOrchestrator:

    def __init__(self, client, repo: Repository, policy: RetentionPolicy,
                 excluded: AbstractSet[str] = frozenset(), *, max_concurrency: int = 10):
        """
        Args:
            client: Shared platform client
            repo: Repository owning the runs
            policy: Retention policy of the invocation
            excluded: Snapshot of tagged commits
            max_concurrency: Maximum number of deletion requests in flight, 0 for no limit
        """
        if max_concurrency < 0:
            raise ValueError(f"max_concurrency must not be negative: {max_concurrency}")
        self._client = client
        self._repo = repo
        self._policy = policy
        self._excluded = excluded
        self._limiter = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def purge(self, runs: AsyncIterable[WorkflowRun]) -> PurgeReport:
        """
        Process all runs concurrently and wait for all deletions to complete.

        Raises:
            FetchError: If the run enumeration fails; already started runs are processed to completion first
        """
        report = PurgeReport()
        started = []
        tasks = []
        try:
            async for run in runs:
                started.append(run)
                tasks.append(asyncio.create_task(self._process_run(run, report)))
        finally:
            run_results = await asyncio.gather(*tasks, return_exceptions=True)
            for run, results in zip(started, run_results):
                if isinstance(results, BaseException):
                    log.error(f"[run_processing_failed] run=[{run.id}] reason=[{results!r}]", exc_info=results)
                    report.incomplete_runs[run.id] = f"{type(results).__name__}: {results}"
                else:
                    report.results.extend(results)
            report.evaluated_runs = len(tasks)

        return report

    async def _process_run(self, run: WorkflowRun, report: PurgeReport) -> List[DeletionResult]:
        try:
            decisions = await evaluate(self._client, self._repo, run, self._policy, self._excluded)
        except FetchError as e:
            log.warning(f"[run_artifacts_fetch_failed] run=[{run.id}] reason=[{e}]", exc_info=e)
            report.incomplete_runs[run.id] = str(e)
            return []

        deletions = [self._delete(artifact, run) for artifact, decision in decisions if decision == Decision.DELETE]
        return list(await asyncio.gather(*deletions))

    async def _delete(self, artifact: Artifact, run: WorkflowRun) -> DeletionResult:
        if self._policy.simulate_only:
            log.info(f"[artifact_simulated] artifact=[{artifact.id}] run=[{run.id}] created=[{artifact.created_at}]"
                     " would remove, simulate-only mode prevents deletion")
            return DeletionResult.simulated(artifact.id, run.id)

        try:
            async with self._limiter or contextlib.nullcontext():
                await self._issue_delete(artifact)
        except DeletionError as e:
            log.warning(f"[artifact_delete_failed] artifact=[{artifact.id}] run=[{run.id}] reason=[{e.__cause__}]")
            return DeletionResult.failed(artifact.id, run.id, str(e))

        log.info(f"[artifact_deleted] artifact=[{artifact.id}] run=[{run.id}]")
        return DeletionResult.deleted(artifact.id, run.id)

    async def _issue_delete(self, artifact: Artifact):
        try:
            await self._client.delete_artifact(self._repo, artifact.id)
        except ApiError as e:
            raise DeletionError(artifact.id, str(e)) from e
