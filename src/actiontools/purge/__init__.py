"""
Retention of GitHub Actions artifacts: removes artifacts of workflow runs older than the configured age,
optionally keeping artifacts of runs for tagged commits (releases).
"""

__version__ = "0.1.0"

import asyncio
import logging

from actiontools.purge.client import GitHubClient
from actiontools.purge.config import PurgeConfig, load_config
from actiontools.purge.err import PurgeException, ConfigError, FetchError, DeletionError, ApiError
from actiontools.purge.model import PurgeReport, Outcome
from actiontools.purge.orchestrator import DeletionOrchestrator
from actiontools.purge.retention import RetentionPolicy
from actiontools.purge.runs import enumerate_runs
from actiontools.purge.tags import build_exclusion_set

log = logging.getLogger(__name__)


async def purge(config: PurgeConfig, client=None, *, now=None) -> PurgeReport:
    """
    Execute one retention pass over the repository configured in `config`.

    Args:
        config: Validated configuration
        client: Open platform client; a new one is created (and closed) from the configuration if not provided
        now: Reference time for the cutoff computation, defaults to the current time

    Returns:
        Report with the outcome of every issued deletion

    Raises:
        FetchError: If listing of the tags or of the workflow runs fails
    """
    policy = RetentionPolicy.from_config(config, now)

    if client is None:
        async with GitHubClient.from_config(config) as own_client:
            return await _purge(config, policy, own_client)

    return await _purge(config, policy, client)


async def _purge(config, policy, client) -> PurgeReport:
    repo = config.repo
    excluded = await build_exclusion_set(client, repo, policy)

    orchestrator = DeletionOrchestrator(
        client, repo, policy, excluded, max_concurrency=config.max_concurrent_deletions)
    skipped = []
    report = await orchestrator.purge(enumerate_runs(client, repo, policy, excluded, on_skip=skipped.append))
    report.skipped_runs.extend(run.id for run in skipped)

    for result in report.results:
        log.debug(f"[deletion_result] {result.serialize()}")

    summary = " ".join(f"{k}=[{v}]" for k, v in report.serialize().items())
    log.info(f"[purge_completed] repo=[{repo}] {summary}")
    return report


def run(config: PurgeConfig, client=None) -> PurgeReport:
    return asyncio.run(purge(config, client))
