from typing import List, Tuple, AbstractSet

from actiontools.purge.err import ApiError, FetchError
from actiontools.purge.model import Artifact, Decision, Repository, WorkflowRun
from actiontools.purge.retention import RetentionPolicy


async def evaluate(client,
                   repo: Repository,
                   run: WorkflowRun,
                   policy: RetentionPolicy,
                   excluded: AbstractSet[str] = frozenset()) -> List[Tuple[Artifact, Decision]]:
    """
    List all artifacts of the run and decide which of them should be deleted.
    The result keeps the order in which the artifacts were retrieved.

    Raises:
        FetchError: If listing of the run's artifacts fails
    """
    decisions = []
    try:
        async for raw_artifact in client.list_run_artifacts(repo, run.id):
            artifact = Artifact.deserialize(raw_artifact)
            decisions.append((artifact, policy.decide(artifact, run, excluded)))
    except ApiError as e:
        raise FetchError('artifacts', str(e), run_id=run.id) from e
    except (KeyError, TypeError, ValueError) as e:
        raise FetchError('artifacts', f"Malformed artifact: {e!r}", run_id=run.id) from e

    return decisions
