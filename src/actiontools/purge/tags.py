import logging
from typing import FrozenSet

from actiontools.purge.err import ApiError, FetchError
from actiontools.purge.model import Repository, tag_commit_sha
from actiontools.purge.retention import RetentionPolicy

log = logging.getLogger(__name__)


async def build_exclusion_set(client, repo: Repository, policy: RetentionPolicy) -> FrozenSet[str]:
    """
    Collect commits pointed to by the repository tags. The set is a snapshot taken once per invocation.

    No request is made when the policy does not skip tagged commits.

    Raises:
        FetchError: If listing of the tags fails; proceeding without the complete set could remove release artifacts
    """
    if not policy.skip_tagged_commits:
        return frozenset()

    commits = set()
    try:
        async for tag in client.list_tags(repo):
            if sha := tag_commit_sha(tag):
                commits.add(sha)
    except ApiError as e:
        raise FetchError('tags', str(e)) from e

    log.info(f"[tag_exclusion_set] repo=[{repo}] commits=[{len(commits)}]")
    return frozenset(commits)
