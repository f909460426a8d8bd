import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, AbstractSet

from actiontools.purge import util
from actiontools.purge.model import Artifact, WorkflowRun, Decision

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Retention rules of a single purge invocation.

    Attributes:
        cutoff: Artifacts created before this instant (exclusive) are eligible for deletion
        skip_tagged_commits: Keep artifacts of runs whose head commit is pointed to by a tag
        simulate_only: Decisions are made and logged but no artifact is deleted
    """
    cutoff: datetime
    skip_tagged_commits: bool = False
    simulate_only: bool = False

    @classmethod
    def from_config(cls, config, now: Optional[datetime] = None) -> 'RetentionPolicy':
        now = util.to_utc(now) if now else util.utc_now()
        cutoff = now - config.age_delta
        log.info(f"[retention_cutoff] age=[{config.age}] created_before=[{util.format_dt_iso(cutoff)}]")
        return cls(cutoff, config.skip_tags, config.simulate)

    def is_expired(self, artifact: Artifact) -> bool:
        return artifact.created_at < self.cutoff

    def is_protected(self, run: WorkflowRun, excluded: AbstractSet[str]) -> bool:
        return self.skip_tagged_commits and run.head_sha in excluded

    def is_eligible(self, artifact: Artifact, run: WorkflowRun, excluded: AbstractSet[str] = frozenset()) -> bool:
        return self.is_expired(artifact) and not self.is_protected(run, excluded)

    def decide(self, artifact: Artifact, run: WorkflowRun, excluded: AbstractSet[str] = frozenset()) -> Decision:
        return Decision.DELETE if self.is_eligible(artifact, run, excluded) else Decision.KEEP
