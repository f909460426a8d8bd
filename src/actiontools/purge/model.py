"""
Platform entities consumed by the purge (workflow runs, artifacts, tags) and the records produced by it.

Entities are deserialized from the JSON objects returned by the platform REST API. Only the fields the retention
decision needs are mandatory; a workflow run without an ID is still deserialized so the enumeration can skip it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Optional, Dict, Any, List

from actiontools.purge import util


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str

    @classmethod
    def parse(cls, full_name: str) -> 'Repository':
        """
        Args:
            full_name: Repository identifier in the `owner/name` format

        Raises:
            ValueError: If the identifier is not in the expected format
        """
        owner, sep, name = (full_name or '').strip().partition('/')
        if not sep or not owner or not name or '/' in name:
            raise ValueError(f"Invalid repository `{full_name}`, expected format: owner/name")
        return cls(owner, name)

    def __str__(self):
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class WorkflowRun:
    id: Any
    head_sha: Optional[str] = None

    @classmethod
    def deserialize(cls, as_dict: Dict[str, Any]) -> 'WorkflowRun':
        return cls(as_dict.get('id'), as_dict.get('head_sha'))

    @property
    def valid(self) -> bool:
        return bool(self.id)


@dataclass(frozen=True)
class Artifact:
    id: Any
    created_at: datetime
    name: Optional[str] = None
    size_in_bytes: Optional[int] = None
    expired: bool = False

    @classmethod
    def deserialize(cls, as_dict: Dict[str, Any]) -> 'Artifact':
        """
        Raises:
            ValueError: If the ID or the creation time is missing or the creation time is not a valid timestamp
        """
        created_at = util.parse_datetime(as_dict.get('created_at'))
        if created_at is None or as_dict.get('id') is None:
            raise ValueError(f"Artifact without ID or creation time: {as_dict}")
        return cls(
            id=as_dict['id'],
            created_at=created_at,
            name=as_dict.get('name'),
            size_in_bytes=as_dict.get('size_in_bytes'),
            expired=as_dict.get('expired', False),
        )


def tag_commit_sha(as_dict: Dict[str, Any]) -> Optional[str]:
    """Commit pointed to by a tag as listed by the `tags` endpoint"""
    commit = as_dict.get('commit') or {}
    return commit.get('sha')


class Decision(Enum):
    DELETE = auto()
    KEEP = auto()


class Outcome(Enum):
    DELETED = auto()
    SIMULATED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class DeletionResult:
    artifact_id: Any
    run_id: Any
    outcome: Outcome
    reason: Optional[str] = None

    @classmethod
    def deleted(cls, artifact_id, run_id):
        return cls(artifact_id, run_id, Outcome.DELETED)

    @classmethod
    def simulated(cls, artifact_id, run_id):
        return cls(artifact_id, run_id, Outcome.SIMULATED)

    @classmethod
    def failed(cls, artifact_id, run_id, reason: str):
        return cls(artifact_id, run_id, Outcome.FAILED, reason)

    def serialize(self) -> Dict[str, Any]:
        data = {"artifact_id": self.artifact_id, "run_id": self.run_id, "outcome": self.outcome.name}
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass
class PurgeReport:
    """Aggregated result of one purge invocation, assembled after all deletions resolved"""
    results: List[DeletionResult] = field(default_factory=list)
    skipped_runs: List[Any] = field(default_factory=list)
    incomplete_runs: Dict[Any, str] = field(default_factory=dict)
    evaluated_runs: int = 0

    def _with_outcome(self, outcome):
        return [r for r in self.results if r.outcome == outcome]

    @property
    def deleted(self) -> List[DeletionResult]:
        return self._with_outcome(Outcome.DELETED)

    @property
    def simulated(self) -> List[DeletionResult]:
        return self._with_outcome(Outcome.SIMULATED)

    @property
    def failed(self) -> List[DeletionResult]:
        return self._with_outcome(Outcome.FAILED)

    @property
    def complete(self) -> bool:
        return not self.failed and not self.incomplete_runs

    def serialize(self) -> Dict[str, Any]:
        return {
            "evaluated_runs": self.evaluated_runs,
            "skipped_runs": len(self.skipped_runs),
            "incomplete_runs": len(self.incomplete_runs),
            "deleted": len(self.deleted),
            "simulated": len(self.simulated),
            "failed": len(self.failed),
        }
