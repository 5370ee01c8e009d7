from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from threading import Lock
from typing import Dict, Optional


@dataclass
class CommitCounters:
    """Outcome counters for commits received by one repository."""

    commits_validated: int = 0
    commits_accepted: int = 0
    commits_rejected: int = 0
    commits_skipped: int = 0
    its_unreachable: int = 0

    def add(self, other: "CommitCounters") -> None:
        for item in fields(self):
            setattr(self, item.name, getattr(self, item.name) + getattr(other, item.name))


COUNTER_NAMES = frozenset(item.name for item in fields(CommitCounters))

_lock = Lock()
_by_repository: Dict[str, CommitCounters] = {}


def record(repository: str, counter: str, count: int = 1) -> None:
    if counter not in COUNTER_NAMES:
        raise ValueError(f"unknown commit counter `{counter}`")
    with _lock:
        entry = _by_repository.setdefault(repository, CommitCounters())
        setattr(entry, counter, getattr(entry, counter) + int(count))


def counters(repository: Optional[str] = None) -> Dict[str, int]:
    """Counters for one repository, or summed over every repository."""
    with _lock:
        if repository is not None:
            return asdict(_by_repository.get(repository, CommitCounters()))
        total = CommitCounters()
        for repository_counters in _by_repository.values():
            total.add(repository_counters)
        return asdict(total)


def reset() -> None:
    with _lock:
        _by_repository.clear()
