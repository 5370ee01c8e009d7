from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union


class AssociationPolicy(str, Enum):
    MANDATORY = "MANDATORY"
    SUGGESTED = "SUGGESTED"
    OPTIONAL = "OPTIONAL"

    @classmethod
    def parse(cls, value: Union[str, "AssociationPolicy", None]) -> "AssociationPolicy":
        if isinstance(value, AssociationPolicy):
            return value
        text = str(value or "").strip().upper()
        try:
            return cls(text)
        except ValueError:
            allowed = ", ".join(item.value for item in cls)
            raise ValueError(f"unsupported association policy `{value}` (allowed: {allowed})") from None


class ExistenceOutcome(str, Enum):
    EXISTS = "EXISTS"
    DOES_NOT_EXIST = "DOES_NOT_EXIST"
    UNREACHABLE = "UNREACHABLE"


class Severity(str, Enum):
    ADVISORY = "ADVISORY"
    BLOCKING_CANDIDATE = "BLOCKING_CANDIDATE"


@dataclass(frozen=True)
class ValidationMessage:
    synopsis: str
    details: str
    severity: Severity = Severity.ADVISORY
    outcome: Optional[ExistenceOutcome] = None

    @property
    def text(self) -> str:
        return f"{self.synopsis}\n{self.details}"

    @property
    def blocking_candidate(self) -> bool:
        # Connectivity failures never escalate, whatever severity they were given.
        return (
            self.severity == Severity.BLOCKING_CANDIDATE
            and self.outcome != ExistenceOutcome.UNREACHABLE
        )

    def as_dict(self):
        return {
            "synopsis": self.synopsis,
            "details": self.details,
            "severity": self.severity.value,
            "outcome": self.outcome.value if self.outcome else None,
        }


@dataclass(frozen=True)
class ExistenceCheck:
    issue_id: str
    outcome: ExistenceOutcome
    message: Optional[ValidationMessage] = None


@dataclass(frozen=True)
class CommitEvent:
    """A commit as delivered by the receive pipeline."""

    repository: str
    ref_name: str
    commit_id: str
    message: str


@dataclass(frozen=True)
class ValidationContext:
    repository: str
    commit_id: str
    its_name: str


@dataclass(frozen=True)
class Accepted:
    messages: Tuple[ValidationMessage, ...] = ()


@dataclass(frozen=True)
class Rejected:
    messages: Tuple[ValidationMessage, ...]

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError("a rejected verdict must carry at least one message")

    @property
    def synopsis(self) -> str:
        for message in self.messages:
            if message.blocking_candidate:
                return message.synopsis
        return self.messages[0].synopsis


Verdict = Union[Accepted, Rejected]


class CommitValidationError(RuntimeError):
    """Raised when a commit must be rejected; carries every message of the call."""

    def __init__(self, synopsis: str, messages: Sequence[ValidationMessage]):
        super().__init__(synopsis)
        self.synopsis = synopsis
        self.messages: Tuple[ValidationMessage, ...] = tuple(messages)
