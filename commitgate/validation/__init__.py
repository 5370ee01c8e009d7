from commitgate.validation.classifier import classify_issue, classify_issues
from commitgate.validation.extractor import extract_issue_ids
from commitgate.validation.policy import evaluate_association
from commitgate.validation.types import (
    Accepted,
    AssociationPolicy,
    CommitEvent,
    CommitValidationError,
    ExistenceCheck,
    ExistenceOutcome,
    Rejected,
    Severity,
    ValidationContext,
    ValidationMessage,
    Verdict,
)

__all__ = [
    "Accepted",
    "AssociationPolicy",
    "CommitEvent",
    "CommitValidationError",
    "ExistenceCheck",
    "ExistenceOutcome",
    "Rejected",
    "Severity",
    "ValidationContext",
    "ValidationMessage",
    "Verdict",
    "classify_issue",
    "classify_issues",
    "evaluate_association",
    "extract_issue_ids",
]
