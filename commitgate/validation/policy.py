from __future__ import annotations

import logging
from typing import Callable, Dict, FrozenSet, List, Optional, Pattern, Sequence

from commitgate.validation.messages import missing_issue_message, non_existing_issues_message
from commitgate.validation.types import (
    Accepted,
    AssociationPolicy,
    ExistenceCheck,
    ExistenceOutcome,
    Rejected,
    ValidationContext,
    ValidationMessage,
    Verdict,
)

logger = logging.getLogger(__name__)

PolicyHandler = Callable[..., List[ValidationMessage]]


def _no_requirement(**_: object) -> List[ValidationMessage]:
    return []


def _require_association(
    *,
    policy: AssociationPolicy,
    context: ValidationContext,
    issue_ids: Sequence[str],
    checks: Sequence[ExistenceCheck],
    dummy_match: bool,
    issue_pattern: Optional[Pattern[str]],
) -> List[ValidationMessage]:
    messages: List[ValidationMessage] = []

    if issue_ids:
        non_existing: List[str] = []
        for check in checks:
            if check.outcome == ExistenceOutcome.UNREACHABLE and check.message is not None:
                messages.append(check.message)
            elif check.outcome == ExistenceOutcome.DOES_NOT_EXIST:
                non_existing.append(check.issue_id)
        if non_existing:
            messages.append(non_existing_issues_message(context, non_existing))
        return messages

    if dummy_match:
        return messages

    if issue_pattern is None:
        logger.warning(
            "ITS %s association policy is '%s' for repository %s but no issue pattern has been defined. "
            "Correct this by adding an issue_pattern with a regular expression matching issue ids, "
            "or set 'association: OPTIONAL'",
            context.its_name,
            policy.value,
            context.repository,
        )
    messages.append(missing_issue_message(context, issue_pattern))
    return messages


_POLICY_HANDLERS: Dict[AssociationPolicy, PolicyHandler] = {
    AssociationPolicy.MANDATORY: _require_association,
    AssociationPolicy.SUGGESTED: _require_association,
    AssociationPolicy.OPTIONAL: _no_requirement,
}

# Policies under which a blocking-candidate message rejects the commit.
_BLOCKING_POLICIES: FrozenSet[AssociationPolicy] = frozenset({AssociationPolicy.MANDATORY})


def evaluate_association(
    policy: AssociationPolicy,
    context: ValidationContext,
    issue_ids: Sequence[str],
    checks: Sequence[ExistenceCheck],
    *,
    dummy_match: bool = False,
    issue_pattern: Optional[Pattern[str]] = None,
) -> Verdict:
    """
    Turn extraction and existence results into a verdict.

    Under a blocking policy any blocking-candidate message rejects the commit,
    and the rejection carries every message of the call. Otherwise all
    messages are returned as advisory annotations.
    """
    policy = AssociationPolicy.parse(policy)
    handler = _POLICY_HANDLERS[policy]
    messages = tuple(
        handler(
            policy=policy,
            context=context,
            issue_ids=issue_ids,
            checks=checks,
            dummy_match=dummy_match,
            issue_pattern=issue_pattern,
        )
    )
    if policy in _BLOCKING_POLICIES and any(message.blocking_candidate for message in messages):
        return Rejected(messages=messages)
    return Accepted(messages=messages)
