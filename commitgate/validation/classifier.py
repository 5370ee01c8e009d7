from __future__ import annotations

import logging
from typing import List, Sequence

from commitgate.its.client import ItsClientError, ItsFacade
from commitgate.validation.messages import connectivity_failure_message
from commitgate.validation.types import ExistenceCheck, ExistenceOutcome

logger = logging.getLogger(__name__)


def classify_issue(issue_id: str, tracker: ItsFacade) -> ExistenceCheck:
    try:
        exists = tracker.exists(issue_id)
    except (ItsClientError, OSError) as exc:
        message = connectivity_failure_message(issue_id, exc)
        logger.warning(message.synopsis, exc_info=exc)
        return ExistenceCheck(
            issue_id=issue_id,
            outcome=ExistenceOutcome.UNREACHABLE,
            message=message,
        )
    outcome = ExistenceOutcome.EXISTS if exists else ExistenceOutcome.DOES_NOT_EXIST
    return ExistenceCheck(issue_id=issue_id, outcome=outcome)


def classify_issues(issue_ids: Sequence[str], tracker: ItsFacade) -> List[ExistenceCheck]:
    # One lookup per reference, in order; an unreachable tracker does not stop the loop.
    return [classify_issue(issue_id, tracker) for issue_id in issue_ids]
