import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from commitgate.its.config import ItsConfig
from commitgate.its.factory import ItsFacadeFactory
from commitgate.observability.metrics import record
from commitgate.validation.classifier import classify_issues
from commitgate.validation.extractor import extract_issue_ids
from commitgate.validation.policy import evaluate_association
from commitgate.validation.types import (
    Accepted,
    AssociationPolicy,
    CommitEvent,
    CommitValidationError,
    ExistenceOutcome,
    Rejected,
    ValidationContext,
    ValidationMessage,
    Verdict,
)

logger = logging.getLogger(__name__)


class CommitValidator:
    """
    Checks that commits reference existing issues in the configured tracker.

    One instance can serve concurrent calls: configuration is read as an
    immutable per-repository snapshot and each call obtains its own facade.
    """

    def __init__(self, config: ItsConfig, facade_factory: Optional[ItsFacadeFactory] = None):
        self.config = config
        self.facade_factory = facade_factory or ItsFacadeFactory()

    def validate(self, event: CommitEvent) -> Tuple[ValidationMessage, ...]:
        """
        Validate a received commit.
        Returns advisory messages for an accepted commit and raises
        CommitValidationError with every message when it must be rejected.
        """
        verdict = self.evaluate(event)
        if isinstance(verdict, Rejected):
            raise CommitValidationError(verdict.synopsis, verdict.messages)
        return verdict.messages

    def evaluate(self, event: CommitEvent) -> Verdict:
        if not self.config.is_enabled(event.repository, event.ref_name):
            self._log_event(
                "debug",
                event="commit.validation.skipped",
                repository=event.repository,
                ref_name=event.ref_name,
                commit_id=event.commit_id,
                reason="disabled",
            )
            record(event.repository, "commits_skipped")
            return Accepted()

        settings = self.config.settings_for(event.repository)
        policy = settings.association
        if policy == AssociationPolicy.OPTIONAL:
            record(event.repository, "commits_skipped")
            return Accepted()

        self._log_event(
            "info",
            event="commit.validation.start",
            repository=event.repository,
            ref_name=event.ref_name,
            commit_id=event.commit_id,
            association=policy.value,
        )
        record(event.repository, "commits_validated")

        context = ValidationContext(
            repository=event.repository,
            commit_id=event.commit_id,
            its_name=settings.its_name,
        )
        issue_ids = extract_issue_ids(
            event.message,
            settings.issue_pattern,
            group_index=settings.issue_pattern_group_index,
        )
        checks = []
        dummy_match = False
        if issue_ids:
            tracker = self.facade_factory.get_facade(event.repository)
            checks = classify_issues(issue_ids, tracker)
        elif settings.dummy_issue_pattern is not None:
            dummy_match = settings.dummy_issue_pattern.search(event.message) is not None

        unreachable = sum(1 for check in checks if check.outcome == ExistenceOutcome.UNREACHABLE)
        if unreachable:
            record(event.repository, "its_unreachable", unreachable)

        verdict = evaluate_association(
            policy,
            context,
            issue_ids,
            checks,
            dummy_match=dummy_match,
            issue_pattern=settings.issue_pattern,
        )
        rejected = isinstance(verdict, Rejected)
        record(event.repository, "commits_rejected" if rejected else "commits_accepted")
        self._log_event(
            "warning" if rejected else "info",
            event="commit.validation.rejected" if rejected else "commit.validation.accepted",
            repository=event.repository,
            ref_name=event.ref_name,
            commit_id=event.commit_id,
            association=policy.value,
            issue_ids=issue_ids,
            dummy_match=dummy_match,
            unreachable=unreachable,
            messages=[message.synopsis for message in verdict.messages],
        )
        return verdict

    def _log_event(self, level: str, **payload: Any) -> None:
        payload.setdefault("component", "commit_validator")
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        method = getattr(logger, level, logger.info)
        method(json.dumps(payload, sort_keys=True, default=str))
