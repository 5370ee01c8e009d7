from __future__ import annotations

from typing import Optional, Pattern, Sequence

from commitgate.validation.types import (
    ExistenceOutcome,
    Severity,
    ValidationContext,
    ValidationMessage,
)


def connectivity_failure_message(issue_id: str, error: BaseException) -> ValidationMessage:
    return ValidationMessage(
        synopsis=(
            f"Failed to check whether or not issue {issue_id} exists, "
            "due to connectivity issue. Commit will be accepted."
        ),
        details=f"{type(error).__name__}: {error}",
        severity=Severity.ADVISORY,
        outcome=ExistenceOutcome.UNREACHABLE,
    )


def non_existing_issues_message(
    context: ValidationContext,
    issue_ids: Sequence[str],
) -> ValidationMessage:
    lines = ["The issue-ids"]
    lines.extend(f"    * {issue_id}" for issue_id in issue_ids)
    lines.append("are referenced in the commit message of")
    lines.append(f"{context.commit_id},")
    lines.append(f"but do not exist in {context.its_name} Issue-Tracker")
    return ValidationMessage(
        synopsis="Non-existing issue ids referenced in commit message",
        details="\n".join(lines),
        severity=Severity.BLOCKING_CANDIDATE,
        outcome=ExistenceOutcome.DOES_NOT_EXIST,
    )


def missing_issue_message(
    context: ValidationContext,
    issue_pattern: Optional[Pattern[str]],
) -> ValidationMessage:
    details = (
        f"Commit {context.commit_id} not associated to any issue\n"
        "\n"
        "Hint: insert one or more issue-id anywhere in the commit message.\n"
    )
    if issue_pattern is None:
        details += (
            f"      {context.its_name} Issue-Tracker requires an issue pattern to validate "
            "commit messages, but none is defined in the configuration.\n"
            "      Please contact an administrator to correct this."
        )
    else:
        details += (
            f"      Issue-ids are strings matching {issue_pattern.pattern}\n"
            f"      and are pointing to existing tickets on {context.its_name} Issue-Tracker"
        )
    return ValidationMessage(
        synopsis="Missing issue-id in commit message",
        details=details,
        severity=Severity.BLOCKING_CANDIDATE,
        outcome=ExistenceOutcome.DOES_NOT_EXIST,
    )
