"""
Submission Validation Context.

Mutable accumulator for one validation run. It is created by the
orchestrator at the start of a run, passed explicitly to every validator,
and discarded when the run finishes. Messages are only ever appended.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from claims_validation.services.validation.messages import ErrorCatalogue, ValidationMessage

MessageLike = Union[ValidationMessage, ErrorCatalogue, str]


def to_message(message: MessageLike, *args: object) -> ValidationMessage:
    """Normalise a message object, catalogue code or plain string."""
    if isinstance(message, ValidationMessage):
        return message
    if isinstance(message, ErrorCatalogue):
        return message.to_message(*args)
    return ValidationMessage.error(message % args if args else message)


@dataclass
class ClaimValidationReport:
    """Findings recorded against one claim."""

    claim_id: str
    messages: list[ValidationMessage] = field(default_factory=list)
    flagged_for_retry: bool = False

    @property
    def has_errors(self) -> bool:
        return any(message.is_error for message in self.messages)

    @property
    def errors(self) -> list[str]:
        """Display text of the error messages."""
        return [message.display_message for message in self.messages if message.is_error]


class SubmissionValidationContext:
    """
    Validation results for a single submission.

    A claim id maps to at most one report; repeated additions for the same
    claim append to its existing report.
    """

    def __init__(self) -> None:
        self._submission_messages: list[ValidationMessage] = []
        self._claim_reports: dict[str, ClaimValidationReport] = {}

    # =========================================================================
    # Submission Messages
    # =========================================================================

    def add_submission_error(self, error: MessageLike, *args: object) -> None:
        self._submission_messages.append(to_message(error, *args))

    def add_submission_messages(self, messages: Iterable[ValidationMessage]) -> None:
        self._submission_messages.extend(messages)

    @property
    def submission_messages(self) -> list[ValidationMessage]:
        return list(self._submission_messages)

    def get_submission_messages(self) -> list[ValidationMessage]:
        return self.submission_messages

    def has_submission_errors(self) -> bool:
        return any(message.is_error for message in self._submission_messages)

    # =========================================================================
    # Claim Reports
    # =========================================================================

    def _report_for(self, claim_id: str) -> ClaimValidationReport:
        report = self._claim_reports.get(claim_id)
        if report is None:
            report = ClaimValidationReport(claim_id)
            self._claim_reports[claim_id] = report
        return report

    def add_claim_reports(self, claim_ids: Iterable[str]) -> None:
        """Create empty reports for claims that do not have one yet."""
        for claim_id in claim_ids:
            self._report_for(claim_id)

    def add_claim_error(self, claim_id: str, error: MessageLike, *args: object) -> None:
        self._report_for(claim_id).messages.append(to_message(error, *args))

    def add_claim_error_once(self, claim_id: str, error: MessageLike, *args: object) -> None:
        """Add an error unless the claim already carries an identical message."""
        message = to_message(error, *args)
        report = self._report_for(claim_id)
        if message not in report.messages:
            report.messages.append(message)

    def add_claim_messages(self, claim_id: str, messages: Iterable[ValidationMessage]) -> None:
        self._report_for(claim_id).messages.extend(messages)

    def get_claim_report(self, claim_id: str) -> Optional[ClaimValidationReport]:
        return self._claim_reports.get(claim_id)

    @property
    def claim_reports(self) -> list[ClaimValidationReport]:
        return list(self._claim_reports.values())

    def claim_messages(self, claim_id: str) -> list[ValidationMessage]:
        report = self._claim_reports.get(claim_id)
        return list(report.messages) if report else []

    def claim_errors(self, claim_id: str) -> list[str]:
        report = self._claim_reports.get(claim_id)
        return report.errors if report else []

    def flag_for_retry(self, claim_id: str) -> None:
        """Mark a claim whose validation could not complete; it will not be patched."""
        self._report_for(claim_id).flagged_for_retry = True

    def is_flagged_for_retry(self, claim_id: str) -> bool:
        report = self._claim_reports.get(claim_id)
        return report is not None and report.flagged_for_retry

    # =========================================================================
    # Queries
    # =========================================================================

    def has_claim_errors(self, claim_id: Optional[str]) -> bool:
        if claim_id is None:
            return False
        report = self._claim_reports.get(claim_id)
        return report is not None and report.has_errors

    def has_errors(self) -> bool:
        """True if any submission-level or claim-level error has been recorded."""
        return self.has_submission_errors() or any(
            report.has_errors for report in self._claim_reports.values()
        )
