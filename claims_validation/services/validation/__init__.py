"""
Submission and claim validation engine.
"""

from claims_validation.services.validation.claim_validators import (
    ClaimValidationScope,
    ClaimValidator,
    default_claim_validators,
)
from claims_validation.services.validation.context import (
    ClaimValidationReport,
    SubmissionValidationContext,
)
from claims_validation.services.validation.duplicates import (
    CivilDuplicateStrategy,
    CrimeLowerDuplicateStrategy,
    DuplicateClaimStrategy,
    LegalHelpDuplicateStrategy,
    MediationDuplicateStrategy,
    duplicate_strategy_for,
)
from claims_validation.services.validation.effective_date import (
    get_effective_date,
    try_get_effective_date,
)
from claims_validation.services.validation.messages import (
    ClaimValidationError,
    SubmissionValidationError,
    ValidationMessage,
)
from claims_validation.services.validation.orchestrator import (
    SubmissionValidationResult,
    SubmissionValidationService,
    get_submission_validation_service,
)
from claims_validation.services.validation.schema_validator import SchemaValidator
from claims_validation.services.validation.submission_validators import (
    SubmissionValidator,
    default_submission_validators,
)

__all__ = [
    "CivilDuplicateStrategy",
    "ClaimValidationError",
    "ClaimValidationReport",
    "ClaimValidationScope",
    "ClaimValidator",
    "CrimeLowerDuplicateStrategy",
    "DuplicateClaimStrategy",
    "LegalHelpDuplicateStrategy",
    "MediationDuplicateStrategy",
    "SchemaValidator",
    "SubmissionValidationContext",
    "SubmissionValidationError",
    "SubmissionValidationResult",
    "SubmissionValidationService",
    "SubmissionValidator",
    "ValidationMessage",
    "default_claim_validators",
    "default_submission_validators",
    "duplicate_strategy_for",
    "get_effective_date",
    "get_submission_validation_service",
    "try_get_effective_date",
]
