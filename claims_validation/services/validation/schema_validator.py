"""
Schema Validator.

Structural and field-format checks for submissions and claims, expressed as
pydantic models registered by name. Each pydantic error becomes a finding
that names the offending field and the value that was provided.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from claims_validation.core.enums import AreaOfLaw, SubmissionStatus
from claims_validation.services.validation.messages import ValidationMessage

OFFICE_ACCOUNT_NUMBER_PATTERN = r"^[0-9][A-Z0-9]{5}$"
SUBMISSION_PERIOD_FORMAT_PATTERN = r"^[A-Za-z]{3}-\d{4}$"
FEE_CODE_PATTERN = r"^[A-Z0-9]{1,10}$"
UNIQUE_FILE_NUMBER_FORMAT_PATTERN = r"^\d{6}/\d{3}$"
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# =============================================================================
# Schemas
# =============================================================================


class SubmissionSchema(BaseModel):
    """Submission header fields."""

    model_config = ConfigDict(extra="ignore")

    office_account_number: str = Field(..., pattern=OFFICE_ACCOUNT_NUMBER_PATTERN)
    area_of_law: AreaOfLaw
    submission_period: Optional[str] = Field(None, pattern=SUBMISSION_PERIOD_FORMAT_PATTERN)
    status: SubmissionStatus
    is_nil_submission: Optional[StrictBool] = None


class ClaimSchema(BaseModel):
    """Claim fields with a fixed format."""

    model_config = ConfigDict(extra="ignore")

    fee_code: str = Field(..., pattern=FEE_CODE_PATTERN)
    unique_file_number: Optional[str] = Field(None, pattern=UNIQUE_FILE_NUMBER_FORMAT_PATTERN)
    unique_client_number: Optional[str] = Field(None, min_length=1, max_length=20)
    case_start_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    case_concluded_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    transfer_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    representation_order_date: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    client_date_of_birth: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    client_2_date_of_birth: Optional[str] = Field(None, pattern=ISO_DATE_PATTERN)
    disbursements_vat_amount: Optional[Decimal] = Field(None, ge=0)


DEFAULT_SCHEMAS: dict[str, type[BaseModel]] = {
    "submission": SubmissionSchema,
    "claim": ClaimSchema,
}


# =============================================================================
# Validator
# =============================================================================


def _provided_value(error: Mapping[str, Any]) -> str:
    if error.get("type") == "missing":
        return "null"
    value = error.get("input")
    return "null" if value is None else str(value)


class SchemaValidator:
    """Validate payloads against named pydantic schemas."""

    def __init__(self, schemas: Optional[Mapping[str, type[BaseModel]]] = None):
        self._schemas = dict(schemas if schemas is not None else DEFAULT_SCHEMAS)

    def register(self, name: str, schema: type[BaseModel]) -> None:
        self._schemas[name] = schema

    def validate(
        self,
        name: str,
        payload: Union[BaseModel, Mapping[str, Any]],
    ) -> list[ValidationMessage]:
        """
        Validate a payload against the schema registered under a name.

        Args:
            name: Registered schema name ("submission" or "claim")
            payload: Model instance or plain mapping to check

        Returns:
            One error message per failing field, empty when the payload is valid

        Raises:
            ValueError: if no schema is registered under the name
        """
        schema = self._schemas.get(name)
        if schema is None:
            raise ValueError(f"No schema registered for name: {name}")

        data = payload.model_dump() if isinstance(payload, BaseModel) else dict(payload)
        try:
            schema.model_validate(data)
        except ValidationError as e:
            return [self._to_message(error) for error in e.errors()]
        return []

    @staticmethod
    def _to_message(error: Mapping[str, Any]) -> ValidationMessage:
        field = ".".join(str(part) for part in error.get("loc", ())) or "payload"
        text = f"{field}: {error.get('msg')} (provided value: {_provided_value(error)})"
        return ValidationMessage.error(text)
