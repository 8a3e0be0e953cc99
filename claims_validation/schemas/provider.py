"""
Pydantic Schemas for Provider Details office schedules.
Source: Provider Details service /provider-offices/{officeCode}/schedules
Verified: 2025-12-18
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProviderDetailsModel(BaseModel):
    """Base model for the camelCase Provider Details payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ScheduleLine(ProviderDetailsModel):
    """A contracted line within a schedule."""

    category_of_law: Optional[str] = None
    area_of_law: Optional[str] = None
    description: Optional[str] = None


class Schedule(ProviderDetailsModel):
    """Contract schedule with its validity range."""

    schedule_number: Optional[str] = None
    contract_type: Optional[str] = None
    schedule_start_date: Optional[date] = None
    schedule_end_date: Optional[date] = None
    schedule_lines: list[ScheduleLine] = Field(default_factory=list)


class FirmOfficeSummary(ProviderDetailsModel):
    """Office the schedules belong to."""

    firm_office_code: str
    firm_office_id: Optional[int] = None


class ProviderSchedules(ProviderDetailsModel):
    """Contract and schedule details for one provider office."""

    office: Optional[FirmOfficeSummary] = None
    schedules: list[Schedule] = Field(default_factory=list)

    def schedules_on(self, effective_date: date) -> list[Schedule]:
        """Schedules whose date range includes the effective date; missing bounds are open."""
        found = []
        for schedule in self.schedules:
            start, end = schedule.schedule_start_date, schedule.schedule_end_date
            if (start is None or start <= effective_date) and (end is None or effective_date <= end):
                found.append(schedule)
        return found

    def categories_of_law(self, effective_date: Optional[date] = None) -> list[str]:
        """Flatten schedule lines into their categories of law."""
        schedules = self.schedules if effective_date is None else self.schedules_on(effective_date)
        return [
            line.category_of_law
            for schedule in schedules
            for line in schedule.schedule_lines
            if line.category_of_law
        ]
