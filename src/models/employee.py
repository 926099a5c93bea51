"""Employee record models produced by LLM extraction from a résumé.

Defines Pydantic v2 models for the structured employee record and its nested
sections.  All models use frozen config; a record is built once from the
model reply and never mutated afterwards.

Every field has a blank default.  A résumé rarely mentions a salary or an
emergency contact, but the record shape is fixed: the extraction prompt asks
the LLM to include every field and leave it blank, and the validators below
turn the ``null`` values LLMs like to emit into the same blanks.  Downstream
code can therefore always read ``record.job_details.job_title`` without
``None`` checks.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _empty_list_if_none(value: Any) -> Any:
    return [] if value is None else value


# A string field where JSON ``null`` means "not on the résumé".
BlankStr = Annotated[str, BeforeValidator(_blank_if_none)]


class _Section(BaseModel):
    """Base for nested record sections.

    A ``null`` section in the model reply becomes an all-blank section.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _null_section(cls, data: Any) -> Any:
        return {} if data is None else data


class Address(_Section):
    street: BlankStr = ""
    city: BlankStr = ""
    state: BlankStr = ""
    postal_code: BlankStr = ""
    country: BlankStr = ""


class ContactDetails(_Section):
    email: BlankStr = ""
    phone_number: BlankStr = ""


class JobDetails(_Section):
    job_title: BlankStr = ""
    department: BlankStr = ""
    hire_date: BlankStr = ""
    employment_type: BlankStr = ""
    salary: float | None = None
    currency: BlankStr = ""


class WorkLocation(_Section):
    nearest_office: BlankStr = ""
    is_remote: bool | None = None


class PerformanceReview(_Section):
    review_date: BlankStr = ""
    rating: float | None = None
    comments: BlankStr = ""


class Benefits(_Section):
    health_insurance: BlankStr = ""
    retirement_plan: BlankStr = ""
    paid_time_off: int | None = None


class EmergencyContact(_Section):
    name: BlankStr = ""
    relationship: BlankStr = ""
    phone_number: BlankStr = ""


class EmployeeRecord(BaseModel):
    """One employee, as extracted from one résumé.

    Field order matches :data:`EMPLOYEE_FIELDS`, which is also the order the
    extraction prompt lists them in.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    employee_id: BlankStr = Field(default="", description="Employee identifier, if the résumé has one.")
    first_name: BlankStr = Field(default="", description="Given name.")
    last_name: BlankStr = Field(default="", description="Family name.")
    date_of_birth: BlankStr = Field(default="", description="Date of birth as written (ISO 8601 preferred).")
    address: Address = Field(default_factory=Address)
    contact_details: ContactDetails = Field(default_factory=ContactDetails)
    job_details: JobDetails = Field(default_factory=JobDetails)
    work_location: WorkLocation = Field(default_factory=WorkLocation)
    reporting_manager: BlankStr = Field(default="", description="Name or id of the reporting manager.")
    skills: Annotated[list[str], BeforeValidator(_empty_list_if_none)] = Field(
        default_factory=list, description="Skills, one per entry."
    )
    performance_reviews: Annotated[list[PerformanceReview], BeforeValidator(_empty_list_if_none)] = Field(
        default_factory=list
    )
    benefits: Benefits = Field(default_factory=Benefits)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    notes: BlankStr = Field(default="", description="Anything relevant that fits no other field.")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


# The fourteen top-level fields every extracted record carries.
EMPLOYEE_FIELDS: tuple[str, ...] = tuple(EmployeeRecord.model_fields)
