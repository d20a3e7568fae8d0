"""Pydantic models for API request/response serialization."""

from __future__ import annotations

import re
from datetime import date
from typing import Literal

from pydantic import BaseModel, field_validator

from clinicdash.config import settings
from clinicdash.services.builders import NewPatientForm


# ---------------------------------------------------------------------------
# Patient form (create / edit dialog)
# ---------------------------------------------------------------------------

def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:  # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


class PatientFormRequest(BaseModel):
    """Dialog input; performs the calendar checks the record builder relies on."""

    firstName: str
    lastName: str
    dob: str
    email: str | None = None
    mobile: str | None = None
    inviteMode: Literal["profileOnly", "profileAndInvite"] = "profileOnly"
    locale: str | None = None
    createdBy: str | None = None

    @field_validator("firstName", "lastName")
    @classmethod
    def _required_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Required")
        return value

    @field_validator("email", "mobile")
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("dob")
    @classmethod
    def _plausible_birth_date(cls, value: str) -> str:
        if not re.fullmatch(r"[0-9]{4}-[0-9]{2}-[0-9]{2}", value):
            raise ValueError("Use YYYY-MM-DD")
        try:
            born = date.fromisoformat(value)
        except ValueError:
            raise ValueError("Not a valid calendar date") from None

        today = date.today()
        if born > today:
            raise ValueError("Date of birth cannot be in the future")
        if born < _years_before(today, settings.MAX_PATIENT_AGE_YEARS):
            raise ValueError(f"Date of birth cannot be more than {settings.MAX_PATIENT_AGE_YEARS} years ago")
        return value

    def to_form(self) -> NewPatientForm:
        return NewPatientForm(
            firstName=self.firstName,
            lastName=self.lastName,
            dob=self.dob,
            email=self.email,
            mobile=self.mobile,
            inviteMode=self.inviteMode,
        )


class ArchiveRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class PatientCoreViewResponse(BaseModel):
    id: str
    name: str
    birthDate: str | None = None
    email: str | None = None
    mobile: str | None = None
    status: Literal["active", "inactive"]


class PatientFormResponse(BaseModel):
    firstName: str
    lastName: str
    dob: str
    email: str | None = None
    mobile: str | None = None
    inviteMode: Literal["profileOnly", "profileAndInvite"]


class HistoryEventResponse(BaseModel):
    kind: Literal["invited", "created_by", "archived", "unarchived"]
    at: str | None = None
    value: str | None = None
    reason: str | None = None


class IssueResponse(BaseModel):
    path: str
    message: str
    kind: Literal["missing", "invalid", "enum"]


class ErrorResponse(BaseModel):
    error: str
    issues: list[IssueResponse]


class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    store: str
