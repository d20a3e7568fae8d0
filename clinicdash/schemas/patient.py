"""Typed Pydantic models for the FHIR Patient resource.

Instances are only built from payloads that already passed the JSON schema
gate (see ``clinicdash.services.validation``). Models are frozen: every
transition produces a new record via ``model_copy``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

Gender = Literal["male", "female", "other", "unknown", "prefer_not_to_say"]
ContactPointSystem = Literal["phone", "fax", "email", "pager", "url", "sms", "other"]
ContactPointUse = Literal["home", "work", "temp", "old", "mobile"]
NameUse = Literal["usual", "official", "temp", "nickname", "anonymous", "old", "maiden"]
IdentifierUse = Literal["usual", "official", "temp", "secondary", "old"]


class FhirModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Common datatypes
# ---------------------------------------------------------------------------

class Period(FhirModel):
    start: str | None = None
    end: str | None = None


class Coding(FhirModel):
    system: str | None = None
    version: str | None = None
    code: str | None = None
    display: str | None = None
    userSelected: bool | None = None


class CodeableConcept(FhirModel):
    coding: list[Coding] | None = None
    text: str | None = None


class Reference(FhirModel):
    reference: str
    type: str | None = None
    display: str | None = None


class Identifier(FhirModel):
    use: IdentifierUse | None = None
    type: CodeableConcept | None = None
    system: str | None = None
    value: str
    period: Period | None = None
    assigner: Reference | None = None


class Meta(FhirModel):
    versionId: str | None = None
    lastUpdated: str | None = None
    source: str | None = None
    profile: list[str] | None = None


class Attachment(FhirModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    url: str | None = None


# ---------------------------------------------------------------------------
# Patient building blocks
# ---------------------------------------------------------------------------

class HumanName(FhirModel):
    use: NameUse | None = None
    text: str | None = None
    family: str | None = None
    given: list[str] | None = None
    prefix: list[str] | None = None
    suffix: list[str] | None = None
    period: Period | None = None


class ContactPoint(FhirModel):
    system: ContactPointSystem
    value: str
    use: ContactPointUse | None = None
    rank: int | None = None
    period: Period | None = None


class Address(FhirModel):
    use: Literal["home", "work", "temp", "old", "billing"] | None = None
    type: Literal["postal", "physical", "both"] | None = None
    text: str | None = None
    line: list[str] | None = None
    city: str | None = None
    district: str | None = None
    state: str | None = None
    postalCode: str | None = None
    country: str | None = None
    period: Period | None = None


class PatientContact(FhirModel):
    relationship: list[CodeableConcept] | None = None
    name: HumanName | None = None
    telecom: list[ContactPoint] | None = None
    address: Address | None = None
    gender: Gender | None = None
    organization: Reference | None = None
    period: Period | None = None


class PatientCommunication(FhirModel):
    language: CodeableConcept
    preferred: bool | None = None


class PatientLink(FhirModel):
    other: Reference
    type: Literal["replaced-by", "replaces", "refer", "seealso"]


class Extension(FhirModel):
    """URL-keyed slot for app metadata (invitation, creator, archive markers)."""

    url: str
    valueString: str | None = None
    valueBoolean: bool | None = None
    valueDate: str | None = None
    valueDateTime: str | None = None
    valueCode: str | None = None


# ---------------------------------------------------------------------------
# Patient resource
# ---------------------------------------------------------------------------

class PatientRecord(FhirModel):
    """A validated FHIR Patient. ``active`` absent means active."""

    resourceType: Literal["Patient"] = "Patient"
    id: str
    meta: Meta | None = None
    implicitRules: str | None = None
    language: str | None = None

    identifier: list[Identifier] | None = None
    active: bool | None = None

    name: list[HumanName]
    telecom: list[ContactPoint] | None = None

    gender: Gender | None = None
    birthDate: str | None = None
    deceasedBoolean: bool | None = None
    deceasedDateTime: str | None = None

    address: list[Address] | None = None
    maritalStatus: CodeableConcept | None = None
    multipleBirthBoolean: bool | None = None
    multipleBirthInteger: int | None = None
    photo: list[Attachment] | None = None

    contact: list[PatientContact] | None = None
    communication: list[PatientCommunication] | None = None

    generalPractitioner: list[Reference] | None = None
    managingOrganization: Reference | None = None

    link: list[PatientLink] | None = None
    extension: list[Extension] | None = None

    def to_fhir(self) -> dict[str, Any]:
        """Serialize to the FHIR JSON shape, omitting absent fields."""
        return self.model_dump(mode="json", exclude_none=True)
