"""Flat UI projections of Patient records (and the reverse, for edit forms)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from clinicdash.schemas.patient import PatientRecord
from clinicdash.services import extractors
from clinicdash.services.builders import NewPatientForm
from clinicdash.services.lifecycle import invitation_state


@dataclass(frozen=True)
class PatientCoreView:
    """Derived on every read, never persisted."""

    id: str
    name: str
    status: extractors.PatientStatus
    birthDate: str | None = None
    email: str | None = None
    mobile: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def to_core_view(record: PatientRecord) -> PatientCoreView:
    return PatientCoreView(
        id=record.id,
        name=extractors.display_name(record),
        birthDate=record.birthDate,
        email=extractors.primary_email(record) or None,
        mobile=extractors.primary_mobile(record) or None,
        status=extractors.status(record),
    )


def to_core_views(records: Iterable[PatientRecord]) -> list[PatientCoreView]:
    return [to_core_view(r) for r in records]


def to_form(record: PatientRecord) -> NewPatientForm:
    """
    Reverse projection used to pre-fill the edit dialog.

    Names come from ``given[0]``/``family``; when a record only carries a
    display text, it is split at the first space.
    """
    first, last = extractors.first_name(record), extractors.last_name(record)
    if not first and not last:
        shown = extractors.display_name(record)
        if shown != extractors.UNKNOWN_NAME:
            first, _, last = shown.partition(" ")

    return NewPatientForm(
        firstName=first,
        lastName=last,
        dob=record.birthDate or "",
        email=extractors.primary_email(record) or None,
        mobile=extractors.primary_mobile(record) or None,
        inviteMode="profileAndInvite" if invitation_state(record) == "sent" else "profileOnly",
    )
