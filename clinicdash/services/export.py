"""CSV export of the patient list."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from clinicdash.schemas.patient import PatientRecord
from clinicdash.services import extractors

CSV_HEADERS = ["id", "name", "birthDate", "email", "mobile", "language", "active"]


def export_patients_csv(records: Iterable[PatientRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(
            [
                record.id,
                extractors.display_name(record),
                record.birthDate or "",
                extractors.primary_email(record),
                extractors.primary_mobile(record),
                extractors.preferred_language(record),
                "true" if record.active is not False else "false",
            ]
        )
    # No trailing newline after the last row.
    return buffer.getvalue().rstrip("\n")
