"""Tests for the FHIR Patient schema gate."""

import pytest

from clinicdash.schemas.patient import PatientRecord
from clinicdash.services.validation import (
    Invalid,
    IssueKind,
    PatientValidationError,
    Valid,
    collect_issues,
    validate_patient,
)


def _make_patient(**overrides):
    record = {
        "resourceType": "Patient",
        "id": "P-1001",
        "name": [{"family": "Müller", "given": ["Alice"], "text": "Alice Müller"}],
        "birthDate": "1988-06-12",
        "gender": "female",
        "telecom": [{"system": "email", "value": "alice@example.com", "use": "home"}],
    }
    record.update(overrides)
    return record


def _paths(result):
    return {issue.path: issue for issue in result.issues}


def test_valid_patient():
    result = validate_patient(_make_patient())
    assert isinstance(result, Valid)
    assert result.ok
    assert isinstance(result.record, PatientRecord)
    assert result.record.name[0].given == ["Alice"]


def test_missing_required_fields():
    """Every missing required field is reported, each at its own path."""
    result = validate_patient({"resourceType": "Patient"})
    assert isinstance(result, Invalid)
    issues = _paths(result)
    assert issues["id"].kind is IssueKind.MISSING
    assert issues["name"].kind is IssueKind.MISSING


def test_empty_name_list_rejected():
    result = validate_patient(_make_patient(name=[]))
    issue = _paths(result)["name"]
    assert issue.kind is IssueKind.INVALID
    assert issue.message == "At least one name entry is required"


def test_empty_id_rejected():
    result = validate_patient(_make_patient(id=""))
    assert _paths(result)["id"].kind is IssueKind.INVALID


def test_wrong_resource_type():
    result = validate_patient(_make_patient(resourceType="Observation"))
    assert _paths(result)["resourceType"].kind is IssueKind.INVALID


def test_invalid_date_format():
    result = validate_patient(_make_patient(birthDate="01/15/1990"))
    issue = _paths(result)["birthDate"]
    assert issue.kind is IssueKind.INVALID
    assert issue.message == "Use YYYY-MM-DD"


def test_impossible_calendar_date_is_lexically_valid():
    """Leap-year and range checks belong to the form layer, not the schema."""
    assert validate_patient(_make_patient(birthDate="2023-02-30")).ok


def test_date_with_trailing_newline_rejected():
    result = validate_patient(_make_patient(birthDate="1988-06-12\n"))
    assert _paths(result)["birthDate"].kind is IssueKind.INVALID


def test_date_with_non_ascii_digits_rejected():
    result = validate_patient(_make_patient(birthDate="١٩٨٨-٠٦-١٢"))
    assert _paths(result)["birthDate"].message == "Use YYYY-MM-DD"


def test_timestamp_and_url_with_trailing_newline_rejected():
    result = validate_patient(
        _make_patient(
            meta={"lastUpdated": "2025-10-11T10:00:00Z\n"},
            extension=[{"url": "https://qicu.app/fhir/x\n", "valueString": "x"}],
        )
    )
    assert set(_paths(result)) == {"meta.lastUpdated", "extension.0.url"}
    assert validate_patient(_make_patient(birthDate="2999-01-01")).ok


def test_invalid_gender_is_enum_violation():
    result = validate_patient(_make_patient(gender="Female"))
    assert _paths(result)["gender"].kind is IssueKind.ENUM


def test_nested_enum_paths():
    result = validate_patient(
        _make_patient(telecom=[{"system": "email", "value": "a@x.com"}, {"system": "Phone", "value": "+41", "use": "cell"}])
    )
    issues = _paths(result)
    assert issues["telecom.1.system"].kind is IssueKind.ENUM
    assert issues["telecom.1.use"].kind is IssueKind.ENUM
    assert "telecom.0.system" not in issues


def test_all_violations_collected():
    """Validation is eager: one call reports every problem."""
    result = validate_patient(
        _make_patient(
            birthDate="12.06.1988",
            gender="f",
            telecom=[{"system": "pigeon", "value": "coo"}],
            active="yes",
            extension=[{"url": "not a url", "valueString": "x"}],
        )
    )
    assert set(_paths(result)) == {
        "active",
        "birthDate",
        "extension.0.url",
        "gender",
        "telecom.0.system",
    }


def test_missing_nested_required_field():
    result = validate_patient(_make_patient(telecom=[{"system": "email"}]))
    assert _paths(result)["telecom.0.value"].kind is IssueKind.MISSING


def test_optional_substructures_checked_only_when_present():
    record = _make_patient(
        address=[{"use": "home", "city": "Zürich", "line": ["Bahnhofstrasse 1"]}],
        link=[{"other": {"reference": "Patient/P-9"}, "type": "seealso"}],
        identifier=[{"use": "official", "system": "urn:oid:2.16.756.5.32", "value": "756.1234"}],
    )
    assert validate_patient(record).ok

    bad = _make_patient(link=[{"other": {"reference": "Patient/P-9"}, "type": "sibling"}])
    assert _paths(validate_patient(bad))["link.0.type"].kind is IssueKind.ENUM


def test_non_object_payload_is_malformed():
    result = validate_patient(["Patient"])
    assert isinstance(result, Invalid)
    assert [(i.path, i.kind) for i in result.issues] == [("", IssueKind.INVALID)]


def test_unknown_fields_are_dropped():
    result = validate_patient(_make_patient(favouriteColour="teal"))
    assert result.ok
    assert "favouriteColour" not in result.record.to_fhir()


def test_unwrap_invalid_raises_with_issues():
    result = validate_patient({"resourceType": "Patient", "id": "P-1"})
    with pytest.raises(PatientValidationError) as excinfo:
        result.unwrap()
    assert [i.path for i in excinfo.value.issues] == ["name"]


def test_issue_serialization():
    issue = validate_patient(_make_patient(gender="x")).issues[0]
    assert issue.to_dict()["kind"] == "enum"
    assert issue.to_dict()["path"] == "gender"


def test_distinct_messages_at_one_path_are_kept():
    schema = {"properties": {"code": {"type": "string", "minLength": 3, "pattern": "^[a-z]+$"}}}
    issues = collect_issues({"code": "A1"}, schema)
    assert [i.path for i in issues] == ["code", "code"]
    assert len({i.message for i in issues}) == 2


def test_identical_issues_are_reported_once():
    """A wrong resourceType trips both type and const, with one message."""
    result = validate_patient(_make_patient(resourceType=5))
    assert [i.path for i in result.issues] == ["resourceType"]


def test_issues_ordered_by_numeric_index():
    telecom = [{"system": "email", "value": f"p{n}@example.com"} for n in range(11)]
    telecom[2] = {"system": "pigeon", "value": "coo"}
    telecom[10] = {"system": "pigeon", "value": "coo"}
    result = validate_patient(_make_patient(telecom=telecom))
    assert [i.path for i in result.issues] == ["telecom.2.system", "telecom.10.system"]
