r"""
FHIR Patient JSON schema – the validation gate for every stored record.

Covers the practical subset of the HL7 FHIR R4 Patient resource the dashboard
reads and writes, plus the URL-keyed extensions used for app metadata
(invitation state, creator, archive markers).

Date and date-time fields are checked lexically only. Calendar sanity
(leap years, future dates, maximum age) belongs to the form layer.

jsonschema applies ``pattern`` with ``re.search``, so the patterns use
``[0-9]`` (``\d`` matches any Unicode digit) and ``\Z`` (``$`` also matches
before a trailing newline).
"""

ISO_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z"
ISO_DATETIME_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?Z\Z"
URI_PATTERN = r"^[A-Za-z][A-Za-z0-9+.\-]*:\S+\Z"

GENDERS = ["male", "female", "other", "unknown", "prefer_not_to_say"]
CONTACT_POINT_SYSTEMS = ["phone", "fax", "email", "pager", "url", "sms", "other"]
CONTACT_POINT_USES = ["home", "work", "temp", "old", "mobile"]
NAME_USES = ["usual", "official", "temp", "nickname", "anonymous", "old", "maiden"]
IDENTIFIER_USES = ["usual", "official", "temp", "secondary", "old"]
ADDRESS_USES = ["home", "work", "temp", "old", "billing"]
ADDRESS_TYPES = ["postal", "physical", "both"]
LINK_TYPES = ["replaced-by", "replaces", "refer", "seealso"]

# "errorMessage" is not a JSON Schema keyword; the validation service reads it
# to replace the generic jsonschema message for that subschema.
_date = {"type": "string", "pattern": ISO_DATE_PATTERN, "errorMessage": "Use YYYY-MM-DD"}
_datetime = {
    "type": "string",
    "pattern": ISO_DATETIME_PATTERN,
    "errorMessage": "Use an ISO 8601 UTC timestamp (YYYY-MM-DDTHH:MM:SSZ)",
}
_uri = {"type": "string", "pattern": URI_PATTERN, "errorMessage": "Must be an absolute URL"}
_string = {"type": "string"}
_strings = {"type": "array", "items": _string}
_boolean = {"type": "boolean"}


def _list_of(ref: str) -> dict:
    return {"type": "array", "items": {"$ref": f"#/definitions/{ref}"}}


FHIR_PATIENT_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "FHIR Patient",
    "description": "HL7 FHIR R4 Patient resource as stored by the clinic dashboard.",
    "type": "object",
    "required": ["resourceType", "id", "name"],
    "definitions": {
        "Period": {
            "type": "object",
            "properties": {"start": _datetime, "end": _datetime},
        },
        "Coding": {
            "type": "object",
            "properties": {
                "system": _uri,
                "version": _string,
                "code": _string,
                "display": _string,
                "userSelected": _boolean,
            },
        },
        "CodeableConcept": {
            "type": "object",
            "properties": {"coding": _list_of("Coding"), "text": _string},
        },
        "Reference": {
            "type": "object",
            "required": ["reference"],
            "properties": {"reference": _string, "type": _string, "display": _string},
        },
        "Identifier": {
            "type": "object",
            "required": ["value"],
            "properties": {
                "use": {"type": "string", "enum": IDENTIFIER_USES},
                "type": {"$ref": "#/definitions/CodeableConcept"},
                "system": _uri,
                "value": _string,
                "period": {"$ref": "#/definitions/Period"},
                "assigner": {"$ref": "#/definitions/Reference"},
            },
        },
        "HumanName": {
            "type": "object",
            "properties": {
                "use": {"type": "string", "enum": NAME_USES},
                "text": _string,
                "family": _string,
                "given": _strings,
                "prefix": _strings,
                "suffix": _strings,
                "period": {"$ref": "#/definitions/Period"},
            },
        },
        "ContactPoint": {
            "type": "object",
            "required": ["system", "value"],
            "properties": {
                "system": {"type": "string", "enum": CONTACT_POINT_SYSTEMS},
                "value": _string,
                "use": {"type": "string", "enum": CONTACT_POINT_USES},
                "rank": {"type": "integer", "minimum": 1},
                "period": {"$ref": "#/definitions/Period"},
            },
        },
        "Address": {
            "type": "object",
            "properties": {
                "use": {"type": "string", "enum": ADDRESS_USES},
                "type": {"type": "string", "enum": ADDRESS_TYPES},
                "text": _string,
                "line": _strings,
                "city": _string,
                "district": _string,
                "state": _string,
                "postalCode": _string,
                "country": _string,
                "period": {"$ref": "#/definitions/Period"},
            },
        },
        "PatientContact": {
            "type": "object",
            "properties": {
                "relationship": _list_of("CodeableConcept"),
                "name": {"$ref": "#/definitions/HumanName"},
                "telecom": _list_of("ContactPoint"),
                "address": {"$ref": "#/definitions/Address"},
                "gender": {"type": "string", "enum": GENDERS},
                "organization": {"$ref": "#/definitions/Reference"},
                "period": {"$ref": "#/definitions/Period"},
            },
        },
        "PatientCommunication": {
            "type": "object",
            "required": ["language"],
            "properties": {
                "language": {"$ref": "#/definitions/CodeableConcept"},
                "preferred": _boolean,
            },
        },
        "PatientLink": {
            "type": "object",
            "required": ["other", "type"],
            "properties": {
                "other": {"$ref": "#/definitions/Reference"},
                "type": {"type": "string", "enum": LINK_TYPES},
            },
        },
        "Attachment": {
            "type": "object",
            "properties": {"url": _uri},
        },
        "Extension": {
            "type": "object",
            "required": ["url"],
            "properties": {
                "url": _uri,
                "valueString": _string,
                "valueBoolean": _boolean,
                "valueDate": _date,
                "valueDateTime": _datetime,
                "valueCode": _string,
            },
        },
    },
    "properties": {
        "resourceType": {
            "type": "string",
            "const": "Patient",
            "errorMessage": "resourceType must be 'Patient'",
        },
        "id": {"type": "string", "minLength": 1},
        "meta": {
            "type": "object",
            "properties": {
                "versionId": _string,
                "lastUpdated": _datetime,
                "source": _string,
                "profile": _strings,
            },
        },
        "implicitRules": _uri,
        "language": _string,
        "identifier": _list_of("Identifier"),
        "active": _boolean,
        "name": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/definitions/HumanName"},
            "errorMessage": "At least one name entry is required",
        },
        "telecom": _list_of("ContactPoint"),
        "gender": {"type": "string", "enum": GENDERS},
        "birthDate": _date,
        "deceasedBoolean": _boolean,
        "deceasedDateTime": _datetime,
        "address": _list_of("Address"),
        "maritalStatus": {"$ref": "#/definitions/CodeableConcept"},
        "multipleBirthBoolean": _boolean,
        "multipleBirthInteger": {"type": "integer"},
        "photo": _list_of("Attachment"),
        "contact": _list_of("PatientContact"),
        "communication": _list_of("PatientCommunication"),
        "generalPractitioner": _list_of("Reference"),
        "managingOrganization": {"$ref": "#/definitions/Reference"},
        "link": _list_of("PatientLink"),
        "extension": _list_of("Extension"),
    },
}
