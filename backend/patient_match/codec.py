"""FHIR wire format decoding and encoding for Patient/$match.

Inbound bodies are ``Parameters`` resources whose first parameter carries the
submitted ``Patient``.  Outbound bodies are ``OperationOutcome`` resources.
Both JSON and XML (FHIR namespace, primitives in ``value`` attributes) are
supported.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from lxml import etree
from pydantic import ValidationError

from patient_match.errors import MalformedInputError
from patient_match.models.outcome import OperationOutcome
from patient_match.models.patient import Patient

FHIR_NS: str = "http://hl7.org/fhir"

REQUIRES_PARAMETERS: str = (
    "Patient matching Patient/$match Operation requires a Parameters resource containing"
    " a single Patient resource in parameter field."
)
REQUIRES_PATIENT: str = "Parameters.parameter must contain a single patient resource as the first element."
MISSING_PARAMETER: str = "Missing Parameters.parameter"

# Element names that are arrays in FHIR JSON.  Anything else is a single value.
REPEATING_ELEMENTS: frozenset[str] = frozenset(
    {
        "parameter",
        "profile",
        "identifier",
        "coding",
        "name",
        "given",
        "prefix",
        "suffix",
        "telecom",
        "address",
        "line",
        "photo",
        "contact",
        "relationship",
        "issue",
        "extension",
        "modifierExtension",
    }
)

# Exceptions to REPEATING_ELEMENTS, keyed by (parent element, child element).
SINGLE_VALUED_ELEMENTS: frozenset[tuple[str, str]] = frozenset(
    {
        ("contact", "name"),
        ("contact", "address"),
        ("parameter", "name"),
    }
)


class WireFormat(str, Enum):
    JSON = "json"
    XML = "xml"

    @property
    def media_type(self) -> str:
        return f"application/fhir+{self.value}"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> "WireFormat | None":
        """Pick the format for a request ``Content-Type``; ``None`` if unsupported."""
        if not content_type:
            return None
        media = content_type.split(";", 1)[0].strip().lower()
        if media in ("application/json", "application/fhir+json"):
            return cls.JSON
        if media in ("application/xml", "application/fhir+xml", "text/xml"):
            return cls.XML
        return None


# -- XML helpers --------------------------------------------------------------


def _local(tag: Any) -> str:
    return etree.QName(tag).localname


def _child_elements(element: etree._Element) -> list[etree._Element]:
    return [c for c in element if isinstance(c.tag, str)]


def _primitive_extensions(element: etree._Element) -> list[dict[str, Any]] | None:
    """Extensions on a primitive such as ``<family value="Doe"><extension/></family>``.

    Returns ``None`` when the element is not a primitive carrying extensions.
    """
    children = _child_elements(element)
    if element.get("value") is None or not children:
        return None
    if any(_local(c.tag) != "extension" for c in children):
        return None
    return [_xml_element_to_json(c, "extension") for c in children]


def _xml_element_to_json(element: etree._Element, key: str) -> Any:
    """Convert one FHIR XML element to its JSON-shaped equivalent.

    Extensions on primitives go under ``_<name>`` next to the value, the way
    FHIR JSON carries them.
    """
    children = _child_elements(element)
    value = element.get("value")
    url = element.get("url")
    if not children and url is None:
        return value
    result: dict[str, Any] = {}
    if url is not None:
        result["url"] = url
    if value is not None:
        result["value"] = value
    for child in children:
        child_key = _local(child.tag)
        extensions = None
        if child_key == "resource":
            converted = _xml_resource_to_json(child)
        else:
            extensions = _primitive_extensions(child)
            if extensions is not None:
                converted = child.get("value")
            else:
                converted = _xml_element_to_json(child, child_key)
        primitive_meta = {"extension": extensions} if extensions is not None else None
        if child_key in REPEATING_ELEMENTS and (key, child_key) not in SINGLE_VALUED_ELEMENTS:
            result.setdefault(child_key, []).append(converted)
            result.setdefault(f"_{child_key}", []).append(primitive_meta)
        else:
            result[child_key] = converted
            if primitive_meta is not None:
                result[f"_{child_key}"] = primitive_meta
    # "_given": [None, None] carries nothing.
    for meta_key in [k for k, v in result.items() if k.startswith("_") and isinstance(v, list) and not any(v)]:
        del result[meta_key]
    return result


def _xml_resource_to_json(container: etree._Element) -> dict[str, Any] | None:
    """Unwrap ``<resource><Patient>...</Patient></resource>``."""
    inner = _child_elements(container)
    if not inner:
        return None
    return _xml_root_to_json(inner[0])


def _xml_root_to_json(root: etree._Element) -> dict[str, Any]:
    resource_type = _local(root.tag)
    body = _xml_element_to_json(root, resource_type)
    resource: dict[str, Any] = {"resourceType": resource_type}
    if isinstance(body, dict):
        resource.update(body)
    return resource


def _parse_xml(body: bytes) -> dict[str, Any]:
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(body, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MalformedInputError(f"Unable to parse XML body: {exc}", fatal=True) from exc
    return _xml_root_to_json(root)


def _parse_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"Unable to parse JSON body: {exc}", fatal=True) from exc


# -- Public API ---------------------------------------------------------------


def decode_resource(body: str | bytes, wire_format: WireFormat) -> Any:
    """Parse ``body`` into a FHIR JSON-shaped object."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    if not body.strip():
        raise MalformedInputError("Request body is empty.", fatal=True)
    if wire_format is WireFormat.XML:
        return _parse_xml(body)
    return _parse_json(body)


def decode_patient(body: str | bytes, wire_format: WireFormat) -> Patient:
    """Extract the submitted Patient from a ``Parameters`` request body.

    Raises
    ------
    MalformedInputError
        When the body cannot be parsed, is not a ``Parameters`` resource, has
        no parameters, or its first parameter does not carry a Patient.
    """
    resource = decode_resource(body, wire_format)

    if not isinstance(resource, dict) or resource.get("resourceType") != "Parameters":
        raise MalformedInputError(REQUIRES_PARAMETERS)

    parameters = resource.get("parameter")
    if not isinstance(parameters, list) or not parameters:
        raise MalformedInputError(MISSING_PARAMETER)

    first = parameters[0]
    patient_json = first.get("resource") if isinstance(first, dict) else None
    if not isinstance(patient_json, dict) or patient_json.get("resourceType") != "Patient":
        raise MalformedInputError(REQUIRES_PATIENT)

    try:
        return Patient.model_validate(patient_json)
    except ValidationError as exc:
        raise MalformedInputError(
            f"Patient resource is not structurally valid: {exc.error_count()} error(s), "
            f"first at {'.'.join(str(p) for p in exc.errors()[0]['loc'])}",
            fatal=True,
        ) from exc


def _outcome_to_xml(outcome: OperationOutcome) -> str:
    root = etree.Element(f"{{{FHIR_NS}}}OperationOutcome", nsmap={None: FHIR_NS})
    for issue in outcome.issue:
        node = etree.SubElement(root, f"{{{FHIR_NS}}}issue")
        etree.SubElement(node, f"{{{FHIR_NS}}}severity", value=issue.severity.value)
        etree.SubElement(node, f"{{{FHIR_NS}}}code", value=issue.code.value)
        if issue.diagnostics is not None:
            etree.SubElement(node, f"{{{FHIR_NS}}}diagnostics", value=issue.diagnostics)
    return etree.tostring(root, encoding="unicode", pretty_print=True)


def encode_outcome(outcome: OperationOutcome, wire_format: WireFormat) -> str:
    """Render an OperationOutcome in the requested wire format."""
    if wire_format is WireFormat.XML:
        return _outcome_to_xml(outcome)
    return json.dumps(outcome.to_fhir_dict(), ensure_ascii=False, indent=2)
