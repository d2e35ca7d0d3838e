"""S3 XML rendering and parsing helpers for objectacl."""

import xml.etree.ElementTree as ET
from typing import Any

from objectacl.errors import MalformedAclError
from objectacl.models import (
    GRANTEE_TYPES,
    AccessControlPolicy,
    CannedAcl,
    Grant,
    Owner,
)
from objectacl.validation import grantee_from_fields, validate_permission

# S3 XML namespace
S3_XMLNS = "http://s3.amazonaws.com/doc/2006-03-01/"
XSI_XMLNS = "http://www.w3.org/2001/XMLSchema-instance"

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>\n'

_NS = f"{{{S3_XMLNS}}}"
_XSI_TYPE = f"{{{XSI_XMLNS}}}type"


def render_access_control_policy(policy: AccessControlPolicy) -> bytes:
    """Render a policy as an S3 AccessControlPolicy XML document.

    Element order is fixed: Owner (ID, DisplayName), then AccessControlList
    with one Grant per policy grant in order. Each Grantee carries an
    ``xsi:type`` attribute and its fields in declared order. Text content is
    escaped by ElementTree, and carriage returns are written as ``&#13;`` so
    parsers do not normalize them away.

    The namespace declarations are written as plain attributes so rendering
    does not touch ElementTree's global prefix registry.

    Args:
        policy: A validated access control policy.

    Returns:
        The UTF-8 encoded XML body.
    """
    root = ET.Element("AccessControlPolicy", {"xmlns": S3_XMLNS})

    owner = ET.SubElement(root, "Owner")
    ET.SubElement(owner, "ID").text = policy.owner.id
    ET.SubElement(owner, "DisplayName").text = policy.owner.display_name

    acl = ET.SubElement(root, "AccessControlList")
    for grant in policy.grants:
        grant_elem = ET.SubElement(acl, "Grant")
        grantee = ET.SubElement(
            grant_elem,
            "Grantee",
            {"xmlns:xsi": XSI_XMLNS, "xsi:type": grant.grantee.xsi_type},
        )
        for name, value in grant.grantee.wire_fields():
            ET.SubElement(grantee, name).text = value
        ET.SubElement(grant_elem, "Permission").text = grant.permission.value

    # Only text nodes can hold a raw \r; attribute values are constants.
    document = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
    return XML_DECLARATION + document.encode("utf-8")


def render_canned_acl(acl: CannedAcl) -> str:
    """Return the ``x-amz-acl`` header value for a canned ACL."""
    return acl.value


def _find_elem(parent: ET.Element, name: str) -> ET.Element | None:
    """Find a child element, trying the S3-namespaced name first, then bare."""
    elem = parent.find(f"{_NS}{name}")
    if elem is not None:
        return elem
    return parent.find(name)


def _findall(parent: ET.Element, name: str) -> list[ET.Element]:
    return [
        child
        for child in parent
        if child.tag in (f"{_NS}{name}", name)
    ]


def _text(parent: ET.Element, name: str) -> str | None:
    elem = _find_elem(parent, name)
    if elem is None:
        return None
    return elem.text or ""


def parse_access_control_policy(body: bytes | str) -> AccessControlPolicy:
    """Parse an AccessControlPolicy XML document into a policy model.

    Accepts namespaced or bare element names. The grantee variant comes from
    ``xsi:type`` when present, otherwise from which fields are present.

    Raises:
        MalformedAclError: If the document is not well formed or a grant
            cannot be read.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise MalformedAclError(f"Malformed AccessControlPolicy XML: {exc}") from exc

    owner_elem = _find_elem(root, "Owner")
    if owner_elem is None:
        raise MalformedAclError("AccessControlPolicy is missing its Owner")
    owner = Owner(
        id=_text(owner_elem, "ID") or "",
        display_name=_text(owner_elem, "DisplayName") or "",
    )

    grants: list[Grant] = []
    acl_elem = _find_elem(root, "AccessControlList")
    if acl_elem is not None:
        for index, grant_elem in enumerate(_findall(acl_elem, "Grant")):
            grantee_elem = _find_elem(grant_elem, "Grantee")
            if grantee_elem is None:
                raise MalformedAclError(f"Grant {index} is missing its Grantee")

            fields: dict[str, Any] = {}
            for child in grantee_elem:
                fields[child.tag.rpartition("}")[2]] = child.text or ""

            xsi_type = grantee_elem.get(_XSI_TYPE, "")
            grantee = grantee_from_fields(fields, index=index)
            if xsi_type and GRANTEE_TYPES.get(xsi_type) is not type(grantee):
                raise MalformedAclError(
                    f"Grant {index} grantee type {xsi_type!r} does not match its fields"
                )

            permission = validate_permission(_text(grant_elem, "Permission"), index=index)
            grants.append(Grant(grantee=grantee, permission=permission))

    return AccessControlPolicy(owner=owner, grants=grants)


def parse_error(body: bytes | str) -> dict[str, str]:
    """Parse an S3 XML error response body.

    Returns:
        A dict with ``code``, ``message``, ``request_id`` and ``resource``;
        values are empty strings when the body is empty or not an S3 error
        document.
    """
    result = {"code": "", "message": "", "request_id": "", "resource": ""}
    if not body:
        return result
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return result
    if root.tag.rpartition("}")[2] != "Error":
        return result

    for key, name in (
        ("code", "Code"),
        ("message", "Message"),
        ("request_id", "RequestId"),
        ("resource", "Resource"),
    ):
        result[key] = _text(root, name) or ""
    return result
