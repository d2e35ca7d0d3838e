"""PutObjectAcl request assembly.

Turns validated ACL input into an outbound request descriptor:

    - Query: ``acl`` marker (no value), plus ``versionId`` when supplied
    - Headers: Content-MD5 and Date always; Content-Type and Content-Length
      with an XML body; ``x-amz-acl`` for canned ACLs
    - Host: ``{bucket}.{service_host}``
    - Path: ``/`` followed by the percent-encoded object key
"""

import email.utils
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from objectacl.digest import content_md5
from objectacl.errors import InvalidArgument
from objectacl.models import AccessControlPolicy, AclRequestOptions, CannedAcl
from objectacl.validation import validate_acl
from objectacl.xml_utils import render_access_control_policy, render_canned_acl

XML_CONTENT_TYPE = "application/xml"


@dataclass(frozen=True)
class AclRequest:
    """An assembled request ready for the transport."""

    method: str
    host: str
    path: str
    query: dict[str, str | None] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def coerce_options(
    options: AclRequestOptions | Mapping[str, Any] | None,
) -> AclRequestOptions:
    """Accept options as a model, a mapping (``versionId`` or ``version_id``), or None."""
    if options is None:
        return AclRequestOptions()
    if isinstance(options, AclRequestOptions):
        return options
    try:
        return AclRequestOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise InvalidArgument(f"Invalid request options: {sorted(options)}") from exc


def encode_object_path(object_name: str) -> str:
    """Percent-encode an object key for use as a URL path.

    Every reserved character is encoded, ``/`` included.
    """
    return "/" + urllib.parse.quote(object_name, safe="")


def format_date_header(now: datetime | None = None) -> str:
    """Format an RFC 1123 ``Date`` header value in GMT."""
    if now is None:
        return email.utils.formatdate(usegmt=True)
    return email.utils.format_datetime(now, usegmt=True)


def build_put_object_acl_request(
    bucket_name: str,
    object_name: str,
    acl: AccessControlPolicy | CannedAcl | Mapping[str, Any] | str,
    options: AclRequestOptions | Mapping[str, Any] | None = None,
    *,
    service_host: str,
    now: datetime | None = None,
) -> AclRequest:
    """Validate ACL input and assemble a PutObjectAcl request.

    Args:
        bucket_name: Bucket holding the object.
        object_name: Object key.
        acl: A canned ACL keyword or a structured access control policy.
        options: Optional ``versionId``.
        service_host: The configured service host the bucket is prefixed onto.
        now: Timestamp for the ``Date`` header; defaults to the current time.
            Must be timezone-aware.

    Returns:
        The assembled ``AclRequest``.

    Raises:
        InvalidAclKeyword: For an unrecognized canned ACL string.
        InvalidGranteeShape: For a grantee with an unrecognized field set.
        InvalidPermission: For an unrecognized permission.
        MalformedAclError: For structurally invalid ACL input.
    """
    opts = coerce_options(options)
    validated = validate_acl(acl)

    query: dict[str, str | None] = {"acl": None}
    if opts.version_id is not None:
        query["versionId"] = opts.version_id

    headers: dict[str, str] = {}
    if isinstance(validated, CannedAcl):
        body = b""
        headers["x-amz-acl"] = render_canned_acl(validated)
    else:
        body = render_access_control_policy(validated)
        headers["Content-Type"] = XML_CONTENT_TYPE
        headers["Content-Length"] = str(len(body))

    headers["Content-MD5"] = content_md5(body)
    headers["Date"] = format_date_header(now)

    return AclRequest(
        method="PUT",
        host=f"{bucket_name}.{service_host}",
        path=encode_object_path(object_name),
        query=query,
        headers=headers,
        body=body,
    )
