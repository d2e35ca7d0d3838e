"""ACL input validation helpers for objectacl.

These functions check caller input before any serialization or network
work happens. Each one raises an appropriate ``S3Error`` subclass on invalid
input and has no side effects.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from objectacl.errors import (
    InvalidAclKeyword,
    InvalidGranteeShape,
    InvalidPermission,
    MalformedAclError,
)
from objectacl.models import (
    AccessControlPolicy,
    AmazonCustomerByEmail,
    CannedAcl,
    CanonicalUser,
    Grant,
    Grantee,
    Group,
    Owner,
    Permission,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CANNED_ACLS = {acl.value: acl for acl in CannedAcl}
_PERMISSIONS = {p.value: p for p in Permission}

# Grantee field aliases normalized to their wire names.
_GRANTEE_KEY_ALIASES = {
    "ID": "ID",
    "id": "ID",
    "DisplayName": "DisplayName",
    "display_name": "DisplayName",
    "EmailAddress": "EmailAddress",
    "email": "EmailAddress",
    "URI": "URI",
    "uri": "URI",
}

_CANONICAL_USER_FIELDS = frozenset({"ID", "DisplayName"})
_EMAIL_FIELDS = frozenset({"EmailAddress"})
_GROUP_FIELDS = frozenset({"URI"})

# Characters outside the XML 1.0 Char production.
_XML_ILLEGAL_RE = re.compile("[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_canned_acl(value: str) -> CannedAcl:
    """Validate a canned ACL keyword.

    Args:
        value: The candidate ``x-amz-acl`` value.

    Returns:
        The matching ``CannedAcl``.

    Raises:
        InvalidAclKeyword: If the value is not one of the four canned ACLs.
    """
    if isinstance(value, CannedAcl):
        return value
    acl = _CANNED_ACLS.get(value)
    if acl is None:
        logger.debug("Rejected canned ACL %r", value)
        raise InvalidAclKeyword(value)
    return acl


def validate_permission(value: Any, index: int | None = None) -> Permission:
    """Validate a grant permission.

    Raises:
        InvalidPermission: If the value is not an ACL permission level.
    """
    if isinstance(value, Permission):
        return value
    permission = _PERMISSIONS.get(value) if isinstance(value, str) else None
    if permission is None:
        raise InvalidPermission(str(value), index=index)
    return permission


def grantee_from_fields(fields: Mapping[str, Any], index: int | None = None) -> Grantee:
    """Build a grantee variant from the set of fields present.

    ``{ID, DisplayName}`` is a canonical user, ``{EmailAddress}`` alone is an
    email-identified customer and ``{URI}`` alone is a group. The snake_case
    names ``id``, ``display_name``, ``email`` and ``uri`` are accepted too.

    Args:
        fields: The grantee mapping.
        index: Position of the owning grant, for error context.

    Returns:
        The grantee model.

    Raises:
        InvalidGranteeShape: If the fields match no recognized shape or a
            field is given under both its wire and snake_case name.
        MalformedAclError: If a value is not a string or holds characters
            XML 1.0 cannot carry.
    """
    normalized: dict[str, Any] = {}
    for key, value in fields.items():
        name = _GRANTEE_KEY_ALIASES.get(key, key)
        if name in normalized:
            logger.debug("Rejected grantee with duplicate field %s", name)
            raise InvalidGranteeShape(list(fields), index=index)
        normalized[name] = value

    keys = frozenset(normalized)
    grantee = None
    try:
        if keys == _CANONICAL_USER_FIELDS:
            grantee = CanonicalUser(id=normalized["ID"], display_name=normalized["DisplayName"])
        elif keys == _EMAIL_FIELDS:
            grantee = AmazonCustomerByEmail(email=normalized["EmailAddress"])
        elif keys == _GROUP_FIELDS:
            grantee = Group(uri=normalized["URI"])
    except ValidationError as exc:
        raise MalformedAclError(f"Grantee values must be strings: {exc.errors()[0]['msg']}") from exc

    if grantee is not None:
        _check_grantee_text(grantee, index)
        return grantee

    logger.debug("Rejected grantee shape %s", sorted(keys))
    raise InvalidGranteeShape(list(fields), index=index)


def validate_policy(acl: AccessControlPolicy | Mapping[str, Any]) -> AccessControlPolicy:
    """Validate a structured access control policy.

    Accepts either an ``AccessControlPolicy`` or a mapping in the wire shape::

        {
            "Owner": {"ID": "...", "DisplayName": "..."},
            "AccessControlList": [
                {"Grantee": {"URI": "..."}, "Permission": "READ"},
            ],
        }

    The snake_case shape (``owner``/``grants``/``grantee``/``permission``)
    is accepted as well.

    Raises:
        InvalidGranteeShape: If any grantee has an unrecognized field set.
        InvalidPermission: If any permission is not an ACL permission level.
        MalformedAclError: If the owner is missing or the shape is wrong.
    """
    if isinstance(acl, AccessControlPolicy):
        for index, grant in enumerate(acl.grants):
            if not isinstance(grant.grantee, (CanonicalUser, AmazonCustomerByEmail, Group)):
                raise InvalidGranteeShape([type(grant.grantee).__name__], index=index)
        _check_policy_text(acl)
        return acl

    if not isinstance(acl, Mapping):
        raise MalformedAclError(
            f"ACL must be a canned ACL string or an access control policy, got {type(acl).__name__}"
        )

    owner_fields = _pick(acl, "Owner", "owner")
    if not isinstance(owner_fields, Mapping):
        raise MalformedAclError("Access control policy is missing its Owner")
    try:
        owner = Owner(
            id=_pick(owner_fields, "ID", "id"),
            display_name=_pick(owner_fields, "DisplayName", "display_name"),
        )
    except ValidationError as exc:
        raise MalformedAclError("Owner requires string ID and DisplayName") from exc

    entries = _pick(acl, "AccessControlList", "grants")
    if entries is None:
        entries = []
    if isinstance(entries, (str, bytes)) or not isinstance(entries, (list, tuple)):
        raise MalformedAclError("AccessControlList must be a list of grants")

    grants = [_grant_from_entry(entry, index) for index, entry in enumerate(entries)]
    policy = AccessControlPolicy(owner=owner, grants=grants)
    _check_policy_text(policy)
    return policy


def validate_acl(acl: Any) -> AccessControlPolicy | CannedAcl:
    """Validate either form of ACL input.

    Returns:
        A ``CannedAcl`` for string input, otherwise an ``AccessControlPolicy``.
    """
    if isinstance(acl, str):
        return validate_canned_acl(acl)
    return validate_policy(acl)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _pick(mapping: Mapping[str, Any], wire_key: str, snake_key: str) -> Any:
    """Return the value under the wire key, falling back to the snake_case key."""
    if wire_key in mapping:
        return mapping[wire_key]
    return mapping.get(snake_key)


def _check_xml_text(value: str, field: str) -> None:
    match = _XML_ILLEGAL_RE.search(value)
    if match is not None:
        logger.debug("Rejected %s with character U+%04X", field, ord(match.group()))
        raise MalformedAclError(
            f"{field} contains character U+{ord(match.group()):04X}, which XML 1.0 does not allow"
        )


def _check_grantee_text(grantee: Grantee, index: int | None) -> None:
    prefix = "Grantee" if index is None else f"Grant {index} Grantee"
    for name, value in grantee.wire_fields():
        _check_xml_text(value, f"{prefix} {name}")


def _check_policy_text(policy: AccessControlPolicy) -> None:
    """Reject owner and grantee values that cannot appear in an XML document."""
    _check_xml_text(policy.owner.id, "Owner ID")
    _check_xml_text(policy.owner.display_name, "Owner DisplayName")
    for index, grant in enumerate(policy.grants):
        _check_grantee_text(grant.grantee, index)


def _grant_from_entry(entry: Any, index: int) -> Grant:
    if isinstance(entry, Grant):
        return entry
    if not isinstance(entry, Mapping):
        raise MalformedAclError(f"Grant {index} must be a mapping")

    grantee_fields = _pick(entry, "Grantee", "grantee")
    if isinstance(grantee_fields, (CanonicalUser, AmazonCustomerByEmail, Group)):
        grantee = grantee_fields
    elif isinstance(grantee_fields, Mapping):
        grantee = grantee_from_fields(grantee_fields, index=index)
    else:
        raise InvalidGranteeShape([], index=index)

    permission = validate_permission(_pick(entry, "Permission", "permission"), index=index)
    return Grant(grantee=grantee, permission=permission)
