"""Pydantic models for S3 object access control policies.

Grantees are explicit variants: each class knows the ``xsi:type`` tag it
serializes under and the wire fields it carries, in declared order.
"""

from enum import Enum
from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field


class Permission(str, Enum):
    """ACL permission levels."""

    FULL_CONTROL = "FULL_CONTROL"
    WRITE = "WRITE"
    WRITE_ACP = "WRITE_ACP"
    READ = "READ"
    READ_ACP = "READ_ACP"


class CannedAcl(str, Enum):
    """Predefined ACLs applied through the ``x-amz-acl`` header."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"


class _AclModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class Owner(_AclModel):
    """The resource owner."""

    id: str
    display_name: str


class CanonicalUser(_AclModel):
    """A grantee identified by canonical account ID and display name."""

    xsi_type: ClassVar[str] = "CanonicalUser"

    id: str
    display_name: str

    def wire_fields(self) -> list[tuple[str, str]]:
        return [("ID", self.id), ("DisplayName", self.display_name)]


class AmazonCustomerByEmail(_AclModel):
    """A grantee identified by account email address."""

    xsi_type: ClassVar[str] = "AmazonCustomerByEmail"

    email: str

    def wire_fields(self) -> list[tuple[str, str]]:
        return [("EmailAddress", self.email)]


class Group(_AclModel):
    """A predefined group of grantees identified by URI."""

    xsi_type: ClassVar[str] = "Group"

    uri: str

    def wire_fields(self) -> list[tuple[str, str]]:
        return [("URI", self.uri)]


Grantee = Union[CanonicalUser, AmazonCustomerByEmail, Group]

GRANTEE_TYPES: dict[str, type] = {
    CanonicalUser.xsi_type: CanonicalUser,
    AmazonCustomerByEmail.xsi_type: AmazonCustomerByEmail,
    Group.xsi_type: Group,
}


class Grant(_AclModel):
    """A single permission given to a grantee."""

    grantee: Grantee
    permission: Permission


class AccessControlPolicy(_AclModel):
    """An owner and an ordered list of grants.

    Grant order is significant; grants are never deduplicated or sorted.
    """

    owner: Owner
    grants: list[Grant] = Field(default_factory=list)


class AclRequestOptions(_AclModel):
    """Optional PutObjectAcl parameters."""

    version_id: str | None = Field(default=None, alias="versionId")
