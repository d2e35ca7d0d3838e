"""objectacl: PutObjectAcl requests for S3-compatible object stores."""

from objectacl.client import ObjectAclClient, put_object_acl
from objectacl.errors import (
    InvalidAclKeyword,
    InvalidGranteeShape,
    InvalidPermission,
    MalformedAclError,
    S3Error,
    ServiceError,
)
from objectacl.models import (
    AccessControlPolicy,
    AclRequestOptions,
    AmazonCustomerByEmail,
    CannedAcl,
    CanonicalUser,
    Grant,
    Group,
    Owner,
    Permission,
)
from objectacl.request import AclRequest, build_put_object_acl_request
from objectacl.transport import HttpxTransport, Transport

__all__ = [
    "AccessControlPolicy",
    "AclRequest",
    "AclRequestOptions",
    "AmazonCustomerByEmail",
    "build_put_object_acl_request",
    "CannedAcl",
    "CanonicalUser",
    "Grant",
    "Group",
    "HttpxTransport",
    "InvalidAclKeyword",
    "InvalidGranteeShape",
    "InvalidPermission",
    "MalformedAclError",
    "ObjectAclClient",
    "Owner",
    "Permission",
    "put_object_acl",
    "S3Error",
    "ServiceError",
    "Transport",
]
