"""PutObjectAcl client for objectacl.

Validation and assembly happen synchronously before the transport is
awaited, so invalid input never produces a partial request. The client holds
only configuration and its transport; every call is independent.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from objectacl import metrics
from objectacl.config import ServiceConfig
from objectacl.errors import S3Error, ServiceError
from objectacl.models import AccessControlPolicy, AclRequestOptions, CannedAcl
from objectacl.request import AclRequest, build_put_object_acl_request
from objectacl.transport import Transport, TransportResponse
from objectacl.xml_utils import parse_error

logger = logging.getLogger(__name__)

EXPECTED_STATUS = 200
OPERATION = "PutObjectAcl"

AclInput = AccessControlPolicy | CannedAcl | Mapping[str, Any] | str


class ObjectAclClient:
    """Sets object ACLs on an S3-compatible service.

    Attributes:
        transport: The collaborator that sends requests.
        service_host: Host the bucket name is prefixed onto.
    """

    def __init__(self, transport: Transport, service_host: str) -> None:
        self.transport = transport
        self.service_host = service_host

    @classmethod
    def from_config(cls, transport: Transport, config: ServiceConfig) -> "ObjectAclClient":
        """Create a client for the configured service host."""
        return cls(transport, config.host)

    async def put_object_acl(
        self,
        bucket_name: str,
        object_name: str,
        acl: AclInput,
        options: AclRequestOptions | Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        """Change the access control list of an object.

        Implements: PUT /{key}?acl on ``{bucket}.{service_host}``

        Args:
            bucket_name: Bucket holding the object.
            object_name: Object key.
            acl: Canned ACL keyword (``private``, ``public-read``,
                ``public-read-write``, ``authenticated-read``) or an access
                control policy.
            options: Optional ``versionId`` of the object version to modify.

        Returns:
            The transport's response, unchanged.

        Raises:
            InvalidAclKeyword: Unknown canned ACL; nothing is sent.
            InvalidGranteeShape: Unrecognized grantee fields; nothing is sent.
            ServiceError: The service answered with a non-200 status.
        """
        try:
            request = build_put_object_acl_request(
                bucket_name,
                object_name,
                acl,
                options,
                service_host=self.service_host,
            )
        except S3Error as exc:
            logger.debug(
                "PutObjectAcl input rejected: %s",
                exc.message,
                extra={"operation": OPERATION, "code": exc.code},
            )
            metrics.record_request(OPERATION, "invalid")
            raise

        return await self.send(request)

    async def send(self, request: AclRequest) -> TransportResponse:
        """Dispatch an assembled request and check its status."""
        start = time.monotonic()
        response = await self.transport.send_request(
            request.method,
            request.host,
            request.path,
            request.query,
            request.headers,
            request.body,
        )
        duration_ms = round((time.monotonic() - start) * 1000, 2)
        status = response.status_code

        if status != EXPECTED_STATUS:
            details = parse_error(response.content)
            request_id = details["request_id"] or response.headers.get("x-amz-request-id", "")
            error = ServiceError(
                status,
                code=details["code"],
                message=details["message"],
                request_id=request_id,
                resource=details["resource"],
            )
            logger.warning(
                "PutObjectAcl %s%s failed: HTTP %d %s",
                request.host,
                request.path,
                status,
                error.code,
                extra={
                    **_log_context(request),
                    "status": status,
                    "code": error.code,
                    "request_id": request_id or None,
                    "duration_ms": duration_ms,
                },
            )
            metrics.record_request(OPERATION, str(status), len(request.body))
            raise error

        logger.info(
            "PutObjectAcl %s%s -> %d",
            request.host,
            request.path,
            status,
            extra={
                **_log_context(request),
                "status": status,
                "request_id": response.headers.get("x-amz-request-id"),
                "duration_ms": duration_ms,
            },
        )
        metrics.record_request(OPERATION, str(status), len(request.body))
        return response


def _log_context(request: AclRequest) -> dict[str, Any]:
    return {
        "operation": OPERATION,
        "method": request.method,
        "host": request.host,
        "path": request.path,
        "version_id": request.query.get("versionId"),
    }


async def put_object_acl(
    transport: Transport,
    service_host: str,
    bucket_name: str,
    object_name: str,
    acl: AclInput,
    options: AclRequestOptions | Mapping[str, Any] | None = None,
) -> TransportResponse:
    """One-shot helper: ``ObjectAclClient(transport, service_host).put_object_acl(...)``."""
    client = ObjectAclClient(transport, service_host)
    return await client.put_object_acl(bucket_name, object_name, acl, options)
