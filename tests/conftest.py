"""Shared pytest fixtures for objectacl tests.

Two transport doubles are provided:

- ``RecordingTransport`` captures every call and answers with a canned
  ``httpx.Response``.
- ``s3_app`` is a small FastAPI app standing in for an S3-compatible
  endpoint. It checks ``Content-MD5``, parses ACL bodies and stores the
  result per (bucket, key). It is reached through ``httpx.ASGITransport``.
"""

import base64
import hashlib
import logging

import httpx
import pytest
from fastapi import FastAPI, Request, Response
from httpx import ASGITransport, AsyncClient

from objectacl.errors import S3Error
from objectacl.models import (
    AccessControlPolicy,
    AmazonCustomerByEmail,
    CanonicalUser,
    Grant,
    Group,
    Owner,
    Permission,
)
from objectacl.transport import HttpxTransport
from objectacl.xml_utils import parse_access_control_policy

SERVICE_HOST = "s3.test"
ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


class RecordingTransport:
    """Transport double that records calls and returns a fixed response."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.response = response if response is not None else httpx.Response(200)
        self.calls: list[dict] = []

    async def send_request(self, method, host, path, query, headers, body):
        self.calls.append(
            {
                "method": method,
                "host": host,
                "path": path,
                "query": dict(query),
                "headers": dict(headers),
                "body": body,
            }
        )
        return self.response


def _error_xml(code: str, message: str, request_id: str, resource: str = "") -> str:
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<Error>",
        f"<Code>{code}</Code>",
        f"<Message>{message}</Message>",
    ]
    if resource:
        parts.append(f"<Resource>{resource}</Resource>")
    parts.append(f"<RequestId>{request_id}</RequestId>")
    parts.append("</Error>")
    return "\n".join(parts)


def create_s3_app() -> FastAPI:
    """Build a minimal S3-compatible endpoint that accepts PutObjectAcl."""
    app = FastAPI()
    app.state.acls = {}
    app.state.requests = []

    @app.put("/{key:path}")
    async def put_object_acl(key: str, request: Request) -> Response:
        bucket = request.headers["host"].split(".", 1)[0]
        body = await request.body()
        app.state.requests.append(
            {
                "bucket": bucket,
                "key": key,
                "query": dict(request.query_params),
                "headers": dict(request.headers),
                "body": body,
            }
        )

        if "acl" not in request.query_params:
            return Response(status_code=501)

        if key == "missing.txt":
            return Response(
                content=_error_xml("NoSuchKey", "The specified key does not exist.", "REQ123", f"/{key}"),
                status_code=404,
                media_type="application/xml",
            )

        expected_md5 = base64.b64encode(hashlib.md5(body).digest()).decode()
        if request.headers.get("content-md5") != expected_md5:
            return Response(
                content=_error_xml("BadDigest", "The Content-MD5 you specified did not match what we received.", "REQ456"),
                status_code=400,
                media_type="application/xml",
            )

        if body:
            try:
                acl = parse_access_control_policy(body)
            except S3Error as exc:
                return Response(
                    content=_error_xml(exc.code, exc.message, "REQ789"),
                    status_code=400,
                    media_type="application/xml",
                )
        else:
            acl = request.headers.get("x-amz-acl")

        app.state.acls[(bucket, key, request.query_params.get("versionId"))] = acl
        return Response(status_code=200, headers={"x-amz-request-id": "OK1"})

    return app


@pytest.fixture
def policy() -> AccessControlPolicy:
    """A policy using all three grantee variants."""
    return AccessControlPolicy(
        owner=Owner(id="owner-1", display_name="me"),
        grants=[
            Grant(
                grantee=CanonicalUser(id="owner-1", display_name="me"),
                permission=Permission.FULL_CONTROL,
            ),
            Grant(
                grantee=AmazonCustomerByEmail(email="friend@example.com"),
                permission=Permission.READ_ACP,
            ),
            Grant(grantee=Group(uri=ALL_USERS_URI), permission=Permission.READ),
        ],
    )


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def s3_app() -> FastAPI:
    return create_s3_app()


@pytest.fixture
async def asgi_transport(s3_app):
    """An ``HttpxTransport`` whose requests are served by ``s3_app``."""
    async with AsyncClient(transport=ASGITransport(app=s3_app)) as client:
        yield HttpxTransport(scheme="http", client=client)


@pytest.fixture
def restore_root_logging():
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
