"""Content-integrity digests for request bodies."""

import base64
import hashlib


def content_md5(body: bytes) -> str:
    """Compute the ``Content-MD5`` header value for a request body.

    The digest is the base64-encoded binary MD5 of exactly the bytes that
    will be sent. An empty body yields the MD5 of zero bytes.

    Args:
        body: The serialized request body.

    Returns:
        The base64 digest string.
    """
    return base64.b64encode(hashlib.md5(body).digest()).decode("ascii")
