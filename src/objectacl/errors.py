"""S3-compatible error definitions for objectacl."""


class S3Error(Exception):
    """An S3-compatible error with code, message, and HTTP status.

    Attributes:
        code: The S3 error code string (e.g. "InvalidArgument", "AccessDenied").
        message: Human-readable error description.
        http_status: The HTTP status code associated with the error.
        extra_fields: Additional key-value pairs describing the failing input.
    """

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int = 400,
        extra_fields: dict[str, str] | None = None,
    ) -> None:
        """Initialize the S3 error.

        Args:
            code: S3 error code.
            message: Error description.
            http_status: HTTP status code (default 400).
            extra_fields: Optional extra context fields.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra_fields = extra_fields or {}


# -- Client-side validation errors ---------------------------------------------


class InvalidArgument(S3Error):
    """An invalid argument was provided."""

    def __init__(self, message: str = "Invalid Argument") -> None:
        super().__init__(code="InvalidArgument", message=message, http_status=400)


class InvalidAclKeyword(S3Error):
    """The canned ACL keyword is not one of the recognized values."""

    def __init__(self, value: str = "") -> None:
        super().__init__(
            code="InvalidArgument",
            message=f"Invalid canned ACL: {value!r}",
            http_status=400,
            extra_fields={"ArgumentName": "x-amz-acl", "ArgumentValue": value},
        )
        self.value = value


class InvalidGranteeShape(S3Error):
    """A grantee's fields do not match any recognized grantee type."""

    def __init__(self, fields: list[str] | None = None, index: int | None = None) -> None:
        fields = sorted(fields or [])
        where = f"grant {index}" if index is not None else "grantee"
        super().__init__(
            code="InvalidArgument",
            message=(
                f"Unrecognized grantee shape in {where}: fields {fields}; expected "
                "['DisplayName', 'ID'], ['EmailAddress'] or ['URI']"
            ),
            http_status=400,
            extra_fields={"ArgumentName": "Grantee", "ArgumentValue": ",".join(fields)},
        )
        self.fields = fields
        self.index = index


class InvalidPermission(S3Error):
    """A grant names a permission outside the ACL permission set."""

    def __init__(self, value: str = "", index: int | None = None) -> None:
        super().__init__(
            code="InvalidArgument",
            message=f"Invalid permission: {value!r}",
            http_status=400,
            extra_fields={"ArgumentName": "Permission", "ArgumentValue": str(value)},
        )
        self.value = value
        self.index = index


class MalformedAclError(S3Error):
    """The ACL input is neither a canned keyword nor a well-formed policy."""

    def __init__(
        self,
        message: str = "The ACL you provided is not well formed or did not validate against our published schema.",
    ) -> None:
        super().__init__(code="MalformedACLError", message=message, http_status=400)


# -- Service errors ------------------------------------------------------------


class ServiceError(S3Error):
    """The service answered with a non-success status.

    The code and message come verbatim from the service's error document
    when one was returned.
    """

    def __init__(
        self,
        http_status: int,
        code: str = "",
        message: str = "",
        request_id: str = "",
        resource: str = "",
    ) -> None:
        extra: dict[str, str] = {}
        if request_id:
            extra["RequestId"] = request_id
        if resource:
            extra["Resource"] = resource
        super().__init__(
            code=code or f"HTTP{http_status}",
            message=message or f"Service returned HTTP {http_status}",
            http_status=http_status,
            extra_fields=extra,
        )
        self.request_id = request_id
        self.resource = resource

    def __str__(self) -> str:
        return f"{self.code} ({self.http_status}): {self.message}"
