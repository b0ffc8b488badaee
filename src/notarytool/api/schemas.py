"""
Wire schemas for the Notary API.

Pydantic models that mirror the vendor REST contract field-for-field. Field
names are snake_case in Python and camelCase on the wire (via aliases).
Unknown fields are ignored; missing required fields fail validation.

Response envelopes:
    {"data": <object-or-array>, "meta": {}}

Error responses:
    {"errors": [{"id", "status", "code", "title", "detail"}]}
"""

from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from notarytool.errors.exceptions import JsonParseError


ModelT = TypeVar("ModelT", bound=BaseModel)


# =============================================================================
# Submission status / list
# =============================================================================


class SubmissionAttributesJson(BaseModel):
    """Attributes of one submission, as returned by status and list calls.

    ``created_date`` is kept as text here; parsing into a timestamp happens
    when the domain record is built so a bad value never fails decoding.
    """

    created_date: str = Field(..., alias="createdDate")
    name: str
    status: str

    model_config = {"populate_by_name": True}


class SubmissionDataJson(BaseModel):
    attributes: SubmissionAttributesJson
    id: str
    type: str


class SubmissionResponseJson(BaseModel):
    """``GET submissions/{id}``"""

    data: SubmissionDataJson
    meta: dict[str, Any] = Field(default_factory=dict)


class SubmissionListResponseJson(BaseModel):
    """``GET submissions``"""

    data: list[SubmissionDataJson]
    meta: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Submission log
# =============================================================================


class SubmissionLogAttributesJson(BaseModel):
    developer_log_url: str = Field(..., alias="developerLogUrl")

    model_config = {"populate_by_name": True}


class SubmissionLogDataJson(BaseModel):
    attributes: SubmissionLogAttributesJson
    id: str
    type: str


class SubmissionLogUrlResponseJson(BaseModel):
    """``GET submissions/{id}/logs``"""

    data: SubmissionLogDataJson
    meta: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# New submission
# =============================================================================


class Notification(BaseModel):
    """Webhook notification requested for a submission."""

    channel: str = Field(default="webhook", min_length=1)
    target: str = Field(..., min_length=1)


class NewSubmissionRequestJson(BaseModel):
    """Request body for ``POST submissions``."""

    notifications: list[Notification] = Field(default_factory=list)
    sha256: str = Field(
        ...,
        description="Lowercase hex SHA-256 digest of the software file",
        pattern=r"^[0-9a-fA-F]{64}$",
    )
    submission_name: str = Field(..., alias="submissionName", min_length=1)

    model_config = {"populate_by_name": True}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class NewSubmissionAttributesJson(BaseModel):
    """Temporary S3 upload credentials returned by ``POST submissions``."""

    aws_access_key_id: str = Field(..., alias="awsAccessKeyId")
    aws_secret_access_key: str = Field(..., alias="awsSecretAccessKey")
    aws_session_token: str = Field(..., alias="awsSessionToken")
    bucket: str
    object_key: str = Field(..., alias="object")

    model_config = {"populate_by_name": True}


class NewSubmissionDataJson(BaseModel):
    attributes: NewSubmissionAttributesJson
    id: str
    type: str


class NewSubmissionResponseJson(BaseModel):
    data: NewSubmissionDataJson
    meta: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Errors
# =============================================================================


class ErrorJson(BaseModel):
    id: str
    status: str
    code: str
    title: str
    detail: str


class ErrorResponseJson(BaseModel):
    errors: list[ErrorJson]


# =============================================================================
# JSON Web Token segments
# =============================================================================


class JwtHeaderJson(BaseModel):
    alg: str = "ES256"
    kid: str
    typ: str = "JWT"


class JwtPayloadJson(BaseModel):
    iss: str
    iat: int
    exp: int
    aud: str = "appstoreconnect-v1"
    scope: list[str] = Field(
        default_factory=lambda: ["GET /notary/v2/submissions"]
    )


# =============================================================================
# Decoding
# =============================================================================


def _describe_validation_error(exc: ValidationError) -> str:
    """Summarize a ValidationError as ``path: message`` pairs."""
    parts = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        parts.append(f"{path}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_json(
    model: type[ModelT], json_string: str | None
) -> tuple[ModelT | None, JsonParseError | None]:
    """
    Decode a response body into a wire schema model.

    Args:
        model: Target schema class
        json_string: Raw response body text (may be None)

    Returns:
        Tuple of (model instance or None, JsonParseError or None)
    """
    if json_string is None or not json_string.strip():
        return None, JsonParseError("Response body is empty", json_string)

    try:
        return model.model_validate_json(json_string), None
    except ValidationError as e:
        return None, JsonParseError(
            f"Error parsing {model.__name__}: {_describe_validation_error(e)}",
            json_string,
            cause=e,
        )


__all__ = [
    "SubmissionAttributesJson",
    "SubmissionDataJson",
    "SubmissionResponseJson",
    "SubmissionListResponseJson",
    "SubmissionLogAttributesJson",
    "SubmissionLogDataJson",
    "SubmissionLogUrlResponseJson",
    "Notification",
    "NewSubmissionRequestJson",
    "NewSubmissionAttributesJson",
    "NewSubmissionDataJson",
    "NewSubmissionResponseJson",
    "ErrorJson",
    "ErrorResponseJson",
    "JwtHeaderJson",
    "JwtPayloadJson",
    "parse_json",
]
