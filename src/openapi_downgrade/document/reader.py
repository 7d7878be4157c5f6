"""OpenAPI / Swagger document reader.

Parses OpenAPI 3.x and Swagger 2.0 documents (YAML or JSON) into the
Document model. Structural problems are found with openapi-spec-validator
and reported as diagnostics, never raised.
"""

import json
from typing import IO

import yaml
from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)
from pydantic import BaseModel, ValidationError
from referencing.exceptions import Unresolvable

from .model import Document
from .upgrade import upgrade_v2


class OpenApiError(BaseModel):
    """A structural problem found while reading a document."""

    pointer: str = "#/"
    message: str

    def __str__(self) -> str:
        return f"{self.message} [{self.pointer}]"


class Diagnostic(BaseModel):
    errors: list[OpenApiError] = []
    specification_version: str | None = None


class ReadResult(BaseModel):
    document: Document | None = None
    diagnostic: Diagnostic


def load(stream: IO[bytes]) -> ReadResult:
    """Read a document from a binary stream."""
    diagnostic = Diagnostic()

    try:
        data = yaml.safe_load(stream.read().decode("utf-8"))
    except UnicodeDecodeError as e:
        diagnostic.errors.append(OpenApiError(message=f"Document is not valid UTF-8: {e}"))
        return ReadResult(diagnostic=diagnostic)
    except yaml.YAMLError as e:
        diagnostic.errors.append(OpenApiError(message=f"Unable to parse document: {e}"))
        return ReadResult(diagnostic=diagnostic)

    if not isinstance(data, dict):
        diagnostic.errors.append(OpenApiError(message="Document root must be a mapping"))
        return ReadResult(diagnostic=diagnostic)

    # JSON round trip: YAML integer keys and dates become strings
    data = json.loads(json.dumps(data, default=str))
    info = data.get("info")
    if isinstance(info, dict) and _is_number(info.get("version")):
        info["version"] = str(info["version"])

    version = detect_version(data)
    diagnostic.specification_version = version
    if version is None:
        diagnostic.errors.append(
            OpenApiError(message="Missing or unsupported 'openapi' / 'swagger' version")
        )
        return ReadResult(diagnostic=diagnostic)

    diagnostic.errors.extend(validate_structure(data, version))
    if diagnostic.errors:
        return ReadResult(diagnostic=diagnostic)

    if version == "2.0":
        data = upgrade_v2(data)

    try:
        document = Document.model_validate(data)
    except ValidationError as e:
        for err in e.errors():
            diagnostic.errors.append(OpenApiError(pointer=_pointer(err["loc"]), message=err["msg"]))
        return ReadResult(diagnostic=diagnostic)

    return ReadResult(document=document, diagnostic=diagnostic)


def detect_version(data: dict) -> str | None:
    """Return '2.0' or the 3.x version string, or None if unsupported."""
    if "openapi" in data:
        version = str(data["openapi"])
        return version if version.startswith("3.") else None
    if "swagger" in data:
        version = str(data["swagger"])
        return "2.0" if version in ("2", "2.0") else None
    return None


def validate_structure(data: dict, version: str) -> list[OpenApiError]:
    """Check ``data`` against the OpenAPI schema of its version."""
    if version == "2.0":
        validator = OpenAPIV2SpecValidator(data)
    elif version.startswith("3.0"):
        validator = OpenAPIV30SpecValidator(data)
    else:
        validator = OpenAPIV31SpecValidator(data)

    try:
        return [
            OpenApiError(pointer=_pointer(err.absolute_path), message=err.message)
            for err in validator.iter_errors()
        ]
    except Unresolvable as e:
        return [OpenApiError(message=f"Unresolvable reference: {e}")]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _pointer(parts) -> str:
    """JSON pointer for a path of keys, escaped per RFC 6901."""
    return "#/" + "/".join(str(part).replace("~", "~0").replace("/", "~1") for part in parts)
