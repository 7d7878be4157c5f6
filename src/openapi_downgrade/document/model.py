"""Document model for parsed OpenAPI descriptions.

The reader builds these models from OpenAPI 3.x input (Swagger 2.0 input is
lifted into the same shape first), the normalizer mutates them in place and
the writer serializes them as Swagger 2.0.

Only the members the conversion pipeline touches are declared; everything
else (including ``x-`` extensions) is kept as extra data so nothing is lost.
"""

from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

COMPONENTS_PREFIX = "#/components/"


class OpenApiModel(BaseModel):
    """Base for all document nodes."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def extensions(self) -> dict[str, Any]:
        """Return the ``x-`` members of this node."""
        extra = self.model_extra or {}
        return {k: v for k, v in extra.items() if k.startswith("x-")}

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Schema(OpenApiModel):
    """A schema object. Nested keywords stay as plain extra data."""

    ref: str | None = Field(default=None, alias="$ref")
    example: Any = None


class Example(OpenApiModel):
    ref: str | None = Field(default=None, alias="$ref")
    summary: str | None = None
    description: str | None = None
    value: Any = None


class MediaType(OpenApiModel):
    """Content of one media type: a schema plus example(s)."""

    schema_: Schema | None = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Example] | None = None


class Parameter(OpenApiModel):
    ref: str | None = Field(default=None, alias="$ref")
    name: str | None = None
    location: str | None = Field(default=None, alias="in")  # path / query / header / cookie
    description: str | None = None
    required: bool | None = None
    schema_: Schema | None = Field(default=None, alias="schema")
    content: dict[str, MediaType] | None = None


class RequestBody(OpenApiModel):
    ref: str | None = Field(default=None, alias="$ref")
    description: str | None = None
    required: bool | None = None
    content: dict[str, MediaType] | None = None


class Response(OpenApiModel):
    ref: str | None = Field(default=None, alias="$ref")
    description: str | None = None
    headers: dict[str, Any] | None = None
    content: dict[str, MediaType] | None = None


class Operation(OpenApiModel):
    operation_id: str | None = Field(default=None, alias="operationId")
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    responses: dict[str, Response] | None = None
    deprecated: bool | None = None
    security: list[dict[str, Any]] | None = None


class PathItem(OpenApiModel):
    ref: str | None = Field(default=None, alias="$ref")
    summary: str | None = None
    description: str | None = None
    parameters: list[Parameter] | None = None
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    trace: Operation | None = None

    _method_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_method_order(cls, data, handler):
        item = handler(data)
        if isinstance(data, dict):
            item._method_order = [k for k in data if k in HTTP_METHODS]
        return item

    def operations(self) -> Iterator[tuple[str, Operation]]:
        """Yield (method, operation) pairs in declaration order.

        Operations assigned after parsing follow in the get, put, post,
        delete, options, head, patch, trace order.
        """
        declared = [m for m in self._method_order if m in HTTP_METHODS]
        rest = [m for m in HTTP_METHODS if m not in declared]
        for method in declared + rest:
            operation = getattr(self, method)
            if operation is not None:
                yield method, operation


class Components(OpenApiModel):
    schemas: dict[str, Schema] | None = None
    responses: dict[str, Response] | None = None
    parameters: dict[str, Parameter] | None = None
    examples: dict[str, Example] | None = None
    request_bodies: dict[str, RequestBody] | None = Field(default=None, alias="requestBodies")
    headers: dict[str, Any] | None = None
    security_schemes: dict[str, Any] | None = Field(default=None, alias="securitySchemes")


class Document(OpenApiModel):
    """A complete OpenAPI document.

    Nodes referenced through ``$ref`` are looked up in ``components``; the
    lookups return the registry objects themselves, so mutating a resolved
    schema is visible everywhere that schema is referenced.
    """

    openapi: str
    info: dict[str, Any]
    servers: list[dict[str, Any]] | None = None
    paths: dict[str, PathItem] = {}
    components: Components | None = None
    security: list[dict[str, Any]] | None = None
    tags: list[dict[str, Any]] | None = None
    external_docs: dict[str, Any] | None = Field(default=None, alias="externalDocs")

    @field_validator("paths", mode="before")
    @classmethod
    def _empty_paths(cls, value):
        return {} if value is None else value

    def resolve_schema(self, schema: Schema) -> Schema:
        return self._resolve(schema, "schemas")

    def resolve_example(self, example: Example) -> Example:
        return self._resolve(example, "examples")

    def resolve_parameter(self, parameter: Parameter) -> Parameter:
        return self._resolve(parameter, "parameters")

    def resolve_response(self, response: Response) -> Response:
        return self._resolve(response, "responses")

    def resolve_request_body(self, request_body: RequestBody) -> RequestBody:
        return self._resolve(request_body, "requestBodies")

    def _resolve(self, node, section: str):
        """Follow ``$ref`` chains into ``#/components/<section>/``.

        Unresolvable references and cycles leave the last reachable node.
        """
        seen: set[str] = set()
        registry = self._registry(section)
        prefix = f"{COMPONENTS_PREFIX}{section}/"
        while node.ref and node.ref.startswith(prefix) and node.ref not in seen:
            seen.add(node.ref)
            target = registry.get(node.ref[len(prefix):])
            if target is None:
                break
            node = target
        return node

    def _registry(self, section: str) -> dict:
        if self.components is None:
            return {}
        for name, field in Components.model_fields.items():
            if (field.alias or name) == section:
                return getattr(self.components, name) or {}
        return {}
