"""Swagger 2.0 writer.

Serializes a (normalized) Document as a Swagger 2.0 JSON document. Anything
Swagger 2.0 cannot express is dropped or mapped to its nearest equivalent.
"""

import json
from typing import IO, Any
from urllib.parse import urlsplit

from .model import Document, Operation, Parameter, PathItem, RequestBody, Response, Schema
from .upgrade import FORM_MEDIA_TYPES

SWAGGER_VERSION = "2.0"

PARAMETER_LOCATIONS = ("path", "query", "header", "formData", "body")

# Schema keywords Swagger 2.0 has no equivalent for.
UNSUPPORTED_SCHEMA_KEYS = (
    "oneOf", "anyOf", "not", "writeOnly", "deprecated", "prefixItems", "$schema",
    "const", "examples", "nullable",
)

_REF_PREFIXES = {
    "#/components/schemas/": "#/definitions/",
    "#/components/parameters/": "#/parameters/",
    "#/components/responses/": "#/responses/",
}

_OAUTH_FLOWS = {
    "implicit": "implicit",
    "password": "password",
    "clientCredentials": "application",
    "authorizationCode": "accessCode",
}


def write_v2(document: Document, stream: IO[str]) -> None:
    """Write the document as indented Swagger 2.0 JSON."""
    json.dump(to_swagger_v2(document), stream, indent=2, ensure_ascii=False, default=str)


def to_swagger_v2(document: Document) -> dict[str, Any]:
    """Build the Swagger 2.0 mapping for a document."""
    info = dict(document.info)
    # Swagger 2.0 requires a string version; YAML reads `version: 1.0` as a float
    if isinstance(info.get("version"), (int, float)) and not isinstance(info["version"], bool):
        info["version"] = str(info["version"])
    result: dict[str, Any] = {"swagger": SWAGGER_VERSION, "info": info}
    result.update(_server_fields(document.servers or []))
    result.update(document.extensions())

    paths = {}
    for path, item in document.paths.items():
        paths[path] = _path_item(document, item)
    result["paths"] = paths

    components = document.components
    if components is not None:
        if components.schemas:
            result["definitions"] = {
                name: convert_schema(schema.dump()) for name, schema in components.schemas.items()
            }
        if components.parameters:
            parameters = {}
            for name, param in components.parameters.items():
                converted = _parameter(document, param)
                if converted is not None:
                    parameters[name] = converted
            result["parameters"] = parameters
        if components.responses:
            result["responses"] = {
                name: _response(document, resp) for name, resp in components.responses.items()
            }
        if components.security_schemes:
            definitions = {}
            for name, scheme in components.security_schemes.items():
                converted = _security_scheme(scheme)
                if converted is not None:
                    definitions[name] = converted
            result["securityDefinitions"] = definitions

    if document.security is not None:
        result["security"] = document.security
    if document.tags is not None:
        result["tags"] = document.tags
    if document.external_docs is not None:
        result["externalDocs"] = document.external_docs
    return result


def convert_schema(node: Any) -> Any:
    """Convert an OpenAPI 3.x schema (plain data) to a Swagger 2.0 schema."""
    if isinstance(node, list):
        return [convert_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    result = {}
    for key, value in node.items():
        if key in UNSUPPORTED_SCHEMA_KEYS:
            continue
        if key in ("example", "default", "enum"):
            result[key] = value
        elif key == "$ref" and isinstance(value, str):
            result[key] = rewrite_ref(value)
        elif key == "discriminator" and isinstance(value, dict):
            result[key] = value.get("propertyName")
        elif key in ("properties", "patternProperties", "definitions"):
            result[key] = {
                name: convert_schema(sub) for name, sub in value.items()
            } if isinstance(value, dict) else value
        else:
            result[key] = convert_schema(value)

    if node.get("nullable") is True:
        result["x-nullable"] = True

    types = node.get("type")
    if isinstance(types, list):
        non_null = [t for t in types if t != "null"]
        if non_null:
            result["type"] = non_null[0]
        else:
            result.pop("type", None)
        if "null" in types:
            result["x-nullable"] = True

    if "const" in node and "enum" not in node:
        result["enum"] = [node["const"]]
    if isinstance(node.get("examples"), list) and node["examples"] and "example" not in node:
        result["example"] = node["examples"][0]

    minimum = node.get("exclusiveMinimum")
    if isinstance(minimum, (int, float)) and not isinstance(minimum, bool):
        result["minimum"] = minimum
        result["exclusiveMinimum"] = True
    maximum = node.get("exclusiveMaximum")
    if isinstance(maximum, (int, float)) and not isinstance(maximum, bool):
        result["maximum"] = maximum
        result["exclusiveMaximum"] = True
    return result


def rewrite_ref(ref: str) -> str:
    for old, new in _REF_PREFIXES.items():
        if ref.startswith(old):
            return new + ref[len(old):]
    return ref


def _server_fields(servers: list[dict[str, Any]]) -> dict[str, Any]:
    if not servers:
        return {}
    result: dict[str, Any] = {}
    first = urlsplit(_expand_server_url(servers[0]))
    if first.netloc:
        result["host"] = first.netloc
    if first.path and first.path != "/":
        result["basePath"] = first.path

    schemes = []
    for server in servers:
        parts = urlsplit(_expand_server_url(server))
        if parts.scheme and parts.netloc == first.netloc and parts.scheme not in schemes:
            schemes.append(parts.scheme)
    if schemes:
        result["schemes"] = schemes
    return result


def _expand_server_url(server: dict[str, Any]) -> str:
    url = str(server.get("url", ""))
    for name, variable in (server.get("variables") or {}).items():
        if isinstance(variable, dict) and "default" in variable:
            url = url.replace("{" + name + "}", str(variable["default"]))
    return url


def _path_item(document: Document, item: PathItem) -> dict[str, Any]:
    if item.ref:
        return {"$ref": item.ref}
    result: dict[str, Any] = {}
    for method, operation in item.operations():
        if method == "trace":
            continue
        result[method] = _operation(document, operation)
    if item.parameters:
        result["parameters"] = _parameters(document, item.parameters)
    result.update(item.extensions())
    return result


def _operation(document: Document, operation: Operation) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key in ("tags", "summary", "description"):
        value = getattr(operation, key)
        if value is not None:
            result[key] = value
    extra = operation.model_extra or {}
    if "externalDocs" in extra:
        result["externalDocs"] = extra["externalDocs"]
    if operation.operation_id:
        result["operationId"] = operation.operation_id

    parameters = _parameters(document, operation.parameters or [])
    if operation.request_body is not None:
        body = document.resolve_request_body(operation.request_body)
        if body.content:
            result["consumes"] = list(body.content)
        parameters.extend(_body_parameters(document, body))

    produces = []
    for response in (operation.responses or {}).values():
        for media_type in (document.resolve_response(response).content or {}):
            if media_type not in produces:
                produces.append(media_type)
    if produces:
        result["produces"] = produces

    if parameters:
        result["parameters"] = parameters
    result["responses"] = {
        code: _response(document, response)
        for code, response in (operation.responses or {}).items()
    }
    if operation.deprecated is not None:
        result["deprecated"] = operation.deprecated
    if operation.security is not None:
        result["security"] = operation.security
    result.update(operation.extensions())
    return result


def _parameters(document: Document, parameters: list[Parameter]) -> list[dict[str, Any]]:
    result = []
    for param in parameters:
        converted = _parameter(document, param)
        if converted is not None:
            result.append(converted)
    return result


def _parameter(document: Document, param: Parameter) -> dict[str, Any] | None:
    if param.ref:
        target = document.resolve_parameter(param)
        if target.location == "cookie":
            return None
        return {"$ref": rewrite_ref(param.ref)}
    if param.location not in PARAMETER_LOCATIONS:
        return None

    result: dict[str, Any] = {"name": param.name, "in": param.location}
    if param.description is not None:
        result["description"] = param.description
    if param.location == "path":
        result["required"] = True
    elif param.required is not None:
        result["required"] = param.required

    schema = param.schema_
    if schema is None and param.content:
        schema = next(iter(param.content.values())).schema_
    if schema is not None:
        result.update(_flatten_schema(document, schema.dump()))
    result.setdefault("type", "string")
    result.update(param.extensions())
    return result


def _flatten_schema(document: Document, schema: dict[str, Any]) -> dict[str, Any]:
    """Turn a schema into the inline keywords of a non-body parameter or header."""
    converted = convert_schema(_registered_schema(document, schema))
    converted.pop("example", None)
    for key in ("properties", "required", "allOf", "additionalProperties", "discriminator",
                "readOnly", "xml", "externalDocs", "title"):
        converted.pop(key, None)
    return converted


def _registered_schema(document: Document, schema: dict[str, Any]) -> dict[str, Any]:
    """Inline a ``$ref`` schema; Swagger 2.0 only allows references in body schemas."""
    if "$ref" not in schema:
        return schema
    resolved = document.resolve_schema(Schema(ref=schema["$ref"]))
    return {} if resolved.ref else resolved.dump()


def _body_parameters(document: Document, body: RequestBody) -> list[dict[str, Any]]:
    content = body.content or {}
    if not content:
        return []

    form_type = next((ct for ct in content if ct in FORM_MEDIA_TYPES), None)
    if form_type is not None:
        schema = content[form_type].schema_
        return _form_parameters(document, schema.dump() if schema is not None else {})

    media = next(iter(content.values()))
    extra = body.model_extra or {}
    param: dict[str, Any] = {"name": extra.get("x-bodyName", "body"), "in": "body"}
    if body.description is not None:
        param["description"] = body.description
    if body.required is not None:
        param["required"] = body.required
    param["schema"] = convert_schema(media.schema_.dump()) if media.schema_ is not None else {}
    return [param]


def _form_parameters(document: Document, schema: dict[str, Any]) -> list[dict[str, Any]]:
    schema = _registered_schema(document, schema)
    required = set(schema.get("required") or [])
    result = []
    for name, prop in (schema.get("properties") or {}).items():
        param: dict[str, Any] = {"name": name, "in": "formData"}
        if isinstance(prop, dict) and prop.get("description"):
            param["description"] = prop["description"]
        param["required"] = name in required
        prop = dict(prop) if isinstance(prop, dict) else {}
        prop.pop("description", None)
        if prop.get("type") == "string" and prop.get("format") == "binary":
            prop = {"type": "file"}
        param.update(_flatten_schema(document, prop))
        param.setdefault("type", "string")
        result.append(param)
    return result


def _response(document: Document, response: Response) -> dict[str, Any]:
    if response.ref:
        return {"$ref": rewrite_ref(response.ref)}

    result: dict[str, Any] = {"description": response.description or ""}
    content = response.content or {}
    if content:
        first = next(iter(content.values()))
        if first.schema_ is not None:
            result["schema"] = convert_schema(first.schema_.dump())
        examples = {
            media_type: media.example
            for media_type, media in content.items()
            if media.example is not None
        }
        if examples:
            result["examples"] = examples
    if response.headers:
        result["headers"] = {
            name: _header(document, header) for name, header in response.headers.items()
        }
    result.update(response.extensions())
    return result


def _header(document: Document, header: Any) -> Any:
    if not isinstance(header, dict):
        return header
    if "$ref" in header:
        # Swagger 2.0 has no reusable headers; inline the registered one.
        name = header["$ref"].rsplit("/", 1)[-1]
        registry = (document.components.headers or {}) if document.components else {}
        header = registry.get(name, {})
    result: dict[str, Any] = {}
    if header.get("description"):
        result["description"] = header["description"]
    schema = header.get("schema") or {}
    result.update(_flatten_schema(document, schema))
    result.setdefault("type", "string")
    return result


def _security_scheme(scheme: Any) -> dict[str, Any] | None:
    if not isinstance(scheme, dict):
        return None
    kind = scheme.get("type")
    if kind == "apiKey":
        result = {"type": "apiKey", "name": scheme.get("name"), "in": scheme.get("in")}
    elif kind == "http" and str(scheme.get("scheme", "")).lower() == "basic":
        result = {"type": "basic"}
    elif kind == "http" and str(scheme.get("scheme", "")).lower() == "bearer":
        result = {"type": "apiKey", "name": "Authorization", "in": "header"}
    elif kind == "oauth2" and scheme.get("flows"):
        flow_name, flow = next(iter(scheme["flows"].items()))
        result = {"type": "oauth2", "flow": _OAUTH_FLOWS.get(flow_name, flow_name)}
        for key in ("authorizationUrl", "tokenUrl"):
            if key in flow:
                result[key] = flow[key]
        result["scopes"] = flow.get("scopes") or {}
    else:
        return None
    if scheme.get("description"):
        result["description"] = scheme["description"]
    return result
