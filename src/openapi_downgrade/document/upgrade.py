"""Lift Swagger 2.0 documents into the OpenAPI 3 shape.

Only what the document model and the Swagger 2.0 writer need is carried
over, so a 2.0 input survives a read/write cycle.
"""

from typing import Any

FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_REF_PREFIXES = {
    "#/definitions/": "#/components/schemas/",
    "#/parameters/": "#/components/parameters/",
    "#/responses/": "#/components/responses/",
}

PARAMETER_REF = "#/components/parameters/"


def upgrade_v2(doc: dict) -> dict:
    """Convert a raw Swagger 2.0 mapping into a raw OpenAPI 3.0 mapping."""
    doc = _rewrite_refs(doc)
    consumes = doc.get("consumes") or ["application/json"]
    produces = doc.get("produces") or ["application/json"]

    result: dict[str, Any] = {"openapi": "3.0.0", "info": doc.get("info")}
    servers = _servers(doc)
    if servers:
        result["servers"] = servers
    for key in ("security", "tags", "externalDocs"):
        if key in doc:
            result[key] = doc[key]
    result.update({k: v for k, v in doc.items() if k.startswith("x-")})

    shared = doc.get("parameters") or {}
    paths = {}
    for path, item in (doc.get("paths") or {}).items():
        paths[path] = _path_item(item, consumes, produces, shared) if isinstance(item, dict) else item
    result["paths"] = paths

    components = _components(doc)
    if components:
        result["components"] = components
    return result


def _rewrite_refs(node):
    if isinstance(node, dict):
        out = {}
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                for old, new in _REF_PREFIXES.items():
                    if value.startswith(old):
                        value = new + value[len(old):]
                        break
            out[key] = _rewrite_refs(value)
        return out
    if isinstance(node, list):
        return [_rewrite_refs(item) for item in node]
    return node


def _servers(doc: dict) -> list[dict]:
    host = doc.get("host")
    base_path = doc.get("basePath") or ""
    if not host:
        return [{"url": base_path}] if base_path else []
    schemes = doc.get("schemes") or ["https"]
    return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]


def _path_item(item: dict, consumes: list[str], produces: list[str], shared: dict) -> dict:
    inherited = _inline_body_refs(item.get("parameters") or [], shared)
    result = {}
    for key, value in item.items():
        if key == "parameters":
            result[key] = [_parameter(p) for p in inherited if not _is_body_like(p)]
        elif isinstance(value, dict) and key in (
            "get", "put", "post", "delete", "options", "head", "patch"
        ):
            result[key] = _operation(value, consumes, produces, shared, inherited)
        else:
            result[key] = value
    return result


def _operation(
    op: dict,
    consumes: list[str],
    produces: list[str],
    shared: dict,
    inherited: list[dict] | None = None,
) -> dict:
    consumes = op.get("consumes") or consumes
    produces = op.get("produces") or produces
    result = {
        k: v for k, v in op.items()
        if k not in ("consumes", "produces", "parameters", "responses", "schemes")
    }

    params = _inline_body_refs(op.get("parameters") or [], shared)
    plain = [_parameter(p) for p in params if not _is_body_like(p)]
    if plain:
        result["parameters"] = plain

    # body / formData declared on the path item apply unless the operation has its own
    if not any(_is_body_like(p) for p in params):
        params = [p for p in inherited or [] if _is_body_like(p)]
    body = next((p for p in params if p.get("in") == "body"), None)
    form = [p for p in params if p.get("in") == "formData" and p.get("name")]
    if body is not None:
        request_body: dict[str, Any] = {
            "content": {ct: {"schema": body.get("schema", {})} for ct in consumes},
        }
        if body.get("description"):
            request_body["description"] = body["description"]
        if body.get("required"):
            request_body["required"] = True
        if body.get("name") and body["name"] != "body":
            request_body["x-bodyName"] = body["name"]
        result["requestBody"] = request_body
    elif form:
        result["requestBody"] = _form_request_body(form, consumes)

    responses = {}
    for code, resp in (op.get("responses") or {}).items():
        responses[str(code)] = _response(resp, produces)
    result["responses"] = responses
    return result


def _inline_body_refs(params: list, shared: dict) -> list[dict]:
    """Replace references to shared body/formData parameters by their definition.

    OpenAPI 3 has no body parameters, so such references cannot stay references.
    """
    result = []
    for p in params:
        if not isinstance(p, dict):
            continue
        ref = p.get("$ref")
        if isinstance(ref, str) and ref.startswith(PARAMETER_REF):
            target = shared.get(ref[len(PARAMETER_REF):])
            if isinstance(target, dict) and _is_body_like(target):
                p = target
        result.append(p)
    return result


def _is_body_like(param: dict) -> bool:
    return param.get("in") in ("body", "formData")


def _parameter(param: dict) -> dict:
    if "$ref" in param:
        return param
    keep = ("name", "in", "description", "required", "allowEmptyValue")
    result = {k: v for k, v in param.items() if k in keep or k.startswith("x-")}
    schema = {
        k: v for k, v in param.items()
        if k not in keep and not k.startswith("x-") and k != "collectionFormat"
    }
    if schema:
        result["schema"] = schema
    return result


def _form_request_body(form: list[dict], consumes: list[str]) -> dict:
    properties = {}
    required = []
    for p in form:
        properties[p["name"]] = {
            k: v for k, v in p.items() if k not in ("name", "in", "required")
        }
        if p.get("required"):
            required.append(p["name"])
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    media_types = [ct for ct in consumes if ct in FORM_MEDIA_TYPES] or [FORM_MEDIA_TYPES[0]]
    return {"content": {ct: {"schema": schema} for ct in media_types}}


def _response(resp: dict, produces: list[str]) -> dict:
    if not isinstance(resp, dict) or "$ref" in resp:
        return resp
    result = {k: v for k, v in resp.items() if k not in ("schema", "examples", "headers")}
    result.setdefault("description", "")
    if resp.get("headers"):
        result["headers"] = {
            name: _header(header) for name, header in resp["headers"].items()
        }
    examples = resp.get("examples") or {}
    if "schema" in resp or examples:
        content = {}
        for ct in produces:
            media: dict[str, Any] = {}
            if "schema" in resp:
                media["schema"] = resp["schema"]
            if ct in examples:
                media["example"] = examples[ct]
            content[ct] = media
        for ct, value in examples.items():
            content.setdefault(ct, {"example": value})
        result["content"] = content
    return result


def _header(header: dict) -> dict:
    result = {k: v for k, v in header.items() if k == "description" or k.startswith("x-")}
    schema = {
        k: v for k, v in header.items()
        if k != "description" and not k.startswith("x-") and k != "collectionFormat"
    }
    if schema:
        result["schema"] = schema
    return result


def _components(doc: dict) -> dict:
    components: dict[str, Any] = {}
    if doc.get("definitions"):
        components["schemas"] = doc["definitions"]
    if doc.get("parameters"):
        components["parameters"] = {
            name: _parameter(p) for name, p in doc["parameters"].items()
            if isinstance(p, dict) and not _is_body_like(p)
        }
    if doc.get("responses"):
        components["responses"] = {
            name: _response(r, doc.get("produces") or ["application/json"])
            for name, r in doc["responses"].items()
        }
    if doc.get("securityDefinitions"):
        components["securitySchemes"] = {
            name: _security_scheme(s) for name, s in doc["securityDefinitions"].items()
        }
    return components


_FLOW_NAMES = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}


def _security_scheme(scheme: dict) -> dict:
    kind = scheme.get("type")
    if kind == "basic":
        result = {"type": "http", "scheme": "basic"}
    elif kind == "oauth2":
        flow = {
            k: v for k, v in scheme.items()
            if k in ("authorizationUrl", "tokenUrl")
        }
        flow["scopes"] = scheme.get("scopes") or {}
        result = {
            "type": "oauth2",
            "flows": {_FLOW_NAMES.get(scheme.get("flow"), "implicit"): flow},
        }
    else:
        result = {k: v for k, v in scheme.items() if not k.startswith("x-")}
    if scheme.get("description"):
        result["description"] = scheme["description"]
    result.update({k: v for k, v in scheme.items() if k.startswith("x-")})
    return result
