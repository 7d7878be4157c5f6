"""Prepare a parsed OpenAPI document for Swagger 2.0 output.

Walks every operation once, in document order, and
- fills in missing operationIds (when asked to),
- collapses named ``examples`` into a single ``example``,
- copies the request body example onto its schema when the schema has none.

Nothing is added to or removed from the document structure.
"""

from typing import Callable

from openapi_downgrade.document.model import Document, MediaType, Operation
from openapi_downgrade.transform.examples import consolidate_examples
from openapi_downgrade.transform.operation_id import generate_operation_id

COMPAT_PREFIX = "[OpenAPIv2 compatibility]"


def normalize(
    document: Document,
    generate_operation_ids: bool = False,
    log: Callable[[str], None] | None = None,
) -> None:
    """Normalize ``document`` in place. Messages go to ``log`` if given."""
    log = log or _discard

    for path, item in document.paths.items():
        for method, operation in item.operations():
            if generate_operation_ids and not (operation.operation_id or "").strip():
                parameters = [document.resolve_parameter(p) for p in operation.parameters or []]
                operation.operation_id = generate_operation_id(method, path, parameters)

            description = f"{path} {method.upper()}"
            _normalize_responses(document, operation, description, log)
            _normalize_parameters(document, operation, description, log)
            _normalize_request_body(document, operation, description, log)


def _normalize_responses(document, operation: Operation, description: str, log) -> None:
    for code, response in (operation.responses or {}).items():
        response = document.resolve_response(response)
        for media_type, content in (response.content or {}).items():
            _consolidate(document, content, f"{description} response {code} {media_type}", log)


def _normalize_parameters(document, operation: Operation, description: str, log) -> None:
    for param in operation.parameters or []:
        param = document.resolve_parameter(param)
        for media_type, content in (param.content or {}).items():
            _consolidate(document, content, f"{description} parameter {param.name} {media_type}", log)


def _normalize_request_body(document, operation: Operation, description: str, log) -> None:
    if operation.request_body is None:
        return
    body = document.resolve_request_body(operation.request_body)
    for media_type, content in (body.content or {}).items():
        _consolidate(document, content, f"{description} requestBody {media_type}", log)

        if content.example is None or content.schema_ is None:
            continue
        schema = document.resolve_schema(content.schema_)
        if schema.example is not None:
            continue

        name = content.schema_.ref.rsplit("/", 1)[-1] if content.schema_.ref else "item"
        log(
            f"{COMPAT_PREFIX} Setting type example from sample requestBody example "
            f"for {name} from {operation.operation_id}"
        )
        schema.example = content.example


def _consolidate(document: Document, content: MediaType, description: str, log) -> None:
    if consolidate_examples(content, document):
        log(
            f"{COMPAT_PREFIX} Setting example from first of multiple OpenAPIv3 examples "
            f"for {description}"
        )


def _discard(message: str) -> None:
    pass
