"""operationId synthesis for operations that do not declare one."""

import re

from openapi_downgrade.document.model import Parameter

API_PREFIX = "/api/"

_WORD_SEPARATOR = re.compile(r"[\W_]+")


def generate_operation_id(method: str, path: str, parameters: list[Parameter] | None) -> str:
    """Build an operationId from the method, the path and its path parameters.

    ``GET /api/users/{id}`` with a path parameter ``id`` gives ``getUsersById``.
    Path segments from the first ``{placeholder}`` onwards are ignored.
    """
    return "".join(_split_path(method, path, parameters))


def _split_path(method: str, path: str, parameters: list[Parameter] | None):
    yield method.lower()

    if path.lower().startswith(API_PREFIX):
        path = path[len(API_PREFIX):]

    for segment in path.split("/"):
        segment = segment.strip()
        if not segment:
            continue
        if segment.startswith("{"):
            break
        yield pascalize(segment)

    if not parameters:
        return

    yield "By"

    for param in parameters:
        if param.location == "path" and param.name:
            yield pascalize(param.name)


def pascalize(text: str) -> str:
    """Upper-case the first letter of every word and drop the separators."""
    return "".join(word[0].upper() + word[1:] for word in _WORD_SEPARATOR.split(text) if word)
