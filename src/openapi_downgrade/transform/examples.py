"""Collapse OpenAPI 3 ``examples`` maps into the single ``example`` of Swagger 2.0."""

from openapi_downgrade.document.model import Document, MediaType


def consolidate_examples(content: MediaType, document: Document | None = None) -> bool:
    """Set ``content.example`` from the first named example if it has none.

    Referenced examples are resolved through the document's components.
    Returns True when the content was changed.
    """
    if content.example is not None or not content.examples:
        return False

    first = next(iter(content.examples.values()))
    if document is not None:
        first = document.resolve_example(first)
    # externalValue-only examples have nothing to inline
    if first.value is None:
        return False
    content.example = first.value
    return True
