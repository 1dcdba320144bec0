"""Exceptions raised when a schema, rather than a document, is broken."""

from typing import Optional


class SchemaError(Exception):
    """
    Exception raised when the schema itself cannot be used for validation.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
    """

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        self.message = message
        self.context = context
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class SchemaReferenceError(SchemaError):
    """
    Exception raised when a `$ref` does not point at a schema node.

    Attributes:
        ref: The reference string that failed to resolve
    """

    def __init__(self, ref: str, context: Optional[str] = None) -> None:
        self.ref = ref
        super().__init__(f"Cannot resolve schema reference {ref}", context)


class SchemaRecursionError(SchemaError):
    """
    Exception raised when validation nests deeper than the configured limit.

    This happens for definitions that refer back to themselves without
    descending into the validated value, e.g. a definition whose `allOf`
    lists its own reference.
    """

    def __init__(self, max_depth: int, context: Optional[str] = None) -> None:
        self.max_depth = max_depth
        super().__init__(f"Maximum validation depth {max_depth} exceeded", context)
