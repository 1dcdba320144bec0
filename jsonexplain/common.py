"""
Common utility functions for jsonexplain.
"""

import re
from typing import Any, List, Union

# Markup the diagnostics carry for presentation code
LINE_BREAK_PATTERN = re.compile(r'<br\s*/?>')
MARKUP_PATTERN = re.compile(r'<[^>]+>')


def json_type_of(json_value: Any) -> str:
    """
    Returns the JSON kind of a parsed JSON value.

    Args:
        json_value: The value as produced by `json.load`

    Returns:
        str: One of object, array, string, number, boolean, null.
    """
    if json_value is None:
        return 'null'
    if isinstance(json_value, bool):
        return 'boolean'
    if isinstance(json_value, (int, float)):
        return 'number'
    if isinstance(json_value, str):
        return 'string'
    if isinstance(json_value, list):
        return 'array'
    if isinstance(json_value, dict):
        return 'object'
    return type(json_value).__name__


def norm_type(schema_type: Union[str, List[str]]) -> List[str]:
    """Normalizes a schema `type` to the list of JSON kinds it accepts."""
    if isinstance(schema_type, str):
        schema_type = [schema_type]
    return ['number' if t == 'integer' else t for t in schema_type]


def json_equal(first: Any, second: Any) -> bool:
    """
    Strict JSON equality: booleans never equal numbers, containers compare deeply.
    """
    if isinstance(first, bool) or isinstance(second, bool):
        return isinstance(first, bool) and isinstance(second, bool) and first == second
    if isinstance(first, dict) and isinstance(second, dict):
        if first.keys() != second.keys():
            return False
        return all(json_equal(v, second[k]) for k, v in first.items())
    if isinstance(first, list) and isinstance(second, list):
        if len(first) != len(second):
            return False
        return all(json_equal(a, b) for a, b in zip(first, second))
    if json_type_of(first) != json_type_of(second):
        return False
    return first == second


def strip_markup(text: str) -> str:
    """Removes the inline markup from a diagnostic message."""
    return MARKUP_PATTERN.sub('', LINE_BREAK_PATTERN.sub(' ', text))
