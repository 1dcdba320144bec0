"""Explains JSON documents against a schema.

This module provides the entry points used by the command line: loading
schema and document, running the validation and reporting the diagnostics
found in the result tree.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

import requests

from jsonexplain.common import strip_markup
from jsonexplain.schemadata import SchemaData
from jsonexplain.schemaobject import SchemaObject
from jsonexplain.validationresult import ValidationResult

logger = logging.getLogger(__name__)

PathItem = Union[str, int]


def load_json(location: str) -> Any:
    """
    Loads JSON from a local file or an http(s) URL.

    Args:
        location: File path, file:// URL or http(s) URL

    Returns:
        The parsed JSON value.
    """
    parsed_url = urlparse(location)
    if parsed_url.scheme in ('http', 'https'):
        logger.debug("Fetching %s", location)
        response = requests.get(location, timeout=30)
        response.raise_for_status()
        return response.json()
    if parsed_url.scheme == 'file':
        location = parsed_url.netloc if parsed_url.netloc else parsed_url.path
    with open(location, 'r', encoding='utf-8') as f:
        return json.load(f)


def explain_json(document: Any, schema: Dict[str, Any], mapping_data: Optional[Dict[str, Any]] = None, **options) -> SchemaObject:
    """
    Validates a document and pairs it with its result tree.

    Args:
        document: The JSON value to explain
        schema: The schema document
        mapping_data: Documentation link mapping
        options: Further `SchemaData` settings (max_depth, type_tag, defs_root)

    Returns:
        SchemaObject: The document paired with its validation tree.
    """
    schema_data = SchemaData(schema, mapping_data, **options)
    validation = schema_data.validate(document)
    return SchemaObject(schema_data, document, validation)


def explain_file(document_file: str, schema_file: str, mapping_file: Optional[str] = None, **options) -> SchemaObject:
    """Same as `explain_json`, reading each input from a file or URL."""
    mapping_data = load_json(mapping_file) if mapping_file else None
    return explain_json(load_json(document_file), load_json(schema_file), mapping_data, **options)


def collect_features(schema_object: SchemaObject) -> List[str]:
    """Returns the sorted features a document uses."""
    return sorted(schema_object.get_features())


def format_path(path: Sequence[PathItem]) -> str:
    """Formats a result path as `$.name[0].other`."""
    text = "$"
    for item in path:
        if isinstance(item, int):
            text += f"[{item}]"
        else:
            text += f".{item}"
    return text


def list_issues(result: ValidationResult, path: Tuple[PathItem, ...] = ()) -> List[Tuple[Tuple[PathItem, ...], str]]:
    """
    Lists every issue of a result tree, depth first.

    Args:
        result: Root of the tree
        path: Path of `result` inside the document

    Returns:
        (path, issue) pairs.
    """
    issues = [(path, issue) for issue in result.issues]
    for key, child in result.children.items():
        issues.extend(list_issues(child, path + (key,)))
    return issues


def list_unknown_properties(schema_object: SchemaObject, path: Tuple[PathItem, ...] = ()) -> List[Tuple[PathItem, ...]]:
    """Lists the paths of every property the schema does not describe, depth first."""
    unknown = [path + (name,) for name in schema_object.unknown_properties()]
    for name, item in schema_object.properties:
        unknown.extend(list_unknown_properties(item, path + (name,)))
    for index, item in enumerate(schema_object.items):
        unknown.extend(list_unknown_properties(item, path + (index,)))
    return unknown


# Command entry points for the jsonexplain CLI
def validate(input_file: str, schema: str, mapping: Optional[str] = None, max_depth: Optional[int] = None, quiet: bool = False, input_name: Optional[str] = None) -> None:
    """
    Validates a JSON document against a schema and prints the diagnostics.

    Args:
        input_file: Path or URL of the JSON document
        schema: Path or URL of the schema
        mapping: Path or URL of the documentation link mapping
        max_depth: Maximum validation depth
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
        input_name: Name shown for the document, the file name by default
    """
    options = {'max_depth': max_depth} if max_depth else {}
    schema_object = explain_file(input_file, schema, mapping, **options)
    validation = schema_object.validation

    if not quiet:
        if validation.valid:
            print(f"✓ Valid: {input_name or os.path.basename(input_file)}")
        else:
            issues = list_issues(validation)
            for path, issue in issues:
                print(f"✗ {format_path(path)}: {strip_markup(issue)}")
            print(f"\nValidation summary: {len(issues)} issue(s)")
        for path in list_unknown_properties(schema_object):
            print(f"? {format_path(path)}: Property not recognized")

    if not validation.valid:
        exit(1)


def features(input_file: str, schema: str) -> None:
    """Prints the features a JSON document uses, one per line."""
    schema_object = explain_file(input_file, schema)
    for feature in collect_features(schema_object):
        print(feature)
