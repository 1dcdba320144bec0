"""Pairs a JSON document with its validation result tree.

Presentation code walks a `SchemaObject` rather than the bare result tree:
every value of the document gets a node, including values the schema knows
nothing about (their `validation` is `None`).
"""

from typing import Any, List, Optional, Set, Tuple, Union

from jsonexplain.referencelinks import ReferenceLink, get_validation_links
from jsonexplain.validationresult import ValidationResult


class SchemaObject:
    """A JSON value together with its validation result."""

    def __init__(self, schema, json_value: Any, validation: Optional[ValidationResult], parent: Optional['SchemaObject'] = None) -> None:
        self.schema = schema
        self.json_value = json_value
        self.parent = parent
        self.validation = validation
        self.is_array = False
        self.is_object = False
        self.items: List['SchemaObject'] = []
        self.properties: List[Tuple[str, 'SchemaObject']] = []

        if isinstance(json_value, list):
            self.is_array = True
            if validation:
                self.items = [
                    SchemaObject(schema, v, validation.children.get(i), self)
                    for i, v in enumerate(json_value)
                ]
        elif isinstance(json_value, dict):
            self.is_object = True
            if validation:
                self.properties = [
                    (name, SchemaObject(schema, v, validation.children.get(name), self))
                    for name, v in json_value.items()
                ]

    @property
    def valid(self) -> bool:
        """Whether the value has a result and that result is valid."""
        return self.validation is not None and self.validation.valid

    def get_features(self, features: Optional[Set[str]] = None) -> Set[str]:
        """Returns the features used anywhere in the document."""
        if features is None:
            features = set()
        if self.validation:
            self.validation.get_features(features)
        return features

    def links(self) -> List[ReferenceLink]:
        """Documentation links of the definition that matched this value."""
        if not self.validation:
            return []
        return get_validation_links(self.validation, self.schema.links)

    def unknown_properties(self) -> List[str]:
        """Names of object properties the schema does not describe."""
        if not self.is_object or not self.validation:
            return []
        return [
            name for name, item in self.properties
            if item.validation is None and name not in self.validation.all_properties
        ]


def descend_json_path(json_value: Any, path: List[Union[str, int]]) -> Any:
    """Returns the value at `path` inside `json_value`, or None."""
    node = json_value
    for item in path:
        if isinstance(node, dict) and item in node:
            node = node[item]
        elif isinstance(node, list) and isinstance(item, int) and 0 <= item < len(node):
            node = node[item]
        else:
            return None

    return node
