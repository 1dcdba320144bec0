"""Validation result tree.

A `ValidationResult` describes how one JSON value matched the schema. Results
nest through `children`, keyed by property name or array index, so the tree
mirrors the validated document. Composition keywords combine independently
computed results with `merge_from` instead of validating twice.
"""

from typing import Any, Dict, List, Optional, Set, Union

ChildKey = Union[str, int]

# Metadata copied from a matcher onto the results it produces
MATCHER_KEYS = ["title", "description", "feature", "group", "cls", "ref", "type"]
# Metadata kept by merge_from when already set
SIMPLE_KEYS = MATCHER_KEYS + ["const", "key"]
# Diagnostics concatenated by merge_from
ARRAY_KEYS = ["issues", "warnings"]

GENERIC_ISSUE = "Validation failed"


class ValidationResult:
    """Outcome of validating one JSON value."""

    def __init__(self) -> None:
        self.issues: List[str] = []
        self.warnings: List[str] = []
        self.items_array: List['ValidationResult'] = []
        self.valid = True
        self.fitness = 0
        self.children: Dict[ChildKey, 'ValidationResult'] = {}
        self.title: Optional[str] = None
        self.type: Any = None
        self.description: Optional[str] = None
        self.feature: Optional[str] = None
        self.group: Optional[str] = None
        self.cls: Optional[str] = None
        self.const: Optional['ValidationResult'] = None
        self.ref: Optional[str] = None
        self.key: Optional['ValidationResult'] = None
        self.all_properties: Dict[str, Dict[str, Any]] = {}
        self.links = None

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, fitness={self.fitness}, issues={self.issues})"

    @property
    def show_warning(self) -> bool:
        """Whether presentation code should flag this node."""
        return not self.valid or len(self.warnings) > 0

    def fail(self, issue: Optional[str] = None) -> None:
        """
        Marks the result as invalid.

        Args:
            issue: Explanation of the failure. The node always ends up with at
                least one issue, a generic one when none is given.
        """
        self.valid = False
        if issue:
            self.issues.append(issue + ".")
        elif not self.issues:
            self.issues.append(GENERIC_ISSUE + ".")

    def merge_from(self, other: 'ValidationResult') -> None:
        """
        Folds another result for the same JSON value into this one.

        Validity is the logical AND of both, fitness adds up, metadata already
        set here is kept, diagnostics are appended in order and children with
        the same key are merged recursively.
        """
        self.valid = self.valid and other.valid
        self.fitness += other.fitness

        for key in SIMPLE_KEYS:
            if getattr(self, key) is None:
                setattr(self, key, getattr(other, key))

        for key in ARRAY_KEYS:
            setattr(self, key, getattr(self, key) + getattr(other, key))

        for child_key, child in other.children.items():
            self.add_child(child_key, child)

        self.all_properties = {**self.all_properties, **other.all_properties}

    def add_child(self, child_key: ChildKey, child_validation: 'ValidationResult') -> None:
        """Attaches a child result, merging into an existing one with the same key."""
        if child_key not in self.children:
            self.children[child_key] = child_validation
        else:
            self.children[child_key].merge_from(child_validation)

    def get_features(self, features: Set[str]) -> Set[str]:
        """Adds the feature of this node and of every descendant to `features`."""
        if self.feature:
            features.add(self.feature)

        for child in self.children.values():
            child.get_features(features)
        return features

    def set_key_validation(self, name: str, matcher) -> None:
        """Describes the property name that led to this result."""
        self.key = ValidationResult()
        matcher.populate_result(self.key)

        if not self.key.title:
            self.key.title = name

    def to_json(self) -> Dict[str, Any]:
        """
        Returns a plain dict view of the tree for serialization.

        Children keys become strings, so array indices read as "0", "1", ...
        """
        data: Dict[str, Any] = {
            "valid": self.valid,
            "fitness": self.fitness,
            "issues": list(self.issues),
            "warnings": list(self.warnings),
        }
        for key in MATCHER_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.const is not None:
            data["const"] = True
        if self.key is not None:
            data["key"] = self.key.title
        if self.children:
            data["children"] = {str(k): child.to_json() for k, child in self.children.items()}
        return data


def descend_validation_path(result: ValidationResult, path: List[ChildKey]) -> List[ValidationResult]:
    """
    Walks `path` through the result tree.

    Args:
        result: The root of the tree
        path: Property names and array indices

    Returns:
        The nodes along the path, deepest first, or an empty list when a step
        has no result.
    """
    node = result
    parents = [node]
    for item in path:
        if item not in node.children:
            return []

        node = node.children[item]
        parents.insert(0, node)

    return parents
