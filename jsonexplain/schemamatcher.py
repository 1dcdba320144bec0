"""Matchers: compiled validation logic for schema fragments.

Each schema node is compiled into a `SchemaMatcher` the first time it is used.
The composite matcher handles `type`, `const`, `required`, `properties` and the
composition keywords; keywords with their own validation rules are delegated
to the specialised matchers below:

- `PropertySchemaMatcher`: one named field of an object
- `OneOfSchemaMatcher`: mutually exclusive alternatives, best match wins
- `ArraySchemaMatcher`: `prefixItems`, `items`, `minItems`, `maxItems`
- `NotSchemaMatcher`: `not`
- `ConditionalSchemaMatcher`: `if`, `then`, `else`

Matchers never raise for document problems; they record diagnostics on the
`ValidationResult` they are given.
"""

# pylint: disable=too-many-instance-attributes, too-many-branches, line-too-long

import json
import logging
from typing import Any, Dict, List, Optional

from jsonexplain.common import json_equal, json_type_of, norm_type
from jsonexplain.errors import SchemaRecursionError
from jsonexplain.validationresult import MATCHER_KEYS, ValidationResult

logger = logging.getLogger(__name__)

# Schema keywords copied onto the matcher, first value wins
SIMPLE_KEYS = ["title", "description", "deprecated"]
# Keywords that produce an ArraySchemaMatcher
ARRAY_KEYS = ["prefixItems", "items", "minItems", "maxItems"]


class BaseMatcher:
    """Common interface of all matchers."""

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        """Validates `json_value`, recording the outcome on `result`."""
        raise NotImplementedError

    def add_array_item_types(self, result: ValidationResult) -> None:
        """Adds the item types this matcher accepts to `result.items_array`."""


class SchemaMatcher(BaseMatcher):
    """
    Composite matcher for an object or scalar schema node.

    Attributes:
        schema: The SchemaData owning the definitions
        schema_start: The schema node this matcher compiles
        ref: The reference this matcher was resolved from, if any
        def_path: `ref` split into path segments
        matchers: Wrapped matchers validating the same value
        bases: Matchers of referenced `allOf` entries
        properties: One matcher per declared property
    """

    def __init__(self, schema, schema_definition: Dict[str, Any], ref: Optional[str] = None, def_path: Optional[List[str]] = None) -> None:
        self.schema = schema
        self.schema_start = schema_definition

        self._built = False
        self._ready = False
        self.matchers: List[BaseMatcher] = []
        self.bases: List['SchemaMatcher'] = []
        self.properties: List['PropertySchemaMatcher'] = []
        self.title: Optional[str] = None
        self.description: Optional[str] = None
        self.deprecated: Optional[bool] = None
        self.type: Any = None
        self.norm_type: List[str] = []
        self.feature: Optional[str] = None
        self.const: Any = None
        self.has_const = False
        self.required: List[str] = []
        self.group: Optional[str] = None
        self.cls: Optional[str] = None

        self.ref = ref
        self.def_path = def_path
        if self.def_path and len(self.def_path) == 3 and self.def_path[0] == schema.defs_root:
            self.group = self.def_path[1]
            self.cls = self.def_path[2]

    def __repr__(self) -> str:
        return f"SchemaMatcher(ref={self.ref!r})"

    def build(self) -> None:
        """Compiles the schema node, once."""
        if self._ready:
            return
        with self.schema.lock:
            if self._built:
                return
            self._built = True
            self._build_definition(self.schema_start)
            self._ready = True
            logger.debug("Built matcher for %s", self.ref or "inline schema")

    def _build_definition(self, schema_data: Dict[str, Any]) -> None:
        # boolean schemas carry no constraints here
        if not isinstance(schema_data, dict):
            return

        for key in SIMPLE_KEYS:
            if key in schema_data and getattr(self, key) is None:
                setattr(self, key, schema_data[key])

        if "const" in schema_data and not self.has_const:
            self.const = schema_data["const"]
            self.has_const = True

        if schema_data.get("type") and self.type is None:
            self.type = schema_data["type"]
            self.norm_type = norm_type(self.type)

        if schema_data.get("caniuse") and self.feature is None:
            self.feature = schema_data["caniuse"]

        if schema_data.get("required"):
            self.required = list(dict.fromkeys(list(schema_data["required"]) + self.required))

        if "$ref" in schema_data:
            self.matchers.append(self.schema.get_ref(schema_data["$ref"]))

        for sub in schema_data.get("allOf", []):
            if isinstance(sub, dict) and "$ref" in sub:
                self.bases.append(self.schema.get_ref(sub["$ref"]))
            else:
                self._build_definition(sub)

        # anyOf accumulates the constraints of every alternative
        for sub in schema_data.get("anyOf", []):
            self._build_definition(sub)

        if "oneOf" in schema_data:
            self.matchers.append(OneOfSchemaMatcher(
                self.schema,
                [SchemaMatcher(self.schema, d) for d in schema_data["oneOf"]]
            ))

        for name, data in schema_data.get("properties", {}).items():
            self.properties.append(PropertySchemaMatcher(name, self.schema, data))

        if any(key in schema_data for key in ARRAY_KEYS):
            self.matchers.append(ArraySchemaMatcher(self.schema, schema_data))

        if "not" in schema_data:
            self.matchers.append(NotSchemaMatcher(self.schema, schema_data["not"]))

        if "if" in schema_data:
            self.matchers.append(ConditionalSchemaMatcher(self.schema, schema_data))

    def populate_result(self, result: ValidationResult) -> None:
        """Copies this matcher's metadata onto the unset fields of `result`."""
        self.build()

        for key in MATCHER_KEYS:
            value = getattr(self, key)
            if getattr(result, key) is None and value is not None:
                setattr(result, key, value)

        if self.deprecated:
            result.warnings.append("This property is deprecated")

    def validate(self, json_value: Any, result: Optional[ValidationResult] = None, post_populate: bool = False, depth: int = 0) -> ValidationResult:
        """
        Validates a JSON value against this schema node.

        Args:
            json_value: The value to validate
            result: Result to record into, a new one when not given
            post_populate: Copy metadata after validating instead of before,
                so metadata of referenced definitions takes precedence
            depth: Number of schema nodes already applied to this same value

        Returns:
            ValidationResult: The result the outcome was recorded on.

        Raises:
            SchemaRecursionError: When schema nodes refer to each other without
                descending into the value more than `max_depth` times.
        """
        if depth > self.schema.max_depth:
            logger.warning("Validation depth %d exceeded at %s", self.schema.max_depth, self.ref or "inline schema")
            raise SchemaRecursionError(self.schema.max_depth, self.ref)

        self.build()
        if result is None:
            result = ValidationResult()

        if not post_populate:
            self.populate_result(result)

        if self.type:
            val_type = json_type_of(json_value)
            if val_type not in self.norm_type:
                expected = " or ".join(self.type) if isinstance(self.type, list) else self.type
                result.fail(
                    f"Type doesn't match (should be <code>{expected}</code> instead of <code>{val_type}</code>)"
                )

        if self.has_const:
            if not json_equal(json_value, self.const):
                result.fail(f"Value should be <code>{json.dumps(self.const)}</code>")
            else:
                result.const = result
                result.fitness += 2

        for matcher in self.matchers:
            matcher.validate(json_value, result, depth=depth + 1)

        if isinstance(json_value, dict):
            for req in self.required:
                if req not in json_value:
                    result.fail(f"Missing required property <code>{req}</code>")
                else:
                    result.fitness += 1

            for matcher in self.properties:
                matcher.validate(json_value, result, depth=depth + 1)

        for other in self.bases:
            other.validate(json_value, result, depth=depth + 1)

        if post_populate:
            self.populate_result(result)

        return result

    def add_array_item_types(self, result: ValidationResult) -> None:
        self.build()

        if self.type or self.ref:
            val = ValidationResult()
            self.populate_result(val)
            result.items_array.append(val)

        for matcher in self.matchers:
            matcher.add_array_item_types(result)


class PropertySchemaMatcher(BaseMatcher):
    """Matches one named property of an object."""

    def __init__(self, name: str, schema, data: Dict[str, Any]) -> None:
        self.name = name
        self.matcher = SchemaMatcher(schema, data)
        self.is_type_tag = name == schema.type_tag

    def add_to_all(self, result: ValidationResult) -> None:
        result.all_properties[self.name] = {
            "title": self.matcher.title,
            "description": self.matcher.description,
        }

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        if not isinstance(json_value, dict):
            return

        if self.name not in json_value:
            self.matcher.build()
            self.add_to_all(result)
            return

        # a child value starts a new count
        validation = self.matcher.validate(json_value[self.name], None, True)
        validation.set_key_validation(self.name, self.matcher)
        result.add_child(self.name, validation)
        self.add_to_all(result)

        if not validation.valid:
            result.fail(f"Property <code>{self.name}</code> doesn't match")
        else:
            result.fitness += 4 if self.is_type_tag else 2


class OneOfSchemaMatcher(BaseMatcher):
    """
    Matches exactly one of several alternatives.

    When no alternative is valid, the one with the highest fitness is taken
    as the explanation of what the value was meant to be.
    """

    def __init__(self, schema, definitions: List[SchemaMatcher]) -> None:
        self.schema = schema
        self.matchers = definitions

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        best_fitness = -1
        best = None
        constants = []

        for match in self.matchers:
            validation = match.validate(json_value, depth=depth)
            if match.has_const:
                constants.append(match)

            if validation.valid:
                best = validation
                break

            if validation.fitness > best_fitness:
                best_fitness = validation.fitness
                best = validation

        if best is None:
            return

        if not best.valid and constants and len(constants) == len(self.matchers):
            result.fail("Possible values:<br/>" + ",<br/>".join(
                f"<code>{json.dumps(match.const)}</code> = {match.title or ''}"
                for match in constants
            ))
        else:
            result.merge_from(best)

    def add_array_item_types(self, result: ValidationResult) -> None:
        for matcher in self.matchers:
            matcher.add_array_item_types(result)


class ArraySchemaMatcher(BaseMatcher):
    """Matches the items and length of an array."""

    def __init__(self, schema, schema_definition: Dict[str, Any]) -> None:
        self.min_items = schema_definition.get("minItems")
        self.max_items = schema_definition.get("maxItems")
        self.prefix = [SchemaMatcher(schema, item) for item in schema_definition.get("prefixItems", [])]
        self.items = None

        if "items" in schema_definition:
            self.items = SchemaMatcher(schema, schema_definition["items"])

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        # The composite matcher reports type mismatches
        if not isinstance(json_value, list):
            return

        if self.min_items is not None and len(json_value) < self.min_items:
            result.fail(f"Too few items (<code>{len(json_value)}</code>, should have <code>{self.min_items}</code>)")

        if self.max_items is not None and len(json_value) > self.max_items:
            result.fail(f"Too many items (<code>{len(json_value)}</code>, should have <code>{self.max_items}</code>)")

        prefix_count = min(len(json_value), len(self.prefix))
        for i in range(prefix_count):
            validation = self.prefix[i].validate(json_value[i])
            if validation.valid:
                result.fitness += 1
                result.add_child(i, validation)
            else:
                result.fail(f"Item <code>{i}</code> doesn't match")
                if self.items:
                    generic_validation = self.items.validate(json_value[i])
                    if generic_validation.valid or generic_validation.fitness > validation.fitness:
                        validation = generic_validation
                result.add_child(i, validation)

            self.prefix[i].add_array_item_types(result)

        if self.items:
            for i in range(prefix_count, len(json_value)):
                validation = self.items.validate(json_value[i])
                result.add_child(i, validation)

                if validation.valid:
                    result.fitness += 1
                else:
                    result.fail(f"Item <code>{i}</code> doesn't match")

            self.items.add_array_item_types(result)


class NotSchemaMatcher(BaseMatcher):
    """Fails when the wrapped schema matches."""

    def __init__(self, schema, schema_data: Dict[str, Any]) -> None:
        self.wrapped = SchemaMatcher(schema, schema_data)

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        if self.wrapped.validate(json_value, depth=depth).valid:
            result.fail("Matches <code>not</code> condition")


class ConditionalSchemaMatcher(BaseMatcher):
    """Applies `then` or `else` depending on whether `if` matches."""

    def __init__(self, schema, schema_data: Dict[str, Any]) -> None:
        self.if_matcher = SchemaMatcher(schema, schema_data["if"])
        self.then_matcher = SchemaMatcher(schema, schema_data["then"]) if "then" in schema_data else None
        self.else_matcher = SchemaMatcher(schema, schema_data["else"]) if "else" in schema_data else None

    def validate(self, json_value: Any, result: ValidationResult, depth: int = 0) -> None:
        if_result = self.if_matcher.validate(json_value, depth=depth)
        if if_result.valid:
            if self.then_matcher:
                self.then_matcher.validate(json_value, result, depth=depth)
        elif self.else_matcher:
            self.else_matcher.validate(json_value, result, depth=depth)
