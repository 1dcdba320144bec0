"""Definition store: owns the schema document and resolves `$ref` strings.

Matchers for referenced definitions are created once per store and cached
before their body is compiled, so definitions that refer to themselves,
directly or through other definitions, resolve to the same matcher instead of
recursing forever.
"""

import logging
import threading
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import jsonpointer
from jsonpointer import JsonPointerException

from jsonexplain.errors import SchemaReferenceError
from jsonexplain.referencelinks import LinkResolver, ReferenceLink
from jsonexplain.schemamatcher import SchemaMatcher
from jsonexplain.validationresult import ValidationResult

logger = logging.getLogger(__name__)

# Default maximum nesting of matcher calls during one validation
DEFAULT_MAX_DEPTH = 200
# Default property used as discriminator between object kinds
DEFAULT_TYPE_TAG = "ty"
# Default location of grouped definitions: #/$defs/<group>/<class>
DEFAULT_DEFS_ROOT = "$defs"

# Keywords holding literal JSON rather than schemas
LITERAL_KEYWORDS = ("const", "default", "enum", "examples")
# Keywords mapping names to schemas
NAME_MAP_KEYWORDS = ("properties", "patternProperties", "$defs", "definitions", "dependentSchemas")


class SchemaData:
    """
    Holds a schema document and the matchers compiled from it.

    Attributes:
        schema: The schema document
        links: Resolver for documentation links of definitions
        cache: Matchers by reference string
        max_depth: Maximum nesting of schema nodes applied to one value
        type_tag: Name of the discriminator property
        defs_root: First path segment of grouped definitions
        lock: Guards matcher creation and compilation
        root: Matcher of the whole document
    """

    def __init__(
        self,
        schema: Dict[str, Any],
        mapping_data: Optional[Dict[str, Any]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        type_tag: str = DEFAULT_TYPE_TAG,
        defs_root: str = DEFAULT_DEFS_ROOT,
    ) -> None:
        """
        Initialize the store and check that every reference resolves.

        Args:
            schema: The schema document
            mapping_data: Documentation link mapping, see `LinkResolver`
            max_depth: Maximum nesting of schema nodes applied to one value
            type_tag: Name of the discriminator property
            defs_root: First path segment of grouped definitions

        Raises:
            SchemaReferenceError: If a `$ref` in the document does not resolve.
        """
        self.schema = schema
        self.links = LinkResolver(mapping_data)
        self.cache: Dict[str, SchemaMatcher] = {}
        self.max_depth = max_depth
        self.type_tag = type_tag
        self.defs_root = defs_root
        self.lock = threading.RLock()
        self.check_references()
        self.root = SchemaMatcher(self, schema)

    def get_ref(self, ref: str) -> SchemaMatcher:
        """
        Returns the matcher for a reference, creating it on first use.

        Args:
            ref: A reference such as `#/$defs/layers/shape-layer`

        Returns:
            SchemaMatcher: The one matcher of this store for `ref`.

        Raises:
            SchemaReferenceError: If the reference does not resolve.
        """
        matcher = self.cache.get(ref)
        if matcher is not None:
            return matcher

        with self.lock:
            matcher = self.cache.get(ref)
            if matcher is None:
                path = self.ref_to_path(ref)
                data = self.walk_schema(self.schema, path, ref)
                matcher = SchemaMatcher(self, data, ref, path)
                self.cache[ref] = matcher
                logger.debug("Resolved reference %s", ref)
            return matcher

    resolve_reference = get_ref

    def get_ref_data(self, ref: str) -> Any:
        """Returns the schema node a reference points at."""
        return self.walk_schema(self.schema, self.ref_to_path(ref), ref)

    def ref_to_path(self, ref: str) -> List[str]:
        """Splits a local reference into its path segments."""
        if not isinstance(ref, str) or not ref.startswith("#"):
            raise SchemaReferenceError(str(ref), "only local references are supported")
        try:
            return jsonpointer.JsonPointer(unquote(ref[1:])).parts
        except JsonPointerException as e:
            raise SchemaReferenceError(ref, str(e)) from e

    def walk_schema(self, source: Any, path: List[str], ref: Optional[str] = None) -> Any:
        """Follows `path` down from `source`."""
        try:
            return jsonpointer.JsonPointer.from_parts(path).resolve(source)
        except JsonPointerException as e:
            raise SchemaReferenceError(ref or "/".join(path), str(e)) from e

    def check_references(self) -> None:
        """
        Resolves every `$ref` in the document.

        Raises:
            SchemaReferenceError: On the first reference that does not resolve.
        """
        for ref in self._collect_references(self.schema):
            self.get_ref_data(ref)

    def _collect_references(self, node: Any) -> List[str]:
        refs: List[str] = []
        # (node, whether the keys of node are names rather than keywords)
        stack = [(node, False)]
        while stack:
            current, is_map = stack.pop()
            if isinstance(current, dict):
                for key, value in current.items():
                    if is_map:
                        stack.append((value, False))
                    elif key == "$ref" and isinstance(value, str):
                        if value not in refs:
                            refs.append(value)
                    elif key not in LITERAL_KEYWORDS and isinstance(value, (dict, list)):
                        stack.append((value, key in NAME_MAP_KEYWORDS or key == self.defs_root))
            elif isinstance(current, list):
                stack.extend((item, is_map) for item in current if isinstance(item, (dict, list)))
        return refs

    def validate(self, json_value: Any) -> ValidationResult:
        """Validates a document against the whole schema."""
        return self.root.validate(json_value)

    def get_links(self, group: Optional[str], cls: Optional[str], title: Optional[str]) -> List[ReferenceLink]:
        """Returns the documentation links of a definition."""
        return self.links.get_links(group, cls, title)
