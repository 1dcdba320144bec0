"""Documentation cross references for schema definitions.

The resolver maps a definition's `(group, cls, title)` to the documentation
pages describing it. Mapping data is keyed by group; each group may carry
`_defaults` and per-class overrides of `page`, `anchor`, `name`,
`name_prefix` and `extra` (a second link record).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jsonexplain.validationresult import ValidationResult


@dataclass
class ReferenceLink:
    """A link to a documentation page section."""
    page: str
    anchor: str
    name: str

    def href(self, base_url: str = "") -> str:
        """Returns the URL of the linked section below `base_url`."""
        return f"{base_url}/{self.page}/#{self.anchor}"


class LinkResolver:
    """Resolves definitions to `ReferenceLink` records."""

    def __init__(self, mapping_data: Optional[Dict[str, Any]] = None) -> None:
        self.mapping_data = mapping_data or {}

    def get_links(self, group: Optional[str], cls: Optional[str], title: Optional[str]) -> List[ReferenceLink]:
        """
        Returns the links documenting a definition.

        Args:
            group: Definition group, the second segment of `#/$defs/<group>/<cls>`
            cls: Definition class, the last segment of the reference
            title: Title of the definition, used as link name by default

        Returns:
            List[ReferenceLink]: Links in display order, possibly empty.
        """
        values: Dict[str, Any] = {
            "extra": None,
            "page": group,
            "anchor": cls,
            "name": title,
            "name_prefix": "",
        }

        if group == "constants" and values["anchor"]:
            values["anchor"] = values["anchor"].replace("-", "", 1)

        mapping_data = self.mapping_data.get(group) if group else None
        if mapping_data:
            values = {
                **values,
                **(mapping_data.get("_defaults") or {}),
                **(mapping_data.get(cls) or {}),
            }

        links = []
        if values["page"]:
            links.append(ReferenceLink(
                values["page"], values["anchor"], (values["name_prefix"] or "") + (values["name"] or "")
            ))

        extra = values["extra"]
        if extra:
            links.append(ReferenceLink(extra["page"], extra["anchor"], extra["name"]))
        return links


def get_validation_links(validation: ValidationResult, resolver: LinkResolver) -> List[ReferenceLink]:
    """
    Returns the links of a result node, resolving them on first use.

    A node with links takes their joined names as display title.
    """
    if validation.links is None:
        if validation.cls:
            validation.links = resolver.get_links(validation.group, validation.cls, validation.title)
            if validation.links:
                validation.title = " ".join(link.name for link in validation.links)
        else:
            validation.links = []
    return validation.links
