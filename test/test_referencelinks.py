"""Tests for documentation links of schema definitions."""

import json
import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonexplain.referencelinks import LinkResolver, ReferenceLink, get_validation_links
from jsonexplain.validationresult import ValidationResult


def load_mapping():
    """Loads the link mapping used by the tests."""
    with open(os.path.join(os.path.dirname(__file__), 'jsons', 'mapping.json'), 'r', encoding='utf-8') as f:
        return json.load(f)


class TestLinkResolver(unittest.TestCase):
    """Test resolving definitions to links."""

    def setUp(self):
        self.resolver = LinkResolver(load_mapping())

    def test_default_link(self):
        links = LinkResolver().get_links("helpers", "visual-object", "Visual Object")
        self.assertEqual(links, [ReferenceLink("helpers", "visual-object", "Visual Object")])

    def test_constants_anchor_drops_first_dash(self):
        links = self.resolver.get_links("constants", "blend-mode", "Blend Mode")
        self.assertEqual(links, [ReferenceLink("constants", "blendmode", "Blend Mode")])

        links = self.resolver.get_links("constants", "line-join-type", "Line Join")
        self.assertEqual(links[0].anchor, "linejoin-type")

    def test_class_override(self):
        links = self.resolver.get_links("layers", "solid-layer", "Solid Color Layer")
        self.assertEqual(links, [ReferenceLink("layers", "solid-color-layer", "Solid Color Layer")])

    def test_group_defaults_and_extra_link(self):
        links = self.resolver.get_links("shapes", "fill", "Fill")
        self.assertEqual(links, [
            ReferenceLink("shapes", "fill", "Shape: Fill"),
            ReferenceLink("concepts", "colors", "Colors"),
        ])

        links = self.resolver.get_links("shapes", "ellipse", "Ellipse")
        self.assertEqual(links, [ReferenceLink("shapes", "ellipse", "Shape: Ellipse")])

    def test_no_page_no_links(self):
        self.assertEqual(self.resolver.get_links(None, None, "Anything"), [])
        resolver = LinkResolver({"hidden": {"_defaults": {"page": None}}})
        self.assertEqual(resolver.get_links("hidden", "thing", "Thing"), [])

    def test_href(self):
        link = ReferenceLink("shapes", "fill", "Fill")
        self.assertEqual(link.href(), "/shapes/#fill")
        self.assertEqual(link.href("https://docs.example.com"), "https://docs.example.com/shapes/#fill")


class TestValidationLinks(unittest.TestCase):
    """Test links attached to result nodes."""

    def setUp(self):
        self.resolver = LinkResolver(load_mapping())

    def test_links_replace_title(self):
        validation = ValidationResult()
        validation.group = "shapes"
        validation.cls = "fill"
        validation.title = "Fill"

        links = get_validation_links(validation, self.resolver)
        self.assertEqual(len(links), 2)
        self.assertEqual(validation.title, "Shape: Fill Colors")
        self.assertIs(get_validation_links(validation, self.resolver), links)

    def test_links_are_resolved_once(self):
        validation = ValidationResult()
        validation.group = "layers"
        validation.cls = "layer"
        validation.title = "Layer"
        get_validation_links(validation, self.resolver)
        validation.cls = "solid-layer"
        self.assertEqual(get_validation_links(validation, self.resolver)[0].anchor, "layer")

    def test_no_class_no_links(self):
        validation = ValidationResult()
        validation.title = "Plain"
        self.assertEqual(get_validation_links(validation, self.resolver), [])
        self.assertEqual(validation.title, "Plain")
        self.assertEqual(validation.links, [])


if __name__ == '__main__':
    unittest.main()
