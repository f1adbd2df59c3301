"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import unittest

from md2csf.csf import AC_ATTR, AC_TAG, ParseError, content_to_string, elements_from_string, elements_to_string, is_well_formed
from tests.utility import TypedTestCase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)


class TestCsf(TypedTestCase):
    def test_namespaces(self) -> None:
        root = elements_from_string('<ac:structured-macro ac:name="code"/>')
        macro = root[0]
        self.assertEqual(macro.tag, AC_TAG("structured-macro"))
        self.assertEqual(macro.get(AC_ATTR("name")), "code")

    def test_cdata(self) -> None:
        content = "<ac:plain-text-body><![CDATA[a &lt; b]]></ac:plain-text-body>"
        root = elements_from_string(content)
        self.assertEqual(root[0].text, "a &lt; b")
        self.assertEqual(elements_to_string(root), content)

    def test_round_trip(self) -> None:
        content = '<p>a &amp; <a href="x?y=1&amp;z=2">b</a></p><hr/>'
        self.assertEqual(elements_to_string(elements_from_string(content)), content)

    def test_malformed(self) -> None:
        with self.assertRaises(ParseError):
            elements_from_string("<p><strong>x</p></strong>")
        with self.assertRaises(ParseError):
            elements_from_string("<p>&nbsp;</p>")

    def test_is_well_formed(self) -> None:
        self.assertTrue(is_well_formed(""))
        self.assertTrue(is_well_formed("<h1>a</h1>\n<p>b</p>\n"))
        self.assertFalse(is_well_formed("<ul><li>a</ul>"))

    def test_content_to_string(self) -> None:
        self.assertEqual(content_to_string(""), "")
        self.assertEqual(content_to_string("  \n"), "")

        self.assertEqual(content_to_string("<ul><li>a</li><li>b</li></ul>"), "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>\n")
        self.assertEqual(content_to_string("<h1>a</h1>\n<hr/>\n"), "<h1>a</h1>\n<hr/>\n")

    def test_content_to_string_inline(self) -> None:
        # whitespace inside paragraphs and list items is significant
        content = "<p><strong>foo</strong><code>bar</code> <em>baz</em></p>"
        self.assertEqual(content_to_string(content), content + "\n")

        content = "<ul><li>a<ul><li><strong>b</strong><em>c</em></li></ul></li></ul>"
        self.assertEqual(content_to_string(content), "<ul>\n  <li>a<ul><li><strong>b</strong><em>c</em></li></ul></li>\n</ul>\n")

    def test_content_to_string_macro(self) -> None:
        content = (
            '<ac:structured-macro ac:name="code" ac:schema-version="1">'
            '<ac:parameter ac:name="language">sh</ac:parameter>'
            "<ac:plain-text-body><![CDATA[ls  -l\n]]></ac:plain-text-body>"
            "</ac:structured-macro>"
        )
        self.assertEqual(
            content_to_string(content),
            '<ac:structured-macro ac:name="code" ac:schema-version="1">\n'
            '  <ac:parameter ac:name="language">sh</ac:parameter>\n'
            "  <ac:plain-text-body><![CDATA[ls  -l\n]]></ac:plain-text-body>\n"
            "</ac:structured-macro>\n",
        )

    def test_content_to_string_text(self) -> None:
        self.assertEqual(content_to_string("a <strong>b</strong>"), "a <strong>b</strong>")


if __name__ == "__main__":
    unittest.main()
