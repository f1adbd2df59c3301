"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import unittest

from md2csf.text import close_unterminated_fences, find_unterminated_fence
from tests.utility import TypedTestCase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)


class TestText(TypedTestCase):
    def test_find_unterminated_fence(self) -> None:
        self.assertIsNone(find_unterminated_fence(""))
        self.assertIsNone(find_unterminated_fence("```python\nx\n```\n"))
        self.assertIsNone(find_unterminated_fence("   ```\nx\n```"))
        self.assertIsNone(find_unterminated_fence("    ```\nindented code\n"))
        self.assertIsNone(find_unterminated_fence("inline ``` is not a fence\n"))
        self.assertIsNone(find_unterminated_fence("```a` is inline code\n"))
        self.assertEqual(find_unterminated_fence("```python\nx\n"), "```")
        self.assertEqual(find_unterminated_fence("~~~~\nx\n"), "~~~~")

    def test_fence_character(self) -> None:
        # a backtick fence does not close a tilde fence, and vice versa
        self.assertIsNone(find_unterminated_fence("~~~\n```\n~~~\n\nafter\n"))
        self.assertIsNone(find_unterminated_fence("```\n~~~\n```\n"))
        self.assertEqual(find_unterminated_fence("~~~\n```\n"), "~~~")

    def test_fence_length(self) -> None:
        self.assertIsNone(find_unterminated_fence("````\n```\n````\n"))
        self.assertIsNone(find_unterminated_fence("```\nx\n`````\n"))
        self.assertEqual(find_unterminated_fence("````\n```\n"), "````")

    def test_closing_fence_with_info(self) -> None:
        self.assertEqual(find_unterminated_fence("```\n```sh\n"), "```")

    def test_balanced(self) -> None:
        text = "# Title\n\n```sh\nls\n```\n"
        self.assertEqual(close_unterminated_fences(text), text)

        text = "~~~\n```\n~~~\n\nafter\n"
        self.assertEqual(close_unterminated_fences(text), text)

    def test_unterminated(self) -> None:
        with self.assertLogs("md2csf.text", level=logging.WARNING):
            self.assertEqual(close_unterminated_fences("```sh\nls\n"), "```sh\nls\n```\n")

    def test_unterminated_without_newline(self) -> None:
        with self.assertLogs("md2csf.text", level=logging.WARNING):
            self.assertEqual(close_unterminated_fences("```sh\nls"), "```sh\nls\n```\n")

    def test_unterminated_marker(self) -> None:
        with self.assertLogs("md2csf.text", level=logging.WARNING):
            self.assertEqual(close_unterminated_fences("````\n```\n"), "````\n```\n````\n")
        with self.assertLogs("md2csf.text", level=logging.WARNING):
            self.assertEqual(close_unterminated_fences("~~~sh\nls"), "~~~sh\nls\n~~~\n")


if __name__ == "__main__":
    unittest.main()
