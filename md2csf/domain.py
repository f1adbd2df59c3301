"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from dataclasses import dataclass


@dataclass
class ConfluenceDocumentOptions:
    """
    Options that control the generated page content and how it is published.

    :param title: Page title to use instead of the title found in the document.
    :param space_key: Confluence space for new pages when the document does not specify one.
    :param allow_sensitive: When true, publish documents even if they appear to contain credentials or keys; when
        false, refuse to publish such documents.
    :param pretty_print: Whether to indent the generated Confluence Storage Format document.
    """

    title: str | None = None
    space_key: str | None = None
    allow_sensitive: bool = False
    pretty_print: bool = False
