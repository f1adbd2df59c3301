"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)


def extract_value(pattern: str, text: str) -> tuple[str | None, str]:
    """
    Extracts the value captured by the first group in a regular expression.

    :returns: A tuple of (1) the value extracted and (2) remaining text without the captured text.
    """

    values: list[str] = []

    def _repl_func(matchobj: re.Match[str]) -> str:
        values.append(matchobj.group(1))
        return ""

    text = re.sub(pattern, _repl_func, text, count=1, flags=re.ASCII)
    value = values[0] if values else None
    return value, text


def extract_frontmatter_block(text: str) -> tuple[str | None, str]:
    "Extracts the front-matter from a Markdown document as a blob of unparsed text."

    return extract_value(r"(?ms)\A---$(.+?)^---$\n?", text)


def extract_frontmatter_properties(text: str) -> tuple[dict[str, Any] | None, str]:
    "Extracts the front-matter from a Markdown document as a dictionary."

    block, text = extract_frontmatter_block(text)

    properties: dict[str, Any] | None = None
    if block is not None:
        try:
            data = yaml.safe_load(block)
        except yaml.YAMLError as ex:
            LOGGER.warning("Ignoring malformed front-matter: %s", ex)
            data = None
        if isinstance(data, dict):
            properties = data

    return properties, text


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_str_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item) for item in value]
    LOGGER.warning("Ignoring tags of unexpected type: %s", type(value).__name__)
    return None


@dataclass
class DocumentProperties:
    """
    An object that holds properties extracted from the front-matter of a Markdown document.

    :param page_id: Confluence page ID.
    :param space_key: Confluence space key.
    :param title: The title extracted from front-matter.
    :param tags: A list of tags (content labels) extracted from front-matter.
    """

    page_id: str | None
    space_key: str | None
    title: str | None
    tags: list[str] | None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentProperties":
        "Accepts both plain and `confluence_`-prefixed keys; the prefixed form takes precedence."

        return DocumentProperties(
            page_id=_as_str(data.get("confluence_page_id", data.get("page_id"))),
            space_key=_as_str(data.get("confluence_space_key", data.get("space_key"))),
            title=_as_str(data.get("title")),
            tags=_as_str_list(data.get("tags", data.get("labels"))),
        )


@dataclass
class ScannedDocument:
    """
    An object that holds properties extracted from a Markdown document, including remaining source text.

    :param page_id: Confluence page ID.
    :param space_key: Confluence space key.
    :param title: The title extracted from front-matter.
    :param tags: A list of tags (content labels) extracted from front-matter.
    :param text: Text that remains after front-matter and inline properties have been extracted.
    """

    page_id: str | None
    space_key: str | None
    title: str | None
    tags: list[str] | None
    text: str


class Scanner:
    def read(self, absolute_path: Path) -> ScannedDocument:
        """
        Extracts essential properties from a Markdown document.
        """

        with open(absolute_path, "r", encoding="utf-8") as f:
            text = f.read()

        return self.parse(text)

    def parse(self, text: str) -> ScannedDocument:
        # extract Confluence page ID
        page_id, text = extract_value(r"<!--\s+confluence[-_]page[-_]id:\s*(\d+)\s+-->", text)

        # extract Confluence space key
        space_key, text = extract_value(r"<!--\s+confluence[-_]space[-_]key:\s*(\S+)\s+-->", text)

        title: str | None = None
        tags: list[str] | None = None

        # extract front-matter
        data, text = extract_frontmatter_properties(text)
        if data is not None:
            p = DocumentProperties.from_dict(data)
            page_id = page_id or p.page_id
            space_key = space_key or p.space_key
            title = p.title
            tags = p.tags

        return ScannedDocument(
            page_id=page_id,
            space_key=space_key,
            title=title,
            tags=tags,
            text=text,
        )
