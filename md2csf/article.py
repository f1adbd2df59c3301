"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
from dataclasses import dataclass, field

LOGGER = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Article"

# maps (lowercase) section headings to the article field they populate
_SECTIONS = {
    "problem": "problem",
    "solution": "solution",
    "resolution": "solution",
    "expected result": "expected_result",
    "expected outcome": "expected_result",
    "prerequisites": "prerequisites",
    "requirements": "prerequisites",
    "additional notes": "additional_notes",
    "notes": "additional_notes",
    "tags": "tags",
    "labels": "tags",
}

_TITLE = re.compile(r"^#\s+")
_SECTION = re.compile(r"^##\s+")


@dataclass
class Article:
    """
    A knowledge base article split into its standard sections.

    :param title: Text of the first top-level heading.
    :param problem: Description of the problem.
    :param solution: Steps that resolve the problem.
    :param expected_result: What the reader should observe after applying the solution.
    :param prerequisites: Access rights or tools required.
    :param additional_notes: Any other remarks.
    :param tags: Labels to apply to the published page.
    :param content_markdown: The complete Markdown source.
    """

    title: str = DEFAULT_TITLE
    problem: str = ""
    solution: str = ""
    expected_result: str = ""
    prerequisites: str = ""
    additional_notes: str = ""
    tags: list[str] = field(default_factory=list)
    content_markdown: str = ""

    @property
    def has_title(self) -> bool:
        return self.title != DEFAULT_TITLE


def _split_tags(content: str) -> list[str]:
    return [tag.strip() for tag in content.split(",") if tag.strip()]


def parse_article(markdown: str) -> Article:
    """
    Splits a Markdown document into knowledge base article sections.

    The first `#` heading is the title; `##` headings start a section. Sections with an unrecognized heading are
    ignored; a section that occurs more than once has its content appended.
    """

    article = Article(content_markdown=markdown)
    sections: list[tuple[str, list[str]]] = []
    title: str | None = None

    for line in markdown.split("\n"):
        if title is None and _TITLE.match(line):
            title = line.lstrip("#").strip()
        elif _SECTION.match(line):
            sections.append((line[2:].strip(), []))
        elif sections:
            sections[-1][1].append(line)

    if title:
        article.title = title

    seen: set[str] = set()
    for heading, lines in sections:
        content = "\n".join(lines).strip()
        if not content:
            continue

        name = _SECTIONS.get(heading.lower())
        if name is None:
            LOGGER.debug("Ignoring unrecognized section: %s", heading)
            continue

        if name == "tags":
            article.tags.extend(_split_tags(content))
        elif name in seen:
            LOGGER.warning("Duplicate section found: %r; appending content to existing section", heading)
            setattr(article, name, f"{getattr(article, name)}\n\n{content}")
        else:
            setattr(article, name, content)
        seen.add(name)

    return article
