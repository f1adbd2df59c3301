"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from pathlib import Path

from .api import ConfluenceSession, PublishResult
from .converter import ConfluenceDocument
from .domain import ConfluenceDocumentOptions
from .environment import PageError
from .sensitive import has_high_severity

LOGGER = logging.getLogger(__name__)


class PublishBlockedError(RuntimeError):
    "Raised when a document is not published because it appears to contain confidential data."


def report(path: Path, document: ConfluenceDocument) -> None:
    "Logs capability warnings, the quality score and sensitive data findings for a document."

    for warning in document.warnings:
        LOGGER.warning("%s: %s", path, warning)

    LOGGER.info("Quality score for %s: %d/100 (%d words)", path, document.quality.overall, document.quality.word_count)
    for warning in document.quality.warnings:
        LOGGER.info("%s: %s", path, warning)

    for flag in document.findings:
        LOGGER.warning(
            "%s:%d:%d: possible %s (%s severity): %s",
            path,
            flag.line_number,
            flag.start_col + 1,
            flag.pattern_type,
            flag.severity.value,
            flag.matched_text,
        )


def markdown_files(path: Path) -> list[Path]:
    "Lists the Markdown files to process: the file itself, or the files in a directory and its subdirectories."

    if path.is_dir():
        return sorted(p for p in path.rglob("*.md") if p.is_file())
    else:
        return [path]


class Publisher:
    """
    Converts Markdown documents and creates or updates the corresponding Confluence pages.
    """

    api: ConfluenceSession
    options: ConfluenceDocumentOptions

    def __init__(self, api: ConfluenceSession, options: ConfluenceDocumentOptions) -> None:
        self.api = api
        self.options = options

    def process(self, path: Path) -> list[PublishResult]:
        """
        Publishes a single Markdown file or a directory of Markdown files.

        :param path: Path to a Markdown file or a directory.
        :returns: The created or updated pages in processing order.
        """

        return [self.process_page(file_path) for file_path in markdown_files(path)]

    def process_page(self, path: Path) -> PublishResult:
        LOGGER.info("Processing page: %s", path)

        document = ConfluenceDocument.create(path, self.options)
        report(path, document)

        if not self.options.allow_sensitive and has_high_severity(document.findings):
            raise PublishBlockedError(f"{path}: document appears to contain confidential data; review findings before publishing")

        return self.publish(document)

    def publish(self, document: ConfluenceDocument) -> PublishResult:
        if document.page_id is not None:
            version = self.api.get_page_version(document.page_id)
            result = self.api.update_page(document.page_id, document.title, document.markup, version)
        else:
            space_key = document.space_key or self.api.space_key
            if space_key is None:
                raise PageError(f"Confluence space key required to create page: {document.title}")
            result = self.api.create_page(space_key, document.title, document.markup, document.labels)

        LOGGER.info("Published page %s: %s", result.page_id, result.url)
        return result
