"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import os
from pathlib import Path

from .converter import ConfluenceDocument
from .domain import ConfluenceDocumentOptions
from .markdown import markdown_to_html
from .publisher import markdown_files, report

LOGGER = logging.getLogger(__name__)


class LocalConverter:
    """
    Transforms a single Markdown page or a directory of Markdown pages into Confluence Storage Format (CSF) documents
    on the local disk, without invoking the Confluence API.
    """

    options: ConfluenceDocumentOptions
    out_dir: Path | None
    preview: bool

    def __init__(self, options: ConfluenceDocumentOptions, out_dir: Path | None = None, *, preview: bool = False) -> None:
        """
        Initializes a new converter instance.

        :param options: Options that control the generated page content.
        :param out_dir: File system directory to write generated CSF documents to. Defaults to the source directory.
        :param preview: Whether to write an HTML preview alongside each CSF document.
        """

        self.options = options
        self.out_dir = out_dir
        self.preview = preview

    def process(self, path: Path) -> list[Path]:
        """
        Converts a Markdown file or a directory of Markdown files.

        :returns: Paths of the CSF documents written.
        """

        path = path.resolve()
        root_dir = path if path.is_dir() else path.parent
        return [self.process_page(file_path, root_dir) for file_path in markdown_files(path)]

    def process_page(self, path: Path, root_dir: Path) -> Path:
        LOGGER.info("Converting page: %s", path)

        document = ConfluenceDocument.create(path, self.options)
        report(path, document)

        out_path = (self.out_dir or root_dir) / path.relative_to(root_dir).with_suffix(".csf")
        os.makedirs(out_path.parent, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(document.xhtml())

        if self.preview:
            html = markdown_to_html(document.text)
            with open(out_path.with_suffix(".html"), "w", encoding="utf-8") as f:
                f.write(html)

        return out_path
