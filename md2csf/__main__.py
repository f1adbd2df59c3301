"""
Publish Markdown files to Confluence wiki.

Parses Markdown files, converts Markdown content into the Confluence Storage Format (XHTML), and invokes
Confluence API endpoints to publish content.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import argparse
import logging
import os.path
import sys
import typing
from io import StringIO
from pathlib import Path
from typing import Any, Iterable, Sequence

from . import __version__
from .converter import ConfluenceDocument, ConversionError
from .domain import ConfluenceDocumentOptions
from .environment import ArgumentError, ConfluenceConnectionProperties, ConfluenceError, PageError
from .extra import override
from .publisher import PublishBlockedError, markdown_files, report
from .sensitive import has_high_severity


class Arguments(argparse.Namespace):
    mdpath: Path
    domain: str | None
    path: str | None
    username: str | None
    api_key: str | None
    space: str | None
    loglevel: str
    title: str | None
    local: bool
    out_dir: str | None
    preview: bool
    pretty: bool
    allow_sensitive: bool
    check: bool
    headers: dict[str, str] | None


class KwargsAppendAction(argparse.Action):
    """Append key-value pairs to a dictionary."""

    @override
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: None | str | Sequence[Any],
        option_string: str | None = None,
    ) -> None:
        try:
            d = dict(map(lambda x: x.split("=", 1), typing.cast(Sequence[str], values)))
        except ValueError:
            raise argparse.ArgumentError(
                self,
                f'Could not parse argument "{values}". It should follow the format: k1=v1 k2=v2 ...',
            ) from None
        setattr(namespace, self.dest, d)


class PositionalOnlyHelpFormatter(argparse.HelpFormatter):
    def _format_usage(
        self,
        usage: str | None,
        actions: Iterable[argparse.Action],
        groups: Iterable[argparse._MutuallyExclusiveGroup],  # pyright: ignore[reportPrivateUsage]
        prefix: str | None,
    ) -> str:
        # filter only positional arguments
        positional_actions = [a for a in actions if not a.option_strings]

        # format usage string with only positional arguments
        usage_str = super()._format_usage(usage, positional_actions, groups, prefix).rstrip()

        # insert [OPTIONS] as a placeholder for all options (detailed below)
        usage_str += " [OPTIONS]\n"

        return usage_str


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(formatter_class=PositionalOnlyHelpFormatter)
    parser.prog = os.path.basename(os.path.dirname(__file__))
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("mdpath", help="Path to Markdown file or directory to convert and publish.")
    parser.add_argument("-d", "--domain", help="Confluence organization domain.")
    parser.add_argument("-p", "--path", help="Base path for Confluence (default: '/wiki/').")
    parser.add_argument("-u", "--username", help="Confluence user name. If omitted, the API key is used as a personal access token.")
    parser.add_argument(
        "-a",
        "--api-key",
        dest="api_key",
        help="Confluence API key or personal access token. Refer to documentation how to obtain one.",
    )
    parser.add_argument(
        "-s",
        "--space",
        help="Confluence space key for new pages, unless the document specifies one.",
    )
    parser.add_argument(
        "-l",
        "--loglevel",
        choices=[
            logging.getLevelName(level).lower()
            for level in (
                logging.DEBUG,
                logging.INFO,
                logging.WARN,
                logging.ERROR,
                logging.CRITICAL,
            )
        ],
        default=logging.getLevelName(logging.INFO),
        help="Use this option to set the log verbosity.",
    )
    parser.add_argument("--title", help="Page title to use instead of the title found in the document. Applies to a single file only.")
    parser.add_argument(
        "--local",
        action="store_true",
        default=False,
        help="Write XHTML-based Confluence Storage Format files locally without invoking Confluence API.",
    )
    parser.add_argument(
        "--out-dir",
        dest="out_dir",
        help="Directory to write Confluence Storage Format files to with --local (default: next to source files).",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        default=False,
        help="Write an HTML preview next to each Confluence Storage Format file with --local.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        default=False,
        help="Indent Confluence Storage Format files written with --local.",
    )
    parser.add_argument(
        "--allow-sensitive",
        dest="allow_sensitive",
        action="store_true",
        default=False,
        help="Publish documents even if they appear to contain credentials, private keys or connection strings.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Report quality score and sensitive data findings without writing or publishing anything.",
    )
    parser.add_argument(
        "--headers",
        nargs="+",
        required=False,
        action=KwargsAppendAction,
        metavar="KEY=VALUE",
        help="Apply custom headers to all Confluence API requests.",
    )
    return parser


def get_help() -> str:
    parser = get_parser()
    with StringIO() as buf:
        parser.print_help(file=buf)
        return buf.getvalue()


def check(path: Path, options: ConfluenceDocumentOptions) -> bool:
    """
    Reports on documents without publishing them.

    :returns: True if no document has high-severity sensitive data findings.
    """

    passed = True
    for file_path in markdown_files(path):
        document = ConfluenceDocument.create(file_path, options)
        report(file_path, document)
        if has_high_severity(document.findings):
            passed = False
    return passed


def main() -> None:
    parser = get_parser()
    args = Arguments()
    parser.parse_args(namespace=args)

    args.mdpath = Path(args.mdpath)
    if args.title and args.mdpath.is_dir():
        parser.error("--title applies to a single Markdown file, not a directory")

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
    )

    options = ConfluenceDocumentOptions(
        title=args.title,
        space_key=args.space,
        allow_sensitive=args.allow_sensitive,
        pretty_print=args.pretty,
    )

    try:
        if args.check:
            if not check(args.mdpath, options):
                sys.exit(1)
        elif args.local:
            from .local import LocalConverter

            LocalConverter(options, Path(args.out_dir) if args.out_dir else None, preview=args.preview).process(args.mdpath)
        else:
            from requests import RequestException

            from .api import ConfluenceAPI
            from .publisher import Publisher

            try:
                properties = ConfluenceConnectionProperties(
                    domain=args.domain,
                    base_path=args.path,
                    user_name=args.username,
                    api_key=args.api_key,
                    space_key=args.space,
                    headers=args.headers,
                )
            except ArgumentError as e:
                parser.error(str(e))
            try:
                with ConfluenceAPI(properties) as api:
                    Publisher(api, options).process(args.mdpath)
            except RequestException as err:
                logging.error(err)
                sys.exit(1)
    except (ConfluenceError, ConversionError, PageError, PublishBlockedError) as err:
        logging.error(err)
        sys.exit(1)


if __name__ == "__main__":
    main()
