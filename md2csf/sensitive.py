"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import enum
import logging
import re
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)

MAX_MATCH_LENGTH = 50


@enum.unique
class Severity(enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class SensitivePattern:
    pattern_type: str
    severity: Severity
    regex: re.Pattern[str]
    description: str


@dataclass(frozen=True)
class FlaggedSection:
    """
    A fragment of text that looks like confidential data.

    :param pattern_type: Identifies the kind of data, e.g. `aws_key`.
    :param severity: How harmful publishing the data would be.
    :param matched_text: The matching text, truncated to at most 50 characters.
    :param line_number: Line in which the match occurs, starting at 1.
    :param start_col: Character offset of the match within the line, starting at 0.
    :param end_col: Character offset just past the end of the match.
    """

    pattern_type: str
    severity: Severity
    matched_text: str
    line_number: int
    start_col: int
    end_col: int


PATTERNS = [
    SensitivePattern(
        "aws_key",
        Severity.HIGH,
        re.compile(r"AKIA[0-9A-Z]{16}"),
        "AWS Access Key detected",
    ),
    SensitivePattern(
        "credentials",
        Severity.HIGH,
        re.compile(r"(password|passwd|pwd|secret|api[_-]?key|token)\s*[:=]\s*\S+", re.IGNORECASE),
        "Password or secret detected",
    ),
    SensitivePattern(
        "internal_ip",
        Severity.MEDIUM,
        re.compile(r"\b(10\.\d{1,3}\.\d{1,3}\.\d{1,3}|172\.(1[6-9]|2\d|3[01])\.\d{1,3}\.\d{1,3}|192\.168\.\d{1,3}\.\d{1,3})\b"),
        "Internal IP address detected",
    ),
    SensitivePattern(
        "ssh_key",
        Severity.HIGH,
        re.compile(r"-----BEGIN (RSA|DSA|EC|OPENSSH) PRIVATE KEY-----"),
        "SSH private key detected",
    ),
    SensitivePattern(
        "connection_string",
        Severity.HIGH,
        re.compile(r"(jdbc|mongodb|postgres|mysql)://[^\s]+", re.IGNORECASE),
        "Database connection string detected",
    ),
]


def truncate(text: str, length: int = MAX_MATCH_LENGTH) -> str:
    "Shortens text that exceeds the given length, marking the cut with an ellipsis."

    if len(text) > length:
        return f"{text[: length - 3]}..."
    else:
        return text


def scan(text: str) -> list[FlaggedSection]:
    """
    Looks for credentials, keys, internal addresses and connection strings in text.

    Reports at most one match per pattern per line. Findings are ordered by pattern, then by line.
    """

    lines = text.splitlines()
    flags: list[FlaggedSection] = []
    for pattern in PATTERNS:
        for index, line in enumerate(lines):
            m = pattern.regex.search(line)
            if m is None:
                continue

            LOGGER.debug("%s at line %d", pattern.description, index + 1)
            flags.append(
                FlaggedSection(
                    pattern_type=pattern.pattern_type,
                    severity=pattern.severity,
                    matched_text=truncate(m.group(0)),
                    line_number=index + 1,
                    start_col=m.start(),
                    end_col=m.end(),
                )
            )

    return flags


def has_high_severity(flags: list[FlaggedSection]) -> bool:
    return any(flag.severity is Severity.HIGH for flag in flags)
