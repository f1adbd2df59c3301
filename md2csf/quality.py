"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import re
from dataclasses import dataclass, field

from .article import Article

MAX_SCORE = 100

_NUMBERED_STEP = re.compile(r"^\s*\d+\.")


@dataclass
class QualityScore:
    """
    Completeness assessment of a knowledge base article.

    :param overall: Score between 0 and 100.
    :param solution_step_count: Number of numbered steps in the solution.
    :param word_count: Number of whitespace-separated words in the complete Markdown source.
    :param warnings: Suggestions to improve the article.
    """

    overall: int = 0
    has_title: bool = False
    has_problem: bool = False
    has_solution: bool = False
    has_expected_result: bool = False
    has_prerequisites: bool = False
    solution_step_count: int = 0
    word_count: int = 0
    warnings: list[str] = field(default_factory=list)


def _is_filled(text: str) -> bool:
    return bool(text.strip())


def count_numbered_steps(text: str) -> int:
    "Counts lines that start a numbered list item."

    return sum(1 for line in text.splitlines() if _NUMBERED_STEP.match(line))


def score(article: Article) -> QualityScore:
    "Rates how complete an article is based on which sections are present and how long they are."

    result = QualityScore()

    result.has_title = _is_filled(article.title) and len(article.title) > 5
    if result.has_title:
        result.overall += 20
    if len(article.title) > 200:
        result.warnings.append("Title is very long (>200 chars)")

    result.has_problem = _is_filled(article.problem) and len(article.problem) > 20
    if result.has_problem:
        result.overall += 20

    result.has_solution = _is_filled(article.solution) and len(article.solution) > 50
    if result.has_solution:
        result.overall += 25
    if len(article.solution) < 100:
        result.warnings.append("Solution is very short (<100 chars)")

    result.has_expected_result = _is_filled(article.expected_result)
    if result.has_expected_result:
        result.overall += 15

    result.has_prerequisites = _is_filled(article.prerequisites)
    if result.has_prerequisites:
        result.overall += 10

    if _is_filled(article.additional_notes):
        result.overall += 5

    result.solution_step_count = count_numbered_steps(article.solution)
    if result.solution_step_count >= 3:
        result.overall = min(result.overall + 5, MAX_SCORE)

    # a single backtick also covers fenced code blocks
    if "`" not in article.content_markdown:
        result.warnings.append("No code blocks detected")

    result.word_count = len(article.content_markdown.split())
    return result
