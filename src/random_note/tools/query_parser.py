"""
Query expression parsing for Advanced Random Note.

A query expression is a list of whitespace separated terms that must all match
(AND). Double quotes group a phrase, and a leading '-' negates a term.

Supported terms:
    path:<text>          case-insensitive substring of the file path
    folder:<prefix>      file lies under the folder (whole path segments)
    file:<text>          case-insensitive substring of the file name
    ext:<a,b>            extension is one of the listed ones (also 'extension:')
    tag:<#tag>           file has the tag or one of its nested tags
    [prop] / [prop:val]  front matter property exists / has the value
    <text>               case-insensitive substring of the file name
"""

import re
import shlex
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from ..models.vault import VaultFile
from .exclusion import is_under, split_segments


logger = logging.getLogger(__name__)

OPERATOR_PATTERN = re.compile(r'^(path|folder|file|ext|extension|tag):(.*)$', re.IGNORECASE)
PROPERTY_PATTERN = re.compile(r'^\[([^:\]]+)(?::(.*))?\]$')


class TermType(Enum):
    """Kinds of query terms."""
    PATH = "path"
    FOLDER = "folder"
    FILE = "file"
    EXTENSION = "ext"
    TAG = "tag"
    PROPERTY = "property"
    TEXT = "text"


@dataclass(frozen=True)
class QueryTerm:
    """
    A single parsed query term.

    Attributes:
        type: What the term matches against
        value: Normalized value to match
        key: Property name for PROPERTY terms
        negated: Whether the term must NOT match
    """
    type: TermType
    value: str
    key: str = ''
    negated: bool = False

    def matches(self, file: VaultFile) -> bool:
        """Check the term against a file, honoring negation."""
        return self._matches(file) != self.negated

    def _matches(self, file: VaultFile) -> bool:
        if self.type is TermType.PATH:
            return self.value in file.path.lower()
        if self.type is TermType.FOLDER:
            return is_under(file.path.lower(), split_segments(self.value))
        if self.type is TermType.FILE or self.type is TermType.TEXT:
            return self.value in file.name.lower()
        if self.type is TermType.EXTENSION:
            return file.extension in self.value.split(',')
        if self.type is TermType.TAG:
            return any(_tag_matches(tag.lower(), self.value) for tag in file.tags)
        if self.type is TermType.PROPERTY:
            return _property_matches(file.frontmatter, self.key, self.value)
        return False

    def __str__(self) -> str:
        prefix = '-' if self.negated else ''
        if self.type is TermType.PROPERTY:
            return f"{prefix}[{self.key}:{self.value}]" if self.value else f"{prefix}[{self.key}]"
        if self.type is TermType.TEXT:
            return f"{prefix}{self.value}"
        return f"{prefix}{self.type.value}:{self.value}"


def _tag_matches(tag: str, wanted: str) -> bool:
    """A tag matches itself and every tag nested below it."""
    return tag == wanted or tag.startswith(wanted + '/')


def _property_matches(frontmatter: dict, key: str, value: str) -> bool:
    """Match a front matter property by name and, optionally, value."""
    actual = None
    found = False
    for name, candidate in frontmatter.items():
        if name.lower() == key:
            actual, found = candidate, True
            break

    if not found:
        return False
    if not value:
        return True
    if isinstance(actual, (list, tuple)):
        return any(_stringify(item) == value for item in actual)
    return _stringify(actual) == value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    return str(value).strip().lower()


def tokenize(expression: str) -> List[str]:
    """
    Split an expression into raw terms.

    Unbalanced quotes are not an error: the expression is then split on
    whitespace only.
    """
    lexer = shlex.shlex(expression, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ''
    lexer.escape = ''
    lexer.quotes = '"'
    try:
        return list(lexer)
    except ValueError as e:
        logger.warning(f"Could not tokenize query {expression!r}: {e}")
        return expression.split()


def parse_term(raw: str) -> QueryTerm:
    """Parse one raw term into a QueryTerm."""
    negated = len(raw) > 1 and raw.startswith('-')
    body = raw[1:] if negated else raw

    property_match = PROPERTY_PATTERN.match(body)
    if property_match:
        key = property_match.group(1).strip().lower()
        value = (property_match.group(2) or '').strip().strip('"').lower()
        return QueryTerm(TermType.PROPERTY, value, key=key, negated=negated)

    operator_match = OPERATOR_PATTERN.match(body)
    if operator_match and operator_match.group(2).strip():
        operator = operator_match.group(1).lower()
        value = operator_match.group(2).strip().lower()

        if operator == 'path':
            return QueryTerm(TermType.PATH, value, negated=negated)
        if operator == 'folder':
            return QueryTerm(TermType.FOLDER, '/'.join(split_segments(value)), negated=negated)
        if operator == 'file':
            return QueryTerm(TermType.FILE, value, negated=negated)
        if operator in ('ext', 'extension'):
            extensions = [ext.strip().lstrip('.') for ext in value.split(',')]
            return QueryTerm(TermType.EXTENSION, ','.join(ext for ext in extensions if ext), negated=negated)
        if operator == 'tag':
            return QueryTerm(TermType.TAG, value.lstrip('#'), negated=negated)

    return QueryTerm(TermType.TEXT, body.lower(), negated=negated)


def parse_query(expression: str) -> List[QueryTerm]:
    """
    Parse a query expression into its conjunctive terms.

    Args:
        expression: Query expression; empty matches everything

    Returns:
        List of QueryTerm objects, in expression order
    """
    terms = [parse_term(raw) for raw in tokenize(expression or '') if raw]
    logger.debug(f"Parsed query {expression!r} into {[str(term) for term in terms]}")
    return terms


def matches_all(file: VaultFile, terms: List[QueryTerm]) -> bool:
    """Check whether a file satisfies every term."""
    return all(term.matches(file) for term in terms)
