"""
Parser-specific data models

Type-safe structures passed between the escaping, annotation, validation
and rendering stages.
"""

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass
class Token:
    """
    One recognized bracket marker in escaped text

    Produced by TagMatcher.tokens_find() after the Escaper has turned every
    unrecognized bracket into an entity, so each remaining [..] pair is a
    marker for a registered tag.

    Attributes:
        name: Canonical (lowercase) tag name
        params: Raw parameter string following the name ("=red", " x", "")
        closing: True for [/name] markers
        start: Position of the opening bracket
        end: Position just past the closing bracket

    Example:
        For "[color=red]" at position 4:
        Token(name="color", params="=red", closing=False, start=4, end=15)
    """
    name: str
    params: str
    closing: bool
    start: int
    end: int


@dataclass
class Occurrence:
    """
    A matched open/close pair of a recognized tag

    Attributes:
        name: Canonical tag name
        params: Raw parameter string from the opening marker
        content: Raw inner text between the markers
        start: Position of the opening marker
        end: Position just past the closing marker
        inner_start: Position just past the opening marker
        inner_end: Position of the closing marker
        depth: Number of matched occurrences strictly enclosing this one
        children: Directly nested occurrences, in document order

    Example:
        For "[quote][b]x[/b][/quote]":
        Occurrence(name="quote", depth=0, content="[b]x[/b]",
                   children=[Occurrence(name="b", depth=1, content="x", ...)])
    """
    name: str
    params: str
    content: str
    start: int
    end: int
    inner_start: int
    inner_end: int
    depth: int = 0
    children: List['Occurrence'] = field(default_factory=list)

    def walk(self) -> Iterator['Occurrence']:
        """Yield this occurrence and all descendants in document order"""
        pending = [self]
        while pending:
            occurrence = pending.pop()
            yield occurrence
            pending.extend(reversed(occurrence.children))


@dataclass
class AnnotatedText:
    """
    Result of depth annotation

    Attributes:
        text: Escaped and star-expanded source the spans refer to
        occurrences: Top-level (depth 0) occurrences in document order
        strays: Markers that never found a partner, in document order
        overflowed: True if nesting exceeded the configured maximum depth
    """
    text: str
    occurrences: List[Occurrence]
    strays: List[Token] = field(default_factory=list)
    overflowed: bool = False

    def walk(self) -> Iterator[Occurrence]:
        """Yield every occurrence in document order"""
        for occurrence in self.occurrences:
            yield from occurrence.walk()
