"""
Transformer - render annotated occurrences to HTML

Rendering is inside-out:
1. Render every child occurrence
2. Splice the rendered children into the parent's raw inner text
3. Hand that processed content to the parent's open/close render calls

Occurrences are visited in post-order with an explicit stack, so nesting
depth is limited only by max_nesting_depth, never by the interpreter's
recursion limit.

No-parse tags skip steps 1-2: their inner text is restored to literal form
(any marker bracket shown as &#91; / &#93;) and never rendered.
"""

from typing import Dict, Iterator, List

from ..models.parser import AnnotatedText, Occurrence
from .errors import RenderError
from .escaper import brackets_escape
from .registry import TagSet


class Transformer:
    """
    Renders an AnnotatedText into HTML using the tags of a TagSet

    Output for one occurrence is:

        open_render(params, content)
        + (content if display_content else "")
        + close_render(params, content)

    Both render calls receive the same processed content, including for
    tags whose content is not displayed.

    Synthetic [/*] item closes that did not pair up are dropped from the
    plain text between occurrences; authors never write them.
    """

    def __init__(self, tagset: TagSet):
        self.tagset = tagset
        self.star_close = f"[/{tagset.star_tag}]"

    def transform(self, annotated: AnnotatedText) -> str:
        """Render the whole document"""
        text = annotated.text
        rendered: Dict[int, str] = {}
        for occurrence in self.occurrences_postorder(annotated.occurrences):
            rendered[id(occurrence)] = self.occurrence_render(text, occurrence, rendered)
        return self.segment_render(text, 0, len(text), annotated.occurrences, rendered)

    @staticmethod
    def occurrences_postorder(roots: List[Occurrence]) -> Iterator[Occurrence]:
        """Yield children before parents, siblings in document order"""
        pending = [(occurrence, False) for occurrence in reversed(roots)]
        while pending:
            occurrence, expanded = pending.pop()
            if expanded:
                yield occurrence
                continue
            pending.append((occurrence, True))
            pending.extend((child, False) for child in reversed(occurrence.children))

    def segment_render(
        self,
        text: str,
        start: int,
        end: int,
        occurrences: List[Occurrence],
        rendered: Dict[int, str],
    ) -> str:
        """
        Render text[start:end], replacing each occurrence span with its HTML

        Args:
            text: Annotated source text
            start: Segment start position
            end: Segment end position
            occurrences: Non-overlapping occurrences inside the segment,
                         in document order
            rendered: HTML of already rendered occurrences, keyed by id()
        """
        parts: List[str] = []
        pos = start
        for occurrence in occurrences:
            parts.append(self.synthetic_strip(text[pos:occurrence.start]))
            parts.append(rendered[id(occurrence)])
            pos = occurrence.end
        parts.append(self.synthetic_strip(text[pos:end]))
        return ''.join(parts)

    def synthetic_strip(self, segment: str) -> str:
        # Author-written [/*] was escaped earlier, so any left here is synthetic
        return segment.replace(self.star_close, "")

    def occurrence_render(
        self, text: str, occurrence: Occurrence, rendered: Dict[int, str]
    ) -> str:
        """
        Render one occurrence whose children are already in rendered

        Raises:
            RenderError: If the tag's open or close render call fails
        """
        tag = self.tagset.get(occurrence.name)
        if tag is None:
            raise RenderError(occurrence.name, "tag is not part of this tag set")

        if tag.no_parse:
            content = self.literal_restore(occurrence.content)
        else:
            content = self.segment_render(
                text, occurrence.inner_start, occurrence.inner_end,
                occurrence.children, rendered,
            )

        try:
            open_html = tag.open_render(occurrence.params, content)
            close_html = tag.close_render(occurrence.params, content)
        except Exception as e:
            raise RenderError(tag.name, str(e)) from e

        if not tag.display_content:
            content = ""

        return open_html + content + close_html

    @staticmethod
    def literal_restore(content: str) -> str:
        """Show no-parse content verbatim - markers become bracket entities"""
        return brackets_escape(content)
