"""
DepthAnnotator - match markers into occurrences and label their depth

A single scan over the markers with an explicit stack of open tags:

- an opening marker pushes a frame
- a closing marker matches only the frame on top of the stack, and only if
  that frame has the same name and encloses no stray marker
- any other closing marker is stray and taints the frame on top
- a tainted frame reaching its close is dropped: its markers become stray,
  its matched children move up to its parent, and the parent is tainted

Frames still open at the end of input are dropped the same way. The upshot
is that an occurrence is matched exactly when its body contains no
unmatched recognized marker, and matched siblings never overlap.

Depths come from the resulting forest: top level is 0, each nested level
adds one.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..config import appsettings, AppSettings
from ..models.parser import AnnotatedText, Occurrence, Token
from .log import LOG, verbosity_get
from .registry import TagSet


@dataclass
class _Frame:
    """An opening marker waiting for its close"""
    token: Token
    children: List[Occurrence] = field(default_factory=list)
    tainted: bool = False


class DepthAnnotator:
    """
    Builds the depth-annotated occurrence forest for escaped text

    Each marker is consumed exactly once. Nesting deeper than
    settings.max_nesting_depth is refused: the opening marker that would
    exceed it is treated as stray, which leaves the whole over-deep
    structure unmatched.
    """

    def __init__(self, tagset: TagSet, settings: Optional[AppSettings] = None):
        self.tagset = tagset
        self.settings = settings or appsettings
        self.max_depth = self.settings.max_nesting_depth

    def annotate(self, text: str) -> AnnotatedText:
        """
        Match markers and assign depths

        Args:
            text: Escaped, star-expanded text

        Returns:
            AnnotatedText with the top-level occurrences and stray markers
        """
        roots: List[Occurrence] = []
        strays: List[Token] = []
        stack: List[_Frame] = []
        overflowed = False

        def children_of_top() -> List[Occurrence]:
            return stack[-1].children if stack else roots

        def taint_top() -> None:
            if stack:
                stack[-1].tainted = True

        for token in self.tagset.matcher.tokens_find(text):
            if not token.closing:
                if len(stack) >= self.max_depth:
                    overflowed = True
                    strays.append(token)
                    taint_top()
                    continue
                stack.append(_Frame(token))
                continue

            if not stack or stack[-1].token.name != token.name:
                strays.append(token)
                taint_top()
                continue

            frame = stack.pop()
            if frame.tainted:
                strays.extend((frame.token, token))
                children_of_top().extend(frame.children)
                taint_top()
                continue

            opener = frame.token
            children_of_top().append(Occurrence(
                name=opener.name,
                params=opener.params,
                content=text[opener.end:token.start],
                start=opener.start,
                end=token.end,
                inner_start=opener.end,
                inner_end=token.start,
                children=frame.children,
            ))

        while stack:
            frame = stack.pop()
            strays.append(frame.token)
            children_of_top().extend(frame.children)

        self.depths_assign(roots)
        strays.sort(key=lambda stray: stray.start)

        if verbosity_get() >= 3:
            LOG(f"Annotated {sum(1 for _ in self.occurrences_walk(roots))} occurrences, "
                f"{len(strays)} stray markers", level=3)

        return AnnotatedText(text=text, occurrences=roots, strays=strays, overflowed=overflowed)

    @staticmethod
    def depths_assign(roots: List[Occurrence]) -> None:
        """Label each occurrence with the number of its matched ancestors"""
        pending = [(occurrence, 0) for occurrence in roots]
        while pending:
            occurrence, depth = pending.pop()
            occurrence.depth = depth
            pending.extend((child, depth + 1) for child in occurrence.children)

    @staticmethod
    def occurrences_walk(roots: List[Occurrence]):
        for occurrence in roots:
            yield from occurrence.walk()
