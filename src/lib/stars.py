"""
StarRewriter - give [*] list items explicit closing markers

Authors never write [/*]. Before structural analysis every [*] whose
innermost enclosing open tag is a list-type tag gets a synthetic close,
inserted right before the next [*] of the same list or before the list's
own close, whichever comes first.

A [*] anywhere else (outside any list, or nested inside some other tag
within a list) is not an item marker and is rewritten as literal text.

Example:
    [list][*]a[*]b[/list]  ->  [list][*]a[/*][*]b[/*][/list]
"""

from dataclasses import dataclass
from typing import List

from .escaper import brackets_escape
from .registry import TagSet


@dataclass
class _Frame:
    """An open marker seen while scanning"""
    name: str
    hosts_items: bool
    item_open: bool = False


class StarRewriter:
    """
    Pairs [*] markers in one left-to-right scan

    Each marker is visited once and at most one close is inserted per
    marker, so the rewrite always terminates.
    """

    def __init__(self, tagset: TagSet):
        self.tagset = tagset
        self.star = tagset.star_tag
        self.star_close = f"[/{tagset.star_tag}]"

    def rewrite(self, text: str) -> str:
        """
        Insert [/*] closes for every list item

        Args:
            text: Escaped text (see Escaper)

        Returns:
            Text where every honored [*] has an explicit partner
        """
        if self.star not in self.tagset:
            return text

        pieces: List[str] = []
        stack: List[_Frame] = []
        pos = 0

        for token in self.tagset.matcher.tokens_find(text):
            pieces.append(text[pos:token.start])
            pos = token.end
            raw = text[token.start:token.end]

            if token.name == self.star:
                if token.closing:
                    # Only ever produced by this rewriter
                    pieces.append(raw)
                    continue
                frame = stack[-1] if stack else None
                if frame is None or not frame.hosts_items:
                    pieces.append(brackets_escape(raw))
                    continue
                if frame.item_open:
                    pieces.append(self.star_close)
                frame.item_open = True
                pieces.append(raw)

            elif not token.closing:
                stack.append(_Frame(token.name, self.tagset.list_is(token.name)))
                pieces.append(raw)

            else:
                index = self.frame_find(stack, token.name)
                if index is not None:
                    frame = stack[index]
                    del stack[index:]
                    if frame.item_open:
                        pieces.append(self.star_close)
                pieces.append(raw)

        pieces.append(text[pos:])
        return ''.join(pieces)

    @staticmethod
    def frame_find(stack: List[_Frame], name: str):
        """Index of the innermost open frame named name, or None"""
        for index in range(len(stack) - 1, -1, -1):
            if stack[index].name == name:
                return index
        return None
