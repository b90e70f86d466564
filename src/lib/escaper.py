"""
Escaper - neutralize raw input before structural analysis

The passes are order-sensitive:

1. angles_escape:   every literal < and > becomes &lt; / &gt;, so no raw HTML
                    survives and angle brackets are free for internal use
2. markers_protect: bracket pairs forming a recognized marker are switched
                    to angle-bracket form
3. strays_escape:   every remaining [ and ] becomes &#91; / &#93;, then the
                    protected markers are switched back to bracket form
4. noParse_protect: brackets inside the body of a no-parse tag become
                    entities so nothing in there is ever treated as markup

Swapping steps 2 and 3, or running step 2 before step 1, lets author text
reach the output as live HTML.
"""

from bisect import bisect_right
from typing import Dict, List

from ..models.parser import Token
from .registry import TagSet


LEFT_BRACKET_ENTITY = "&#91;"
RIGHT_BRACKET_ENTITY = "&#93;"


def brackets_escape(text: str) -> str:
    """Replace [ and ] with their numeric character references"""
    return text.replace("[", LEFT_BRACKET_ENTITY).replace("]", RIGHT_BRACKET_ENTITY)


def brackets_restore(text: str) -> str:
    """Turn &#91; / &#93; back into literal [ and ]"""
    return text.replace(LEFT_BRACKET_ENTITY, "[").replace(RIGHT_BRACKET_ENTITY, "]")


def markup_restore(text: str) -> str:
    """
    Undo the Escaper's own entities (brackets and angle brackets)

    Other entity-like text is left untouched, so "&copy=1" in a query
    string survives.
    """
    return brackets_restore(text).replace("&lt;", "<").replace("&gt;", ">")


class Escaper:
    """
    Neutralizes characters that could collide with markers or inject HTML

    Example:
        >>> escaper = Escaper(TagRegistry().tagset_make())
        >>> escaper.escape("<i>[b]x[/b] [y]</i>")
        '&lt;i&gt;[b]x[/b] &#91;y&#93;&lt;/i&gt;'
    """

    def __init__(self, tagset: TagSet):
        self.tagset = tagset
        self.matcher = tagset.matcher

    def escape(self, text: str) -> str:
        """Run all escaping passes in order"""
        text = self.angles_escape(text)
        text = self.markers_protect(text)
        text = self.strays_escape(text)
        return self.noParse_protect(text)

    def angles_escape(self, text: str) -> str:
        """Pass 1: convert literal angle brackets to entities"""
        return text.replace("<", "&lt;").replace(">", "&gt;")

    def markers_protect(self, text: str) -> str:
        """
        Pass 2: switch recognized markers to angle-bracket form

        Only the delimiting brackets change; the tag name and parameters
        are left as written. Must run after angles_escape().
        """
        text = self.matcher.open_pattern.sub(r'<\1>', text)
        return self.matcher.close_pattern.sub(r'<\1>', text)

    def strays_escape(self, text: str) -> str:
        """Pass 3: entity-escape leftover brackets, then restore markers"""
        text = brackets_escape(text)
        return text.replace("<", "[").replace(">", "]")

    def noParse_protect(self, text: str) -> str:
        """
        Pass 4: entity-escape every bracket inside no-parse tag bodies

        A no-parse opening marker pairs with the first later closing marker
        of the same name. Openers without any later close are left alone;
        they end up unmatched. Scanning resumes after each protected body,
        so the pass is linear in the number of markers.
        """
        if not self.tagset.no_parse_names:
            return text

        tokens = list(self.matcher.tokens_find(text))
        closes: Dict[str, List[int]] = {}
        for token in tokens:
            if token.closing and token.name in self.tagset.no_parse_names:
                closes.setdefault(token.name, []).append(token.start)

        if not closes:
            return text

        pieces: List[str] = []
        pos = 0
        for token in tokens:
            if token.start < pos:
                continue
            if token.closing or token.name not in closes:
                continue

            close_start = self.close_find(closes[token.name], token)
            if close_start is None:
                continue

            pieces.append(text[pos:token.end])
            pieces.append(brackets_escape(text[token.end:close_start]))
            pos = close_start

        pieces.append(text[pos:])
        return ''.join(pieces)

    @staticmethod
    def close_find(positions: List[int], token: Token):
        """First close position after token, or None"""
        index = bisect_right(positions, token.start)
        if index == len(positions):
            return None
        return positions[index]
