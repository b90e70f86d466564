"""
NestingValidator - check declared parent/child relationships

Walks the annotated forest top-down from a virtual document root. For each
parent only its direct children are examined; then the walk descends into
every child. Violations become diagnostics and never stop rendering.
"""

from typing import List, Optional

from ..models.parser import AnnotatedText, Occurrence
from .registry import TagSet


def childDiagnostic_make(child: str, parent: str) -> str:
    """Message for a child the parent does not allow"""
    return f'The tag "{child}" is not allowed as a child of the tag "{parent}".'


def parentDiagnostic_make(parent: str, child: str) -> str:
    """Message for a parent the child does not allow"""
    return f'The tag "{parent}" is not allowed as a parent of the tag "{child}".'


class NestingValidator:
    """
    Validates restrict_children_to / restrict_parents_to declarations

    The document root is named after tagset.root_tag ("bbcode" by default).
    If a tag of that name is registered, its child restrictions apply to the
    top-level occurrences; child parent-restrictions are always checked
    against the root name.
    """

    def __init__(self, tagset: TagSet):
        self.tagset = tagset

    def validate(self, annotated: AnnotatedText) -> List[str]:
        """
        Collect nesting diagnostics for the whole document

        Parents are processed before their children with an explicit stack,
        in the same order a recursive walk would use.

        Returns:
            Diagnostic messages in document order (parents before children)
        """
        diagnostics: List[str] = []
        pending = [(self.tagset.root_tag, annotated.occurrences)]
        while pending:
            parent_name, children = pending.pop()
            self.children_check(parent_name, children, diagnostics)
            pending.extend((child.name, child.children) for child in reversed(children))
        return diagnostics

    def children_check(
        self,
        parent_name: str,
        children: List[Occurrence],
        diagnostics: Optional[List[str]] = None,
    ) -> List[str]:
        """
        Check the direct children of one parent

        Args:
            parent_name: Name of the parent tag (or the root name)
            children: Occurrences directly inside the parent
            diagnostics: List to append to (created if omitted)

        Returns:
            The diagnostics list
        """
        if diagnostics is None:
            diagnostics = []

        parent = self.tagset.get(parent_name)

        for child in children:
            if parent is not None and not parent.child_allows(child.name):
                diagnostics.append(childDiagnostic_make(child.name, parent_name))

            child_tag = self.tagset.get(child.name)
            if child_tag is not None and not child_tag.parent_allows(parent_name):
                diagnostics.append(parentDiagnostic_make(parent_name, child.name))

        return diagnostics
