"""
Tag definition and metadata models

Defines the uniform capability contract every tag implements, whether it
ships with bbdown, comes from a YAML catalog, or is supplied by the
embedding application.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Iterable, List


RenderFunction = Callable[[str, str], str]


class TagCategory(Enum):
    """
    Categories of bbdown tags

    Used for organization, documentation generation, and introspection.
    """
    INLINE = "inline"            # [b], [color=red], [size=20]
    BLOCK = "block"              # [quote], [center]
    LIST = "list"                # [list], [*], [li]
    TABLE = "table"              # [table], [tr], [td]
    LINK = "link"                # [url], [email]
    MEDIA = "media"              # [img]
    LITERAL = "literal"          # [code], [noparse]
    STRUCTURAL = "structural"    # [bbcode]


def render_empty(params: str, content: str) -> str:
    """Render nothing - default for tags without an open or close fragment"""
    return ""


def names_normalize(names: Iterable[str]) -> FrozenSet[str]:
    """Lowercase and deduplicate a collection of tag names"""
    return frozenset(name.lower() for name in names)


@dataclass
class TagDefinition:
    """
    Definition of a bbdown tag

    Both render calls receive the raw parameter string exactly as written
    after the tag name ("=red" for [color=red], "" when absent) and the
    already-processed content of the occurrence.

    Attributes:
        name: Tag name, stored lowercase
        open_tag: Function (params, content) -> opening HTML fragment
        close_tag: Function (params, content) -> closing HTML fragment
        category: Category for organization
        description: Human-readable description
        display_content: When False the processed content is computed but
                         left out of the output ([img] uses its body as a URL)
        no_parse: When True the content is shown literally, never rendered
        restrict_children_to: Tags allowed as direct children (empty = any)
        restrict_parents_to: Tags allowed as direct parent (empty = any)
        examples: Example usage strings
    """
    name: str
    open_tag: RenderFunction = render_empty
    close_tag: RenderFunction = render_empty
    category: TagCategory = TagCategory.INLINE
    description: str = ""
    display_content: bool = True
    no_parse: bool = False
    restrict_children_to: FrozenSet[str] = field(default_factory=frozenset)
    restrict_parents_to: FrozenSet[str] = field(default_factory=frozenset)
    examples: List[str] = field(default_factory=list)

    # Derived by lookups_build()
    valid_child_lookup: FrozenSet[str] = field(default_factory=frozenset, init=False, repr=False)
    valid_parent_lookup: FrozenSet[str] = field(default_factory=frozenset, init=False, repr=False)

    def __post_init__(self) -> None:
        self.name = self.name.lower()
        self.lookups_build()

    def lookups_build(self) -> None:
        """
        Rebuild the child/parent membership sets from the restriction lists

        Called on construction and again by TagRegistry whenever the
        registry is extended, so definitions mutated after creation are
        picked up.
        """
        self.restrict_children_to = names_normalize(self.restrict_children_to)
        self.restrict_parents_to = names_normalize(self.restrict_parents_to)
        self.valid_child_lookup = frozenset(self.restrict_children_to)
        self.valid_parent_lookup = frozenset(self.restrict_parents_to)

    def open_render(self, params: str, content: str) -> str:
        """Opening HTML fragment for one occurrence"""
        return self.open_tag(params, content)

    def close_render(self, params: str, content: str) -> str:
        """Closing HTML fragment for one occurrence"""
        return self.close_tag(params, content)

    def child_allows(self, child_name: str) -> bool:
        """True if child_name may appear directly inside this tag"""
        if not self.restrict_children_to:
            return True
        return child_name in self.valid_child_lookup

    def parent_allows(self, parent_name: str) -> bool:
        """True if this tag may appear directly inside parent_name"""
        if not self.restrict_parents_to:
            return True
        return parent_name in self.valid_parent_lookup

    def list_is(self, star_tag: str = "*") -> bool:
        """True if this tag hosts [*] items (its children may include the star tag)"""
        return star_tag in self.restrict_children_to
