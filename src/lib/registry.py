"""
Tag registry, registry snapshots and compiled marker patterns

TagRegistry owns the tag definitions of one engine. Every extension fully
rebuilds the derived structures (child/parent lookups, the ordered name
list, the no-parse list) and drops the compiled matchers.

A process call never reads the registry directly: it takes a TagSet
snapshot under the registry lock, optionally narrowed by a whitelist or
blacklist, and works against that for the rest of the call.
"""

import re
import threading
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..config import appsettings, AppSettings
from ..models.parser import Token
from ..models.tags import TagCategory, TagDefinition
from .errors import RegistryError
from .log import LOG


# Characters that would break marker matching if used in a tag name
_INVALID_NAME = re.compile(r'[\[\]/=\s<>]')

# Pattern that never matches - used when no tag names are honored
_NEVER = '(?!)'


class TagMatcher:
    """
    Compiled regular expressions for one set of tag names

    Three patterns are built:
        open_pattern:  [name], [name=params], [name params]  (group 1 = inside)
        close_pattern: [/name] for every name except the star tag
        token_pattern: any marker, including the synthetic [/*] close

    All patterns are case-insensitive.

    Example:
        >>> matcher = TagMatcher(["b", "color"])
        >>> [t.name for t in matcher.tokens_find("[b]x[/B][color=red]")]
        ['b', 'b', 'color']
    """

    def __init__(self, names: Iterable[str], star_tag: str = "*"):
        self.names: Tuple[str, ...] = tuple(names)
        self.star_tag = star_tag

        escaped = [re.escape(name) for name in self.names]
        closable = [re.escape(name) for name in self.names if name != star_tag]

        alternation = '|'.join(escaped) or _NEVER
        close_alternation = '|'.join(closable) or _NEVER

        self.open_pattern = re.compile(
            r'\[((?:' + alternation + r')(?:[ =][^\]]*?)?)\]', re.IGNORECASE
        )
        self.close_pattern = re.compile(
            r'\[(/(?:' + close_alternation + r'))\]', re.IGNORECASE
        )
        self.token_pattern = re.compile(
            r'\[(?:/(?P<close>' + alternation + r')'
            r'|(?P<open>' + alternation + r')(?P<params>[ =][^\]]*?)?)\]',
            re.IGNORECASE,
        )

    def tokens_find(self, text: str) -> Iterator[Token]:
        """
        Yield every marker in escaped text, in document order

        Args:
            text: Text that has been through the Escaper

        Yields:
            Token for each [name..] or [/name] marker
        """
        for match in self.token_pattern.finditer(text):
            if match.group('close') is not None:
                yield Token(
                    name=match.group('close').lower(),
                    params="",
                    closing=True,
                    start=match.start(),
                    end=match.end(),
                )
            else:
                yield Token(
                    name=match.group('open').lower(),
                    params=match.group('params') or "",
                    closing=False,
                    start=match.start(),
                    end=match.end(),
                )


class TagSet:
    """
    Immutable view of the tags honored by one process call

    Attributes:
        tags: Read-only mapping of tag name to TagDefinition
        matcher: TagMatcher compiled for exactly these names
        no_parse_names: Names of tags whose content is never rendered
        star_tag: Name of the unpaired list-item shorthand tag
        root_tag: Name of the virtual document root
    """

    def __init__(
        self,
        tags: Mapping[str, TagDefinition],
        matcher: TagMatcher,
        star_tag: str = "*",
        root_tag: str = "bbcode",
    ):
        self.tags: Mapping[str, TagDefinition] = MappingProxyType(dict(tags))
        self.matcher = matcher
        self.star_tag = star_tag
        self.root_tag = root_tag
        self.no_parse_names: FrozenSet[str] = frozenset(
            name for name, tag in self.tags.items() if tag.no_parse
        )

    def __contains__(self, name: object) -> bool:
        return name in self.tags

    def __len__(self) -> int:
        return len(self.tags)

    def get(self, name: str) -> Optional[TagDefinition]:
        """Get tag definition by (case-insensitive) name"""
        return self.tags.get(name.lower())

    def list_is(self, name: str) -> bool:
        """True if name is a list-type tag hosting [*] items"""
        tag = self.get(name)
        return tag is not None and tag.list_is(self.star_tag)


class TagRegistry:
    """
    Registry of tag definitions

    Maps tag names to TagDefinition objects and keeps the structures derived
    from them. Independent registries may coexist; each engine owns one.

    Extension is guarded by a lock and rebuilds everything derived, so it is
    safe to extend while other threads take snapshots.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[TagDefinition]] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Initialize the registry

        Args:
            definitions: Initial tag definitions. None registers the
                         built-in catalog; pass [] for an empty registry.
            settings: AppSettings instance (defaults to the module singleton)
        """
        self.settings = settings or appsettings
        self._lock = threading.RLock()
        self._tags: Dict[str, TagDefinition] = {}
        self._names: List[str] = []
        self._no_parse_names: List[str] = []
        self._matchers: Dict[FrozenSet[str], TagMatcher] = {}

        if definitions is None:
            from .builtins import builtinTags_make
            definitions = builtinTags_make(self.settings)
        self.extend(definitions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    @property
    def names(self) -> List[str]:
        """Ordered tag-name list used to build matchers"""
        return list(self._names)

    @property
    def no_parse_names(self) -> List[str]:
        """Names of tags flagged no_parse, in registry order"""
        return list(self._no_parse_names)

    def register(self, definition: TagDefinition) -> None:
        """Register (or override) a single tag definition"""
        self.extend([definition])

    def extend(self, definitions: Union[TagDefinition, Iterable[TagDefinition]]) -> None:
        """
        Add or override tag definitions and rebuild all derived structures

        Args:
            definitions: One TagDefinition or an iterable of them

        Raises:
            RegistryError: If a definition has an unusable name, or (with
                           strict_registry enabled) an allow-set names a tag
                           that is not registered
        """
        if isinstance(definitions, TagDefinition):
            definitions = [definitions]

        with self._lock:
            tags = dict(self._tags)
            for definition in definitions:
                if not isinstance(definition, TagDefinition):
                    raise RegistryError(
                        f"Expected TagDefinition, got {type(definition).__name__}"
                    )
                name = definition.name.lower()
                if not name or _INVALID_NAME.search(name):
                    raise RegistryError(f"Invalid tag name: {definition.name!r}")
                tags[name] = definition

            for tag in tags.values():
                tag.lookups_build()

            if self.settings.strict_registry:
                unknown = self.references_unknown(tags)
                if unknown:
                    listing = ", ".join(f"{owner} -> {ref}" for owner, ref in unknown)
                    raise RegistryError(f"Tag restrictions reference unknown tags: {listing}")

            self._tags = tags
            self._names = list(tags)
            self._no_parse_names = [name for name, tag in tags.items() if tag.no_parse]
            self._matchers = {}

        LOG(f"Registry rebuilt with {len(self._names)} tags", level=3)

    def references_unknown(
        self, tags: Optional[Mapping[str, TagDefinition]] = None
    ) -> List[Tuple[str, str]]:
        """
        List allow-set entries that name unregistered tags

        The configured root tag always counts as known.

        Returns:
            Sorted (tag name, unknown reference) pairs
        """
        tags = self._tags if tags is None else tags
        known = set(tags) | {self.settings.root_tag}
        unknown = set()
        for name, tag in tags.items():
            for ref in tag.restrict_children_to | tag.restrict_parents_to:
                if ref not in known:
                    unknown.add((name, ref))
        return sorted(unknown)

    def get(self, name: str) -> Optional[TagDefinition]:
        """Get tag definition by (case-insensitive) name"""
        return self._tags.get(name.lower())

    def tags_current(self) -> Mapping[str, TagDefinition]:
        """Read-only snapshot of the registered tags"""
        with self._lock:
            return MappingProxyType(dict(self._tags))

    def tags_listByCategory(self, category: TagCategory) -> List[TagDefinition]:
        """Get all tags in a category, in registry order"""
        with self._lock:
            return [tag for tag in self._tags.values() if tag.category == category]

    def tagset_make(
        self,
        whitelist: Optional[Iterable[str]] = None,
        blacklist: Optional[Iterable[str]] = None,
    ) -> TagSet:
        """
        Snapshot the registry, keeping only the tags a call should honor

        Args:
            whitelist: If not None, only these names are honored
            blacklist: Names that are never honored

        Returns:
            TagSet with its matcher (compiled once per distinct name set)
        """
        allowed = None if whitelist is None else {name.lower() for name in whitelist}
        denied = {name.lower() for name in blacklist or ()}

        with self._lock:
            names = [
                name for name in self._names
                if (allowed is None or name in allowed) and name not in denied
            ]
            key = frozenset(names)
            matcher = self._matchers.get(key)
            if matcher is None:
                matcher = TagMatcher(names, star_tag=self.settings.star_tag)
                self._matchers[key] = matcher
            tags = {name: self._tags[name] for name in names}

        return TagSet(
            tags,
            matcher,
            star_tag=self.settings.star_tag,
            root_tag=self.settings.root_tag,
        )
