"""
YAML tag catalogs

Lets an embedding application describe extra tags as configuration
instead of code. A catalog is a YAML document with a top-level ``tags``
mapping:

    tags:
      spoiler:
        open: '<span class="spoiler">'
        close: '</span>'
        description: Hidden until hovered
      highlight:
        open: '<mark style="background:{param}">'
        close: '</mark>'
        param_pattern: '#?[a-fA-F0-9]{6}'
        param_default: yellow
      cell:
        open: '<td>'
        close: '</td>'
        restrict_parents_to: [tr]

``{param}`` in a template is replaced by the tag parameter (the text after
``=``) if it fully matches ``param_pattern``, otherwise by ``param_default``.
The substituted value is always attribute-escaped.
"""

import html
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..models.tags import TagCategory, TagDefinition
from .errors import CatalogError
from .escaper import brackets_escape, markup_restore
from .log import LOG


PARAM_PLACEHOLDER = "{param}"


class TagEntry(BaseModel):
    """Schema of one catalog entry"""

    model_config = ConfigDict(extra="forbid")

    open: str = ""
    close: str = ""
    category: TagCategory = TagCategory.INLINE
    description: str = ""
    display_content: bool = True
    no_parse: bool = False
    restrict_children_to: List[str] = Field(default_factory=list)
    restrict_parents_to: List[str] = Field(default_factory=list)
    param_pattern: Optional[str] = None
    param_default: str = ""
    examples: List[str] = Field(default_factory=list)

    @field_validator("param_pattern")
    @classmethod
    def pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid param_pattern: {e}") from e
        return value


class TemplateTag(TagDefinition):
    """
    Tag rendered from open/close template strings

    Attributes (in addition to TagDefinition):
        open_template: Opening fragment, may contain {param}
        close_template: Closing fragment, may contain {param}
        param_pattern: Compiled allow-pattern for the parameter (None = any)
        param_default: Value substituted when the parameter is missing or rejected
    """

    def __init__(
        self,
        name: str,
        open_template: str = "",
        close_template: str = "",
        param_pattern: Optional[str] = None,
        param_default: str = "",
        **kwargs: Any,
    ):
        super().__init__(name=name, **kwargs)
        self.open_template = open_template
        self.close_template = close_template
        self.param_pattern = re.compile(param_pattern) if param_pattern is not None else None
        self.param_default = param_default

    def param_resolve(self, params: str) -> str:
        """Validated, attribute-escaped parameter value (escaped exactly once)"""
        value = markup_restore(params[1:].strip()) if params else ""
        if not value:
            value = self.param_default
        elif self.param_pattern is not None and not self.param_pattern.fullmatch(value):
            value = self.param_default
        return brackets_escape(html.escape(value, quote=True))

    def template_fill(self, template: str, params: str) -> str:
        if PARAM_PLACEHOLDER not in template:
            return template
        return template.replace(PARAM_PLACEHOLDER, self.param_resolve(params))

    def open_render(self, params: str, content: str) -> str:
        return self.template_fill(self.open_template, params)

    def close_render(self, params: str, content: str) -> str:
        return self.template_fill(self.close_template, params)


def tags_fromMapping(data: Dict[str, Any]) -> List[TagDefinition]:
    """
    Build TemplateTags from an already-parsed catalog mapping

    Raises:
        CatalogError: If the mapping lacks a ``tags`` mapping or an entry
                      fails validation
    """
    if not isinstance(data, dict) or not isinstance(data.get("tags"), dict):
        raise CatalogError("Tag catalog must contain a 'tags' mapping")

    definitions: List[TagDefinition] = []
    for name, body in data["tags"].items():
        try:
            entry = TagEntry.model_validate(body or {})
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog entry '{name}': {e}") from e

        definitions.append(TemplateTag(
            name=str(name),
            open_template=entry.open,
            close_template=entry.close,
            param_pattern=entry.param_pattern,
            param_default=entry.param_default,
            category=entry.category,
            description=entry.description,
            display_content=entry.display_content,
            no_parse=entry.no_parse,
            restrict_children_to=frozenset(entry.restrict_children_to),
            restrict_parents_to=frozenset(entry.restrict_parents_to),
            examples=entry.examples,
        ))

    LOG(f"Loaded {len(definitions)} tags from catalog", level=2)
    return definitions


def tags_loadYAML(source: Union[str, Path]) -> List[TagDefinition]:
    """
    Load tag definitions from a YAML catalog

    Args:
        source: Path to a YAML file, or the YAML text itself

    Returns:
        TemplateTag definitions ready for TagRegistry.extend()

    Raises:
        CatalogError: If the file cannot be read, the YAML is malformed, or
                      an entry is invalid
    """
    if isinstance(source, Path):
        try:
            source = source.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Cannot read tag catalog: {e}") from e

    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise CatalogError(f"Error parsing tag catalog YAML: {e}") from e

    return tags_fromMapping(data)
