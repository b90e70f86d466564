"""
bbdown - Extendible BBCode to HTML converter

Tag markup in, injection-safe HTML and nesting diagnostics out.
"""

__version__ = "1.0.0"

from .registry import TagRegistry, TagSet, TagMatcher
from .engine import Engine, engine_default, process
from .builtins import builtinTags_make
from .catalog import tags_loadYAML, TemplateTag
from .errors import BBDownError, RegistryError, CatalogError, RenderError
from .log import LOG, state_connectToLogger

__all__ = [
    "TagRegistry",
    "TagSet",
    "TagMatcher",
    "Engine",
    "engine_default",
    "process",
    "builtinTags_make",
    "tags_loadYAML",
    "TemplateTag",
    "BBDownError",
    "RegistryError",
    "CatalogError",
    "RenderError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
