"""
bbdown - Extendible BBCode to HTML converter

Converts [tag]content[/tag] markup into HTML, validating parent/child tag
relationships and keeping untrusted input from injecting markup or script.
"""

__version__ = "1.0.0"

from .lib import (
    Engine,
    TagRegistry,
    builtinTags_make,
    tags_loadYAML,
    process,
    BBDownError,
    RegistryError,
    CatalogError,
    RenderError,
    LOG,
    state_connectToLogger,
)
from .models import ProcessConfig, ProcessResult, TagDefinition, TagCategory

__all__ = [
    "Engine",
    "TagRegistry",
    "TagDefinition",
    "TagCategory",
    "ProcessConfig",
    "ProcessResult",
    "builtinTags_make",
    "tags_loadYAML",
    "process",
    "BBDownError",
    "RegistryError",
    "CatalogError",
    "RenderError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
