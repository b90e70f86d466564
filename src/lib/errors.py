"""
Exception types raised by bbdown.

Malformed markup never raises; it is reported through diagnostics. These
exceptions signal problems in the tag catalog or in tag implementations.
"""


class BBDownError(Exception):
    """Base class for bbdown errors"""
    pass


class RegistryError(BBDownError):
    """Raised when tag definitions cannot be added to a registry"""
    pass


class CatalogError(BBDownError):
    """Raised when a YAML tag catalog cannot be loaded or validated"""
    pass


class RenderError(BBDownError):
    """Raised when a tag's render call fails"""

    def __init__(self, tag_name: str, message: str):
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' failed to render: {message}")
