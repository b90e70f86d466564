"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use BBDOWN_ prefix (e.g., BBDOWN_MAX_NESTING_DEPTH=50).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Engine configuration via environment variables.

    Environment variables use BBDOWN_ prefix.

    Examples:
        BBDOWN_ROOT_TAG=bbcode
        BBDOWN_VERBOSITY=2
        BBDOWN_STRICT_REGISTRY=true
    """

    model_config = SettingsConfigDict(
        env_prefix="BBDOWN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Structure configuration
    root_tag: str = Field(
        default="bbcode",
        description="Name of the virtual document root used when validating top-level tags",
    )

    star_tag: str = Field(
        default="*",
        description="Name of the unpaired list-item shorthand tag",
    )

    max_nesting_depth: int = Field(
        default=100,
        ge=1,
        description="Deepest tag nesting honored before markers are left unmatched",
    )

    strict_registry: bool = Field(
        default=False,
        description="Reject tag definitions whose allow-sets name unknown tags",
    )

    # Logging configuration
    verbosity: int = Field(
        default=0,
        ge=0,
        description="Logging verbosity for process calls (0=silent, 1-3 increasingly chatty)",
    )

    # Output configuration
    misaligned_message: str = Field(
        default="Some tags appear to be misaligned.",
        description="Diagnostic appended when unmatched markers survive rendering",
    )

    wrapper_class: str = Field(
        default="xbbcode",
        description="CSS class of the whitespace-preserving container (addInLineBreaks)",
    )

    pygments_style: str = Field(
        default="default",
        description="Pygments style used by highlighted code tags",
    )

    def container_wrap(self, html: str) -> str:
        """
        Wrap rendered HTML in the whitespace-preserving container.

        Args:
            html: Rendered HTML fragment

        Returns:
            Fragment wrapped in a pre-wrap div

        Example:
            >>> AppSettings().container_wrap('hi')
            '<div style="white-space:pre-wrap;" class="xbbcode">hi</div>'
        """
        return f'<div style="white-space:pre-wrap;" class="{self.wrapper_class}">{html}</div>'

    def depthDiagnostic_make(self) -> str:
        """Diagnostic recorded when nesting exceeds max_nesting_depth."""
        return f"Tag nesting exceeds the maximum depth of {self.max_nesting_depth}."


# Singleton instance - import this in your code
appsettings = AppSettings()
