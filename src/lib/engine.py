"""
Engine - run tag markup through the full processing pipeline

Sequences the stages over one ProcessState:

    tags_select → text_escape → stars_rewrite → depths_annotate
        → nesting_validate → html_transform → output_finalize

Validation and rendering consume the same annotated structure. Malformed
markup never raises: every structural problem becomes a diagnostic and the
HTML is produced on a best-effort basis.
"""

import re
from typing import Any, Iterable, Mapping, Optional, Union

from ..config import appsettings, AppSettings
from ..models.state import ProcessConfig, ProcessResult, ProcessState, pipeline
from ..models.tags import TagDefinition
from .annotator import DepthAnnotator
from .escaper import Escaper, brackets_restore
from .log import LOG, state_connectToLogger, state_disconnectFromLogger
from .registry import TagRegistry
from .stars import StarRewriter
from .transformer import Transformer
from .validator import NestingValidator


MISALIGNED_PATTERN = re.compile(r'\[.*?\]')

ConfigLike = Union[ProcessConfig, Mapping[str, Any], str]


class Engine:
    """
    Converts tag markup to HTML using the tags of one TagRegistry

    Example:
        >>> engine = Engine()
        >>> engine.process("[b]bold[/b]").html
        '<span class="xbbcode-b">bold</span>'
    """

    def __init__(
        self,
        registry: Optional[TagRegistry] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Args:
            registry: Tags to honor (default: a new registry with the built-ins)
            settings: AppSettings instance (defaults to the module singleton)
        """
        self.settings = settings or appsettings
        self.registry = registry if registry is not None else TagRegistry(settings=self.settings)

    def tags_extend(self, definitions: Union[TagDefinition, Iterable[TagDefinition]]) -> None:
        """Add or override tags; see TagRegistry.extend()"""
        self.registry.extend(definitions)

    def tags_current(self) -> Mapping[str, TagDefinition]:
        """Read-only snapshot of the registered tags"""
        return self.registry.tags_current()

    def process(self, config: ConfigLike) -> ProcessResult:
        """
        Convert tag markup to HTML

        Args:
            config: ProcessConfig, a mapping of its fields (snake_case or
                    camelCase), or the markup text itself

        Returns:
            ProcessResult with the HTML, the error flag and (if error) the
            ordered diagnostics

        Raises:
            pydantic.ValidationError: If a mapping config is invalid
            RenderError: If a tag implementation fails
        """
        if isinstance(config, str):
            config = ProcessConfig(text=config)
        elif not isinstance(config, ProcessConfig):
            config = ProcessConfig.model_validate(config)

        state = ProcessState(config=config, verbosity=self.settings.verbosity)
        token = state_connectToLogger(state)
        try:
            LOG(f"Processing {len(config.text)} characters of markup", level=1)
            final = pipeline(
                state,
                self.tags_select,
                self.text_escape,
                self.stars_rewrite,
                self.depths_annotate,
                self.nesting_validate,
                self.html_transform,
                self.output_finalize,
            )
        finally:
            state_disconnectFromLogger(token)

        return final.result_make()

    def tags_select(self, inputstate: ProcessState) -> ProcessState:
        """Snapshot the registry, applying whitelist/blacklist"""
        state = inputstate.copy()
        state.tagset = self.registry.tagset_make(
            whitelist=state.config.tag_whitelist,
            blacklist=state.config.tag_blacklist,
        )
        LOG(f"Honoring {len(state.tagset)} tags", level=2)
        return state

    def text_escape(self, inputstate: ProcessState) -> ProcessState:
        """Neutralize angle brackets and stray square brackets"""
        state = inputstate.copy()
        state.text = Escaper(state.tagset).escape(state.config.text)
        return state

    def stars_rewrite(self, inputstate: ProcessState) -> ProcessState:
        """Pair [*] list items with explicit closes"""
        state = inputstate.copy()
        state.text = StarRewriter(state.tagset).rewrite(state.text)
        return state

    def depths_annotate(self, inputstate: ProcessState) -> ProcessState:
        """Match markers into depth-annotated occurrences"""
        state = inputstate.copy()
        state.annotated = DepthAnnotator(state.tagset, self.settings).annotate(state.text)
        if state.annotated.overflowed:
            LOG("Nesting depth limit reached", level=1)
            state.diagnostics.append(self.settings.depthDiagnostic_make())
        return state

    def nesting_validate(self, inputstate: ProcessState) -> ProcessState:
        """Record parent/child restriction violations"""
        state = inputstate.copy()
        found = NestingValidator(state.tagset).validate(state.annotated)
        if found:
            LOG(f"{len(found)} nesting violations", level=2)
        state.diagnostics.extend(found)
        return state

    def html_transform(self, inputstate: ProcessState) -> ProcessState:
        """Render occurrences to HTML"""
        state = inputstate.copy()
        state.html = Transformer(state.tagset).transform(state.annotated)
        return state

    def output_finalize(self, inputstate: ProcessState) -> ProcessState:
        """
        Apply output options

        Order matters: the misalignment check and removal look at marker
        brackets, so they run before the stray-bracket entities are turned
        back into literal brackets.
        """
        state = inputstate.copy()
        config = state.config
        html = state.html

        if '[' in html or ']' in html:
            LOG("Unmatched markers left in output", level=2)
            state.diagnostics.append(self.settings.misaligned_message)

        if config.remove_misaligned_tags:
            html = MISALIGNED_PATTERN.sub('', html)

        if config.add_in_line_breaks:
            html = self.settings.container_wrap(html)

        if not config.escape_html:
            html = brackets_restore(html)

        state.html = html
        return state


_default_engine: Optional[Engine] = None


def engine_default() -> Engine:
    """Lazily created engine with the built-in catalog"""
    global _default_engine
    if _default_engine is None:
        _default_engine = Engine()
    return _default_engine


def process(config: ConfigLike) -> ProcessResult:
    """Convert tag markup with the default engine; see Engine.process()"""
    return engine_default().process(config)
