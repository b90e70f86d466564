"""
Process configuration, state and result models plus the pipeline helper

Defines ProcessConfig (the options of one process call), ProcessState (the
state bus threaded through the pipeline stages), ProcessResult and the
pipeline() helper for composing transformation stages.
"""

from functools import reduce
from typing import Any, Callable, List, Optional, TypeVar, TYPE_CHECKING
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

# Forward references for type hints - avoid circular import
if TYPE_CHECKING:
    from ..lib.registry import TagSet
    from .parser import AnnotatedText


PS = TypeVar("PS", bound="ProcessState")


class ProcessConfig(BaseModel):
    """
    Options for a single process call.

    Field names are snake_case; camelCase names (tagWhitelist,
    addInLineBreaks, ...) are accepted as aliases.

    Attributes:
        text: Tag markup to convert
        tag_whitelist: If given, only these tags are honored
        tag_blacklist: Tags that are never honored
        add_in_line_breaks: Wrap output in a white-space:pre-wrap container
        escape_html: Keep stray brackets as &#91; / &#93; in the output
        remove_misaligned_tags: Strip leftover [..] runs from the output

    Tags that are not honored behave exactly like unregistered tags: their
    markers stay in the output as literal text.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    text: str
    tag_whitelist: Optional[List[str]] = Field(default=None, alias="tagWhitelist")
    tag_blacklist: Optional[List[str]] = Field(default=None, alias="tagBlacklist")
    add_in_line_breaks: bool = Field(default=False, alias="addInLineBreaks")
    escape_html: bool = Field(default=False, alias="escapeHtml")
    remove_misaligned_tags: bool = Field(default=False, alias="removeMisalignedTags")


@dataclass
class ProcessResult:
    """
    Outcome of a process call

    Attributes:
        html: Rendered HTML (best effort even when error is True)
        error: True if any diagnostic was recorded
        diagnostics: Ordered diagnostic messages, None when error is False
    """
    html: str
    error: bool
    diagnostics: Optional[List[str]] = None


@dataclass
class ProcessState:
    """
    Central state container for one process call (state bus pattern).

    Each pipeline stage receives the previous state and returns a copy with
    its own fields filled in.

    Pipeline stages and their state additions:
        - Initial: config, verbosity
        - tags_select: tagset
        - text_escape: text (escaped)
        - stars_rewrite: text (star pairs made explicit)
        - depths_annotate: annotated, diagnostics (depth overflow)
        - nesting_validate: diagnostics
        - html_transform: html
        - output_finalize: html, diagnostics (misalignment)

    Attributes:
        config: Options of this call
        verbosity: Logging verbosity level (read by LOG())
        tagset: Registry snapshot honored by this call
        text: Working copy of the input text
        annotated: Depth-annotated occurrences
        diagnostics: Accumulated diagnostic messages
        html: Rendered output
    """

    config: ProcessConfig
    verbosity: int = field(default=0)

    tagset: Optional["TagSet"] = field(default=None)
    text: str = field(default="")
    annotated: Optional["AnnotatedText"] = field(default=None)
    diagnostics: List[str] = field(default_factory=list)
    html: str = field(default="")

    def copy(self: PS) -> PS:
        """
        Creates a copy of the ProcessState instance.

        The diagnostics list is copied so stages never mutate the list held
        by an earlier state.
        """
        fields = dict(self.__dict__)
        fields["diagnostics"] = list(self.diagnostics)
        return type(self)(**fields)

    def result_make(self) -> ProcessResult:
        """Build the ProcessResult for this state"""
        if self.diagnostics:
            return ProcessResult(html=self.html, error=True, diagnostics=list(self.diagnostics))
        return ProcessResult(html=self.html, error=False)


def pipeline(
    initial_state: ProcessState, *stages: Callable[[ProcessState], ProcessState]
) -> ProcessState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProcessState) -> ProcessState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProcessState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProcessState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            text_escape,
            stars_rewrite,
            depths_annotate,
        )

    This is equivalent to:
        depths_annotate(stars_rewrite(text_escape(initial_state)))

    But reads left-to-right instead of inside-out.
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
