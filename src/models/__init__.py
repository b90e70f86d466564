"""
Models package for bbdown

Contains data structures and type definitions for the processing pipeline.
"""

from .state import ProcessConfig, ProcessResult, ProcessState, pipeline
from .tags import TagDefinition, TagCategory, RenderFunction
from .parser import Token, Occurrence, AnnotatedText

__all__ = [
    "ProcessConfig",
    "ProcessResult",
    "ProcessState",
    "pipeline",
    "TagDefinition",
    "TagCategory",
    "RenderFunction",
    "Token",
    "Occurrence",
    "AnnotatedText",
]
