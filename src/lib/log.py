"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the verbosity of the
ProcessState currently being processed, without passing the state into
every stage helper.

Features:
- Context-aware logging tied to ProcessState verbosity
- Rich formatting with timestamps, colors, and metadata
- Thread-safe using contextvars
- Silent by default (verbosity 0), so embedding applications see nothing
  unless they ask for it

Usage:
    from bbdown.lib.log import LOG, state_connectToLogger, state_disconnectFromLogger

    # At start of a process call:
    token = state_connectToLogger(state)
    try:
        LOG("Escaped 120 characters", level=2)
    finally:
        state_disconnectFromLogger(token)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar, Token
import sys

# Context variable to hold the ProcessState being processed
_process_state: ContextVar[Optional[Any]] = ContextVar('process_state', default=None)

# Configure loguru with bbdown-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> Token:
    """
    Connect a ProcessState to the logging context.

    Args:
        state: Object with a verbosity attribute (normally ProcessState)

    Returns:
        ContextVar token for state_disconnectFromLogger()
    """
    return _process_state.set(state)


def state_disconnectFromLogger(token: Token) -> None:
    """Restore whatever state was connected before state_connectToLogger()"""
    _process_state.reset(token)


def verbosity_get() -> int:
    """Verbosity of the connected state, 0 if none is connected"""
    state = _process_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if the connected state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Example:
        LOG("Processing 3 KB of markup", level=1)
        LOG("Found 12 occurrences", level=2)
        LOG("Stray marker [/b] at 57", level=3)
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
