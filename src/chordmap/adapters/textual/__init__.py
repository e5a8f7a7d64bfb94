"""Textual adapter: popup hooks, queued input and the demo app."""

from .controller import (
    QueuedInput,
    QueuedPrompter,
    TextualCandidateDisplay,
    TextualPopupHooks,
    format_candidates,
    normalize_key,
)

__all__ = [
    "QueuedInput",
    "QueuedPrompter",
    "TextualCandidateDisplay",
    "TextualPopupHooks",
    "format_candidates",
    "normalize_key",
]
