"""Collaborator protocols the core consumes, plus in-memory implementations."""

from .protocols import (
    CandidateDisplay,
    ContextStore,
    InputSource,
    LocationStore,
    Prompter,
)
from .memory import (
    MemoryContextStore,
    MemoryLocationStore,
    RecordingDisplay,
    ScriptedInput,
    ScriptedPrompter,
)

__all__ = [
    "CandidateDisplay",
    "ContextStore",
    "InputSource",
    "LocationStore",
    "Prompter",
    "MemoryContextStore",
    "MemoryLocationStore",
    "RecordingDisplay",
    "ScriptedInput",
    "ScriptedPrompter",
]
