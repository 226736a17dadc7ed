from santa.services.constraints import ExclusionRelation, Participant, build
from santa.services.errors import (
    MalformedInputError,
    SantaError,
    UnknownParticipantError,
    UnsatisfiableError,
)
from santa.services.strategies import DEFAULT_STRATEGY, SearchConfig, find_assignment, get_strategy
from santa.services.validation import is_valid_assignment

__all__ = [
    "DEFAULT_STRATEGY",
    "ExclusionRelation",
    "MalformedInputError",
    "Participant",
    "SantaError",
    "SearchConfig",
    "UnknownParticipantError",
    "UnsatisfiableError",
    "build",
    "find_assignment",
    "get_strategy",
    "is_valid_assignment",
]
