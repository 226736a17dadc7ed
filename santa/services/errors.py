from __future__ import annotations

from typing import Optional


class SantaError(RuntimeError):
    pass


class MalformedInputError(SantaError):
    pass


class UnknownParticipantError(SantaError):
    def __init__(self, name: str, source: str) -> None:
        super().__init__(f"{name!r} in {source} is not a participant.")
        self.name = name
        self.source = source


class UnsatisfiableError(SantaError):
    def __init__(self, message: str, best_fitness: Optional[int] = None) -> None:
        super().__init__(message)
        self.best_fitness = best_fitness
