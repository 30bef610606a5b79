"""Status transition tables.

Every aggregate with a lifecycle declares its allowed moves once, as a
mapping from the current status to the set of statuses reachable from it.
Services call :meth:`TransitionTable.validate` before mutating a status.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from shared.exceptions import InvalidTransitionError


class TransitionTable:
    """Immutable map of ``current status -> allowed next statuses``."""

    def __init__(self, entity: str, transitions: Mapping[str, Iterable[str]]) -> None:
        self.entity = entity
        self._transitions: dict[str, frozenset[str]] = {
            str(current): frozenset(str(target) for target in targets)
            for current, targets in transitions.items()
        }

    def allowed(self, current: str) -> frozenset[str]:
        return self._transitions.get(str(current), frozenset())

    def can(self, current: str, target: str) -> bool:
        return str(target) in self.allowed(current)

    def is_terminal(self, current: str) -> bool:
        return not self.allowed(current)

    def validate(self, current: str, target: str) -> None:
        if not self.can(current, target):
            raise InvalidTransitionError(self.entity, str(current), str(target))
