"""
Explicit transition tables for status fields.

Each mutating operation checks the requested move against its entity's table
before writing; anything not listed is rejected.
"""

from typing import Dict, FrozenSet, Type

from .exceptions import ConflictError


class TransitionTable:
    """
    Map of ``current status -> allowed next statuses``.

    Statuses absent from the map as keys are terminal.

    Example::

        RENTAL_TRANSITIONS = TransitionTable({
            'active': {'completed', 'cancelled'},
        })
        RENTAL_TRANSITIONS.check('active', 'completed', RentalNotActiveError)
    """

    def __init__(self, transitions: Dict[str, set]):
        self._transitions: Dict[str, FrozenSet[str]] = {
            str(source): frozenset(str(target) for target in targets)
            for source, targets in transitions.items()
        }

    def allowed(self, current: str, target: str) -> bool:
        return str(target) in self._transitions.get(str(current), frozenset())

    def is_terminal(self, status: str) -> bool:
        return not self._transitions.get(str(status))

    def targets(self, current: str) -> FrozenSet[str]:
        return self._transitions.get(str(current), frozenset())

    def check(self, current: str, target: str, error: Type[ConflictError] = ConflictError) -> None:
        """Raise ``error`` unless ``current -> target`` is in the table."""
        if not self.allowed(current, target):
            raise error(f"Cannot move from '{current}' to '{target}'.")
