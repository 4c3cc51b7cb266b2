"""
Identity-keyed sets of states.

States are compared by identity, never structurally. The stable state id is
used as the key, and a second, different state object carrying an id that is
already present is rejected.
"""

from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Optional

from chainflow.core.errors import DuplicateStateIdError

if TYPE_CHECKING:
    from chainflow.core.node import State


class StateSet:
    """Insertion-ordered set of states keyed by ``state_id``."""

    def __init__(self, states: Iterable["State"] = ()):
        self._states: dict[str, "State"] = {}
        self.update(states)

    def add(self, state: "State") -> None:
        """
        Add a state, ignoring it if already present.

        Raises:
            DuplicateStateIdError: If a different state already uses the id
        """
        existing = self._states.get(state.state_id)
        if existing is None:
            self._states[state.state_id] = state
        elif existing is not state:
            raise DuplicateStateIdError(state.state_id)

    def update(self, states: Iterable["State"]) -> None:
        """Add every state from an iterable."""
        for state in states:
            self.add(state)

    def get(self, state_id: str) -> Optional["State"]:
        """Get state by ID."""
        return self._states.get(state_id)

    def ids(self) -> list[str]:
        """State ids in insertion order."""
        return list(self._states)

    def copy(self) -> "StateSet":
        """Shallow copy: same states, independent membership."""
        clone = StateSet()
        clone._states = dict(self._states)
        return clone

    def filter(self, predicate: Callable[["State"], bool]) -> "StateSet":
        """Return the states matching a predicate, keeping their order."""
        return StateSet(state for state in self if predicate(state))

    def issubset(self, other: "StateSet") -> bool:
        """Check that every state here is also in ``other``."""
        return all(state in other for state in self)

    def __contains__(self, state: object) -> bool:
        state_id = getattr(state, "state_id", None)
        return state_id is not None and self._states.get(state_id) is state

    def __iter__(self) -> Iterator["State"]:
        return iter(list(self._states.values()))

    def __len__(self) -> int:
        return len(self._states)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateSet):
            return NotImplemented
        return len(self) == len(other) and self.issubset(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"StateSet({self.ids()!r})"
