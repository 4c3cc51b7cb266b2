"""
The contract every state in a chain fulfils.

``State`` keeps the edge bookkeeping shared by all kinds: the ``Next``
transition, catch edges and retry policies. Concrete kinds decide whether a
``Next`` is allowed, whether errors can be caught, which nested chains they
hold, and how they render.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from chainflow.core.errors import CatchNotSupportedError, TransitionConflictError
from chainflow.core.models import CatchEdge, CatchProps, PolicyStatement, RetryPolicy

if TYPE_CHECKING:
    from chainflow.core.chain import StateChain

logger = logging.getLogger(__name__)


@runtime_checkable
class Chainable(Protocol):
    """Anything that can be turned into a state chain."""

    def to_state_chain(self) -> "StateChain":
        ...


class State(ABC):
    """
    Base class for a single state (vertex) of a state machine.

    States are mutated in place as edges are attached, and every chain that
    references a state sees those mutations.
    """

    # Whether error handlers may be attached with on_error()
    can_have_catch: bool = False

    # Whether this kind may ever take a Next transition
    allows_next: bool = True

    def __init__(
        self,
        state_id: str,
        comment: Optional[str] = None,
        input_path: Optional[str] = None,
        output_path: Optional[str] = None,
    ):
        if not state_id or not state_id.strip():
            raise ValueError("State id must be a non-empty string")
        if len(state_id) > 80:
            raise ValueError(f"State id '{state_id}' is longer than 80 characters")
        self.state_id = state_id
        self.comment = comment
        self.input_path = input_path
        self.output_path = output_path
        self._next: Optional["StateChain"] = None
        self._catches: list[CatchEdge] = []
        self._retries: list[RetryPolicy] = []

    @property
    def kind(self) -> str:
        """The state type name used in the rendered definition."""
        return type(self).__name__

    @property
    def has_open_next_transition(self) -> bool:
        """Check if a Next transition may still be assigned."""
        return self.allows_next and self._next is None

    @property
    def next_chain(self) -> Optional["StateChain"]:
        """The chain this state transitions to, if assigned."""
        return self._next

    @property
    def catches(self) -> list[CatchEdge]:
        """Attached catch edges."""
        return list(self._catches)

    @property
    def retries(self) -> list[RetryPolicy]:
        """Attached retry policies."""
        return list(self._retries)

    @property
    def policy_statements(self) -> list[PolicyStatement]:
        """Permission statements this state requires."""
        return []

    def add_next(self, chain: "StateChain") -> None:
        """
        Assign the Next transition.

        Raises:
            TransitionConflictError: If this kind cannot have a Next, or one is already set
        """
        if not self.allows_next:
            raise TransitionConflictError(
                f"{self.kind} state '{self.state_id}' cannot have a Next transition",
                state_id=self.state_id,
                kind=self.kind,
            )
        if self._next is not None:
            raise TransitionConflictError(
                f"State '{self.state_id}' already has a Next transition "
                f"to '{self._next.start_state.state_id}'",
                state_id=self.state_id,
                kind=self.kind,
                existing_next=self._next.start_state.state_id,
            )
        logger.debug(f"{self.state_id} -> {chain.start_state.state_id}")
        self._next = chain

    def add_catch(self, chain: "StateChain", props: CatchProps) -> None:
        """
        Attach an error handler.

        Raises:
            CatchNotSupportedError: If this kind cannot catch errors
        """
        if not self.can_have_catch:
            raise CatchNotSupportedError([self.state_id])
        logger.debug(
            f"{self.state_id} catches {props.errors} -> {chain.start_state.state_id}"
        )
        self._catches.append(CatchEdge(handler=chain, props=props))

    def add_retry(self, policy: RetryPolicy) -> None:
        """Attach a retry policy."""
        self._retries.append(policy)

    def nested_chains(self) -> list["StateChain"]:
        """Chains held by this kind itself (branches, choice targets)."""
        return []

    def accessible_chains(self) -> list["StateChain"]:
        """Every chain directly reachable from this state."""
        chains: list["StateChain"] = []
        if self._next is not None:
            chains.append(self._next)
        chains.extend(edge.handler for edge in self._catches)
        chains.extend(self.nested_chains())
        return chains

    def to_state_chain(self) -> "StateChain":
        """Wrap this state in a new single-state chain."""
        from chainflow.core.chain import StateChain

        return StateChain(self)

    def next(self, chainable: Chainable) -> "StateChain":
        """Shorthand for ``self.to_state_chain().next(chainable)``."""
        return self.to_state_chain().next(chainable)

    @abstractmethod
    def render_state(self) -> dict[str, Any]:
        """Render this state as a states-language object."""

    # Rendering helpers for subclasses

    def _render_base(self) -> dict[str, Any]:
        rendered: dict[str, Any] = {"Type": self.kind}
        if self.comment is not None:
            rendered["Comment"] = self.comment
        if self.input_path is not None:
            rendered["InputPath"] = self.input_path
        if self.output_path is not None:
            rendered["OutputPath"] = self.output_path
        return rendered

    def _render_next_end(self) -> dict[str, Any]:
        if self._next is not None:
            return {"Next": self._next.start_state.state_id}
        return {"End": True}

    def _render_retry_catch(self) -> dict[str, Any]:
        rendered: dict[str, Any] = {}
        if self._retries:
            rendered["Retry"] = [policy.render() for policy in self._retries]
        if self._catches:
            rendered["Catch"] = [edge.render() for edge in self._catches]
        return rendered

    def __repr__(self) -> str:
        return f"{self.kind}({self.state_id!r})"
