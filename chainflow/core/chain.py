"""
State chains: composable fragments of a state machine.

A chain wraps a shared, mutable graph of states. It tracks every state
folded into it so far (``all_states``) and the states that still have an
open Next transition (``active_states``). Builder operations mutate the
shared states and return a new chain, so the chain behaves as a value while
the graph underneath is shared by every chain that references it.
"""

import logging
from collections import deque
from typing import Optional

from chainflow.config import get_settings
from chainflow.core.errors import CatchNotSupportedError, NoOpenContinuationError
from chainflow.core.identity import StateSet
from chainflow.core.models import CatchProps, PolicyStatement, RenderedStateMachine, RetryPolicy
from chainflow.core.node import Chainable, State

logger = logging.getLogger(__name__)


class StateChain:
    """
    A fragment of a state machine with a fixed start state.

    Invariants:
    - ``active_states`` is always a subset of ``all_states``
    - ``all_states`` always contains at least the start state
    - the start state never changes across chaining
    """

    def __init__(self, start_state: State):
        self._start_state = start_state
        self._all_states = StateSet([start_state])

        # Seeded even if the state can't take a Next, so that chaining onto it
        # raises the state's own error instead of NoOpenContinuationError.
        self._active_states = StateSet([start_state])

    @property
    def start_state(self) -> State:
        """The state execution of this chain begins at."""
        return self._start_state

    @property
    def all_states(self) -> StateSet:
        """Every state folded into this chain so far."""
        return self._all_states.copy()

    @property
    def active_states(self) -> StateSet:
        """States that are valid continuation points."""
        return self._active_states.copy()

    def to_state_chain(self) -> "StateChain":
        return self

    def next(self, chainable: Chainable) -> "StateChain":
        """
        Append a chain after every active state.

        Args:
            chainable: State or chain to continue with

        Returns:
            New chain that continues from the appended chain's active states

        Raises:
            NoOpenContinuationError: If there are no active states
            TransitionConflictError: If an active state refuses the transition
        """
        target = chainable.to_state_chain()

        if len(self._active_states) == 0:
            raise NoOpenContinuationError(self._start_state.state_id)

        ret = self._clone()
        ret.absorb(target)
        for state in self._active_states:
            state.add_next(target)

        # A seeded start state that can never take a Next is not a continuation point.
        ret._active_states = target._active_states.filter(lambda s: s.has_open_next_transition)

        logger.debug(
            f"Chained {target.start_state.state_id} onto {self._start_state.state_id}; "
            f"active: {ret._active_states.ids()}"
        )
        return ret

    def on_error(self, handler: Chainable, props: Optional[CatchProps] = None) -> "StateChain":
        """
        Attach an error handler to every state in this chain.

        The handler's states become part of the chain but not its active
        states: continuation stays on the main path.

        Args:
            handler: State or chain to transition to on error
            props: Errors to catch and result path; no errors means all errors

        Returns:
            New chain including the handler

        Raises:
            CatchNotSupportedError: If any state in the chain cannot catch errors
        """
        props = (props or CatchProps()).with_defaults()
        target = handler.to_state_chain()

        # Check everything first so a failure leaves all states untouched.
        unsupported = [state.state_id for state in self._all_states if not state.can_have_catch]
        if unsupported:
            raise CatchNotSupportedError(unsupported)

        # Those states are now part of the chain, but their active ends are not.
        ret = self._clone()
        ret.absorb(target)
        for state in self._all_states:
            state.add_catch(target, props)

        logger.debug(
            f"Attached handler {target.start_state.state_id} for {props.errors} "
            f"to {self._all_states.ids()}"
        )
        return ret

    def closure(self) -> "StateChain":
        """
        Return a chain containing every state reachable from the start state.

        The active states of the result are recomputed as every reachable
        state with an open Next transition.
        """
        ret = StateChain(self._start_state)

        queue = deque(self._start_state.accessible_chains())
        while queue:
            chain = queue.popleft()
            for state in chain._all_states:
                if state not in ret._all_states:
                    ret._all_states.add(state)
                    queue.extend(state.accessible_chains())

        ret._active_states = ret._all_states.filter(lambda s: s.has_open_next_transition)
        return ret

    def render_state_machine(self) -> RenderedStateMachine:
        """
        Render the closure of this chain.

        Returns:
            RenderedStateMachine with the start state id, every reachable
            state rendered by id, and their permission statements
        """
        # Rendering always implies rendering the closure
        closed = self.closure()

        states: dict[str, dict] = {}
        policies: list[PolicyStatement] = []
        for state in closed._all_states:
            states[state.state_id] = state.render_state()
            policies.extend(state.policy_statements)

        logger.info(
            f"Rendered state machine starting at {self._start_state.state_id}: "
            f"{len(states)} states, {len(policies)} policy statements"
        )
        return RenderedStateMachine(
            start_at=self._start_state.state_id,
            states=states,
            policy_statements=policies,
        )

    def default_retry(self, policy: Optional[RetryPolicy] = None) -> "StateChain":
        """
        Add a retry policy to every state in this chain.

        Mutates the states in place and returns this same chain.

        Args:
            policy: Retry policy; defaults to the configured retry settings
        """
        if policy is None:
            policy = RetryPolicy.from_settings(get_settings().retry)
        for state in self._all_states:
            state.add_retry(policy)
        return self

    def absorb(self, other: Chainable) -> None:
        """Fold another chain's states into this one without making them active."""
        self._all_states.update(other.to_state_chain()._all_states)

    def _clone(self) -> "StateChain":
        ret = StateChain(self._start_state)
        ret._all_states = self._all_states.copy()
        ret._active_states = self._active_states.copy()
        return ret

    def __repr__(self) -> str:
        return (
            f"StateChain(start={self._start_state.state_id!r}, "
            f"states={self._all_states.ids()!r}, active={self._active_states.ids()!r})"
        )
