"""
Reference state kinds.

Minimal implementations of the state contract for the common states of the
states language. Field values are passed through to the rendered output
as given.
"""

from typing import Any, Iterable, Optional

from chainflow.core.chain import StateChain
from chainflow.core.models import PolicyStatement
from chainflow.core.node import Chainable, State


class Pass(State):
    """Passes its input to its output, optionally injecting a fixed result."""

    def __init__(
        self,
        state_id: str,
        result: Optional[Any] = None,
        result_path: Optional[str] = None,
        parameters: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(state_id, **kwargs)
        self.result = result
        self.result_path = result_path
        self.parameters = parameters

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        if self.parameters is not None:
            rendered["Parameters"] = self.parameters
        if self.result is not None:
            rendered["Result"] = self.result
        if self.result_path is not None:
            rendered["ResultPath"] = self.result_path
        rendered.update(self._render_next_end())
        return rendered


class Task(State):
    """Invokes a resource. Supports retries and error handlers."""

    can_have_catch = True

    def __init__(
        self,
        state_id: str,
        resource: str,
        parameters: Optional[dict[str, Any]] = None,
        result_path: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        heartbeat_seconds: Optional[int] = None,
        policy_statements: Iterable[PolicyStatement] = (),
        **kwargs: Any,
    ):
        super().__init__(state_id, **kwargs)
        if not resource:
            raise ValueError(f"Task '{state_id}' requires a resource")
        self.resource = resource
        self.parameters = parameters
        self.result_path = result_path
        self.timeout_seconds = timeout_seconds
        self.heartbeat_seconds = heartbeat_seconds
        self._policy_statements = list(policy_statements)

    @property
    def policy_statements(self) -> list[PolicyStatement]:
        return list(self._policy_statements)

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        rendered["Resource"] = self.resource
        if self.parameters is not None:
            rendered["Parameters"] = self.parameters
        if self.result_path is not None:
            rendered["ResultPath"] = self.result_path
        if self.timeout_seconds is not None:
            rendered["TimeoutSeconds"] = self.timeout_seconds
        if self.heartbeat_seconds is not None:
            rendered["HeartbeatSeconds"] = self.heartbeat_seconds
        rendered.update(self._render_next_end())
        rendered.update(self._render_retry_catch())
        return rendered


class Wait(State):
    """Delays for a number of seconds or until a timestamp."""

    def __init__(
        self,
        state_id: str,
        seconds: Optional[int] = None,
        timestamp: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(state_id, **kwargs)
        if (seconds is None) == (timestamp is None):
            raise ValueError(f"Wait '{state_id}' needs exactly one of seconds or timestamp")
        self.seconds = seconds
        self.timestamp = timestamp

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        if self.seconds is not None:
            rendered["Seconds"] = self.seconds
        else:
            rendered["Timestamp"] = self.timestamp
        rendered.update(self._render_next_end())
        return rendered


class Succeed(State):
    """Terminal state that ends the execution successfully."""

    allows_next = False

    def render_state(self) -> dict[str, Any]:
        return self._render_base()


class Fail(State):
    """Terminal state that ends the execution with an error."""

    allows_next = False

    def __init__(
        self,
        state_id: str,
        error: Optional[str] = None,
        cause: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(state_id, **kwargs)
        self.error = error
        self.cause = cause

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        if self.error is not None:
            rendered["Error"] = self.error
        if self.cause is not None:
            rendered["Cause"] = self.cause
        return rendered


class Choice(State):
    """
    Branches to one of several chains based on conditions.

    A Choice never takes a Next transition itself; continue building from
    the chains passed to ``when`` and ``otherwise``.
    """

    allows_next = False

    def __init__(self, state_id: str, **kwargs: Any):
        super().__init__(state_id, **kwargs)
        self._choices: list[tuple[dict[str, Any], StateChain]] = []
        self._default: Optional[StateChain] = None

    def when(self, condition: dict[str, Any], chainable: Chainable) -> "Choice":
        """Transition to ``chainable`` when ``condition`` matches."""
        self._choices.append((dict(condition), chainable.to_state_chain()))
        return self

    def otherwise(self, chainable: Chainable) -> "Choice":
        """Transition to ``chainable`` when no condition matches."""
        if self._default is not None:
            raise ValueError(f"Choice '{self.state_id}' already has a default transition")
        self._default = chainable.to_state_chain()
        return self

    def nested_chains(self) -> list[StateChain]:
        chains = [chain for _, chain in self._choices]
        if self._default is not None:
            chains.append(self._default)
        return chains

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        rendered["Choices"] = [
            {**condition, "Next": chain.start_state.state_id}
            for condition, chain in self._choices
        ]
        if self._default is not None:
            rendered["Default"] = self._default.start_state.state_id
        return rendered


class Parallel(State):
    """Runs several branches concurrently. Supports retries and error handlers."""

    can_have_catch = True

    def __init__(self, state_id: str, result_path: Optional[str] = None, **kwargs: Any):
        super().__init__(state_id, **kwargs)
        self.result_path = result_path
        self._branches: list[StateChain] = []

    def branch(self, chainable: Chainable) -> "Parallel":
        """Add a branch to run."""
        self._branches.append(chainable.to_state_chain())
        return self

    @property
    def branches(self) -> list[StateChain]:
        return list(self._branches)

    def nested_chains(self) -> list[StateChain]:
        """
        The branches, so their states and permission statements are reached
        by a closure of the enclosing chain.

        Open end states inside a branch are therefore active after
        ``closure()``, and chaining onto that closure links them to states
        outside the branch. Continue from the chain holding the Parallel
        itself, not from its closure.
        """
        return list(self._branches)

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        rendered["Branches"] = [
            branch.render_state_machine().state_machine_definition
            for branch in self._branches
        ]
        if self.result_path is not None:
            rendered["ResultPath"] = self.result_path
        rendered.update(self._render_next_end())
        rendered.update(self._render_retry_catch())
        return rendered


__all__ = ["Pass", "Task", "Wait", "Succeed", "Fail", "Choice", "Parallel"]
