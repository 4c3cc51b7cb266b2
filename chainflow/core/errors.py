"""
Build-time errors raised while assembling state chains.

Every error carries a ``code`` so callers can tell the conditions apart
without inspecting messages. ``attempt`` turns a raising builder call into a
``ChainResult`` for callers that prefer branching on a value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from chainflow.core.chain import StateChain


class ChainErrorCode(str, Enum):
    """Discriminates the kinds of construction failures."""

    NO_OPEN_CONTINUATION = "NO_OPEN_CONTINUATION"
    TRANSITION_CONFLICT = "TRANSITION_CONFLICT"
    CATCH_NOT_SUPPORTED = "CATCH_NOT_SUPPORTED"
    DUPLICATE_STATE_ID = "DUPLICATE_STATE_ID"


class ChainError(Exception):
    """Base class for errors raised while building a state chain."""

    code: ChainErrorCode

    def __init__(self, message: str, state_id: Optional[str] = None, **details: Any):
        self.message = message
        self.state_id = state_id
        self.details = details
        super().__init__(message)


class NoOpenContinuationError(ChainError):
    """Raised when chaining onto a chain that has no state without a Next transition."""

    code = ChainErrorCode.NO_OPEN_CONTINUATION

    def __init__(self, start_state_id: str):
        super().__init__(
            'Cannot add to chain; there are no chainable states without a "Next" transition '
            f"(chain starting at '{start_state_id}')",
            state_id=start_state_id,
        )


class TransitionConflictError(ChainError):
    """Raised by a state when a Next transition cannot be assigned to it."""

    code = ChainErrorCode.TRANSITION_CONFLICT


class CatchNotSupportedError(ChainError):
    """Raised when attaching an error handler to a chain with non-catching states."""

    code = ChainErrorCode.CATCH_NOT_SUPPORTED

    def __init__(self, state_ids: list[str]):
        super().__init__(
            f"Chain contains states that cannot catch errors: {state_ids}. "
            "Only Task and Parallel states support error handlers; "
            "wrap this chain in a Parallel state to catch errors.",
            state_id=state_ids[0] if state_ids else None,
            state_ids=state_ids,
        )


class DuplicateStateIdError(ChainError):
    """Raised when two distinct states share an identifier."""

    code = ChainErrorCode.DUPLICATE_STATE_ID

    def __init__(self, state_id: str):
        super().__init__(
            f"State id '{state_id}' is used by more than one state",
            state_id=state_id,
        )


@dataclass
class ChainResult:
    """Outcome of a builder call run through ``attempt``."""

    chain: Optional["StateChain"] = None
    error: Optional[ChainError] = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_ok(self) -> bool:
        """Check if the call succeeded."""
        return self.error is None

    @property
    def code(self) -> Optional[ChainErrorCode]:
        """Error code of the failure, if any."""
        return self.error.code if self.error is not None else None

    def unwrap(self) -> "StateChain":
        """Return the chain, re-raising the captured error on failure."""
        if self.error is not None:
            raise self.error
        return self.chain


def attempt(operation: Callable[..., "StateChain"], *args: Any, **kwargs: Any) -> ChainResult:
    """
    Run a builder call and capture construction errors as a result value.

    Args:
        operation: Any callable returning a chain, e.g. ``chain.next``
        *args: Positional arguments for the call
        **kwargs: Keyword arguments for the call

    Returns:
        ChainResult holding either the chain or the ChainError raised
    """
    try:
        chain = operation(*args, **kwargs)
    except ChainError as e:
        return ChainResult(error=e, details=dict(e.details))
    return ChainResult(chain=chain)
