"""Core chain construction and rendering."""

from chainflow.core.chain import StateChain
from chainflow.core.errors import (
    CatchNotSupportedError,
    ChainError,
    ChainErrorCode,
    ChainResult,
    DuplicateStateIdError,
    NoOpenContinuationError,
    TransitionConflictError,
    attempt,
)
from chainflow.core.identity import StateSet
from chainflow.core.models import (
    CatchEdge,
    CatchProps,
    Errors,
    PolicyStatement,
    RenderedStateMachine,
    RetryPolicy,
)
from chainflow.core.node import Chainable, State

__all__ = [
    "StateChain",
    "StateSet",
    "State",
    "Chainable",
    "CatchEdge",
    "CatchProps",
    "Errors",
    "PolicyStatement",
    "RenderedStateMachine",
    "RetryPolicy",
    "ChainError",
    "ChainErrorCode",
    "ChainResult",
    "CatchNotSupportedError",
    "DuplicateStateIdError",
    "NoOpenContinuationError",
    "TransitionConflictError",
    "attempt",
]
