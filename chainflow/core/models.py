"""
Value models for state machine construction.

Retry policies, catch properties, permission statements and the rendered
output use Pydantic for validation and serialization.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from chainflow.config import RetrySettings
    from chainflow.core.chain import StateChain


class Errors:
    """Predefined error names of the states language."""

    ALL = "States.ALL"
    TIMEOUT = "States.Timeout"
    TASK_FAILED = "States.TaskFailed"
    PERMISSIONS = "States.Permissions"
    RESULT_PATH_MATCH_FAILURE = "States.ResultPathMatchFailure"
    BRANCH_FAILED = "States.BranchFailed"
    NO_CHOICE_MATCHED = "States.NoChoiceMatched"


class RetryPolicy(BaseModel):
    """Retry behavior attached to a state."""

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(default_factory=list, description="Errors to retry on (empty means all)")
    interval_seconds: int = Field(default=1, ge=1, description="Delay before the first retry (seconds)")
    max_attempts: int = Field(default=3, ge=0, description="Maximum retry attempts")
    backoff_rate: float = Field(default=2.0, ge=1.0, description="Multiplier applied to the interval per attempt")

    @classmethod
    def from_settings(cls, settings: "RetrySettings") -> "RetryPolicy":
        """Build the default policy from retry settings."""
        return cls(
            interval_seconds=settings.interval_seconds,
            max_attempts=settings.max_attempts,
            backoff_rate=settings.backoff_rate,
        )

    def render(self) -> dict[str, Any]:
        """Render as a ``Retry`` entry."""
        return {
            "ErrorEquals": list(self.errors) or [Errors.ALL],
            "IntervalSeconds": self.interval_seconds,
            "MaxAttempts": self.max_attempts,
            "BackoffRate": self.backoff_rate,
        }


class CatchProps(BaseModel):
    """Properties of an error handler attached with ``on_error``."""

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(default_factory=list, description="Errors to catch (empty means all)")
    result_path: Optional[str] = Field(default=None, description="Where to place the error output")

    def with_defaults(self) -> "CatchProps":
        """Return these props with an empty error list replaced by ``States.ALL``."""
        if self.errors:
            return self
        return self.model_copy(update={"errors": [Errors.ALL]})


@dataclass(frozen=True)
class CatchEdge:
    """An error-handling edge from a state to a handler chain."""

    handler: "StateChain"
    props: CatchProps

    def render(self) -> dict[str, Any]:
        """Render as a ``Catch`` entry."""
        rendered: dict[str, Any] = {
            "ErrorEquals": list(self.props.errors),
            "Next": self.handler.start_state.state_id,
        }
        if self.props.result_path is not None:
            rendered["ResultPath"] = self.props.result_path
        return rendered


class PolicyStatement(BaseModel):
    """A permission statement required by a state."""

    model_config = ConfigDict(frozen=True)

    effect: Literal["Allow", "Deny"] = Field(default="Allow")
    actions: list[str] = Field(..., min_length=1, description="Actions granted or denied")
    resources: list[str] = Field(default_factory=lambda: ["*"], description="Resources the actions apply to")

    @field_validator("actions")
    @classmethod
    def validate_actions(cls, v: list[str]) -> list[str]:
        """Reject blank action names."""
        if any(not action.strip() for action in v):
            raise ValueError("Action names must not be blank")
        return v

    def render(self) -> dict[str, Any]:
        """Render as a policy document statement."""
        return {
            "Effect": self.effect,
            "Action": list(self.actions),
            "Resource": list(self.resources),
        }


class RenderedStateMachine(BaseModel):
    """Compiled output of a state chain."""

    model_config = ConfigDict(populate_by_name=True)

    start_at: str = Field(..., serialization_alias="startAt")
    states: dict[str, dict[str, Any]] = Field(default_factory=dict)
    policy_statements: list[PolicyStatement] = Field(
        default_factory=list, serialization_alias="permissionStatements"
    )

    @property
    def state_machine_definition(self) -> dict[str, Any]:
        """The definition in states language form."""
        return {"StartAt": self.start_at, "States": self.states}

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the public field names."""
        return self.model_dump(by_alias=True)
