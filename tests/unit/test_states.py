"""
Unit tests for the reference state kinds.
"""

import pytest

from chainflow.core.errors import CatchNotSupportedError, TransitionConflictError
from chainflow.core.models import CatchProps, Errors, PolicyStatement, RetryPolicy
from chainflow.states import Choice, Fail, Parallel, Pass, Succeed, Task, Wait

LAMBDA_ARN = "arn:aws:lambda:us-east-1:123456789012:function:work"


class TestStateBase:
    """Tests for behavior shared by every state."""

    @pytest.mark.parametrize("state_id", ["", "   ", "x" * 81])
    def test_invalid_state_id(self, state_id):
        """Test empty or overlong ids are rejected."""
        with pytest.raises(ValueError):
            Pass(state_id)

    def test_common_fields_rendered(self):
        """Test comment and paths are rendered for any kind."""
        state = Pass("p", comment="hello", input_path="$.in", output_path="$.out")

        assert state.render_state() == {
            "Type": "Pass",
            "Comment": "hello",
            "InputPath": "$.in",
            "OutputPath": "$.out",
            "End": True,
        }

    def test_catch_on_non_catching_kind(self):
        """Test add_catch is refused by kinds that can't catch."""
        with pytest.raises(CatchNotSupportedError):
            Pass("p").add_catch(Pass("h").to_state_chain(), CatchProps())

    def test_retry_accepted_by_every_kind(self):
        """Test retry policies can be attached to any kind."""
        state = Wait("w", seconds=1)

        state.add_retry(RetryPolicy())

        assert len(state.retries) == 1

    def test_repr(self):
        """Test repr names the kind and id."""
        assert repr(Succeed("done")) == "Succeed('done')"


class TestPass:
    """Tests for Pass states."""

    def test_render_with_result(self):
        """Test result and result path are rendered."""
        state = Pass("p", result={"value": 1}, result_path="$.r")

        assert state.render_state() == {
            "Type": "Pass",
            "Result": {"value": 1},
            "ResultPath": "$.r",
            "End": True,
        }

    def test_render_next(self):
        """Test a Next transition replaces End."""
        state = Pass("p")
        state.next(Pass("q"))

        assert state.render_state() == {"Type": "Pass", "Next": "q"}


class TestTask:
    """Tests for Task states."""

    def test_requires_resource(self):
        """Test an empty resource is rejected."""
        with pytest.raises(ValueError):
            Task("t", resource="")

    def test_render_full(self):
        """Test every field, retry and catch are rendered."""
        task = Task(
            "t",
            resource=LAMBDA_ARN,
            parameters={"key.$": "$.key"},
            result_path="$.out",
            timeout_seconds=30,
            heartbeat_seconds=10,
        )
        task.to_state_chain().on_error(Pass("recover"), CatchProps(errors=[Errors.TIMEOUT]))
        task.add_retry(RetryPolicy(max_attempts=2))

        assert task.render_state() == {
            "Type": "Task",
            "Resource": LAMBDA_ARN,
            "Parameters": {"key.$": "$.key"},
            "ResultPath": "$.out",
            "TimeoutSeconds": 30,
            "HeartbeatSeconds": 10,
            "End": True,
            "Retry": [{
                "ErrorEquals": [Errors.ALL],
                "IntervalSeconds": 1,
                "MaxAttempts": 2,
                "BackoffRate": 2.0,
            }],
            "Catch": [{"ErrorEquals": [Errors.TIMEOUT], "Next": "recover"}],
        }

    def test_policy_statements(self):
        """Test the task exposes its permission statements."""
        statement = PolicyStatement(actions=["lambda:InvokeFunction"], resources=[LAMBDA_ARN])
        task = Task("t", resource=LAMBDA_ARN, policy_statements=[statement])

        assert task.policy_statements == [statement]
        assert task.can_have_catch


class TestWait:
    """Tests for Wait states."""

    def test_seconds(self):
        assert Wait("w", seconds=5).render_state() == {"Type": "Wait", "Seconds": 5, "End": True}

    def test_timestamp(self):
        state = Wait("w", timestamp="2026-01-01T00:00:00Z")

        assert state.render_state()["Timestamp"] == "2026-01-01T00:00:00Z"

    @pytest.mark.parametrize("kwargs", [{}, {"seconds": 1, "timestamp": "2026-01-01T00:00:00Z"}])
    def test_needs_exactly_one_of_seconds_or_timestamp(self, kwargs):
        with pytest.raises(ValueError):
            Wait("w", **kwargs)


class TestTerminalStates:
    """Tests for Succeed and Fail states."""

    @pytest.mark.parametrize("state", [Succeed("s"), Fail("f")])
    def test_no_next_transition(self, state):
        """Test terminal states never accept a Next."""
        assert not state.has_open_next_transition

        with pytest.raises(TransitionConflictError):
            state.add_next(Pass("after").to_state_chain())

    def test_fail_render(self):
        """Test error and cause are rendered, with no End."""
        state = Fail("f", error="Boom", cause="It broke")

        assert state.render_state() == {"Type": "Fail", "Error": "Boom", "Cause": "It broke"}

    def test_succeed_render(self):
        assert Succeed("s").render_state() == {"Type": "Succeed"}


class TestChoice:
    """Tests for Choice states."""

    def test_render_choices_and_default(self):
        """Test conditions are rendered with their targets."""
        choice = (
            Choice("pick")
            .when({"Variable": "$.n", "NumericGreaterThan": 10}, Pass("big"))
            .otherwise(Pass("small"))
        )

        assert choice.render_state() == {
            "Type": "Choice",
            "Choices": [{"Variable": "$.n", "NumericGreaterThan": 10, "Next": "big"}],
            "Default": "small",
        }

    def test_targets_are_accessible(self):
        """Test choice targets are reachable from the state."""
        choice = Choice("pick").when({"Variable": "$.n", "IsNull": True}, Pass("a")).otherwise(Pass("b"))

        starts = [chain.start_state.state_id for chain in choice.accessible_chains()]

        assert starts == ["a", "b"]

    def test_single_default(self):
        """Test a second default is refused."""
        choice = Choice("pick").otherwise(Pass("a"))

        with pytest.raises(ValueError):
            choice.otherwise(Pass("b"))

    def test_no_next_transition(self):
        """Test chaining onto a lone Choice raises the state's own error."""
        with pytest.raises(TransitionConflictError) as exc_info:
            Choice("pick").next(Pass("after"))

        assert "Choice" in str(exc_info.value)


class TestParallel:
    """Tests for Parallel states."""

    def test_render_branches(self):
        """Test each branch is rendered as its own state machine."""
        parallel = (
            Parallel("fan", result_path="$.results")
            .branch(Pass("left"))
            .branch(Pass("right").next(Succeed("right_done")))
        )

        assert parallel.render_state() == {
            "Type": "Parallel",
            "Branches": [
                {"StartAt": "left", "States": {"left": {"Type": "Pass", "End": True}}},
                {
                    "StartAt": "right",
                    "States": {
                        "right": {"Type": "Pass", "Next": "right_done"},
                        "right_done": {"Type": "Succeed"},
                    },
                },
            ],
            "ResultPath": "$.results",
            "End": True,
        }

    def test_branches_are_accessible(self):
        """Test branches are reachable from the state."""
        parallel = Parallel("fan").branch(Pass("a")).branch(Pass("b"))

        assert [c.start_state.state_id for c in parallel.accessible_chains()] == ["a", "b"]
        assert [c.start_state.state_id for c in parallel.branches] == ["a", "b"]

    def test_catch_capable(self):
        """Test error handlers can be attached to a Parallel."""
        parallel = Parallel("fan").branch(Pass("a"))

        chain = parallel.to_state_chain().on_error(Fail("failed"))

        assert len(parallel.catches) == 1
        assert chain.all_states.ids() == ["fan", "failed"]
