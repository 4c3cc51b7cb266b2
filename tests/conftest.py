"""
Pytest fixtures and configuration for tests.
"""

from typing import Any, Callable, Iterable, Optional

import pytest

from chainflow.config import Environment, Settings, get_settings
from chainflow.core.models import PolicyStatement
from chainflow.core.node import State


class StubState(State):
    """State with configurable capabilities, for exercising chains directly."""

    def __init__(
        self,
        state_id: str,
        chainable: bool = True,
        catchable: bool = True,
        policy_statements: Iterable[PolicyStatement] = (),
    ):
        super().__init__(state_id)
        self.allows_next = chainable
        self.can_have_catch = catchable
        self._policy_statements = list(policy_statements)

    @property
    def kind(self) -> str:
        return "Stub"

    @property
    def policy_statements(self) -> list[PolicyStatement]:
        return list(self._policy_statements)

    def render_state(self) -> dict[str, Any]:
        rendered = self._render_base()
        if self.allows_next:
            rendered.update(self._render_next_end())
        rendered.update(self._render_retry_catch())
        return rendered


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        environment=Environment.TEST,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def make_state() -> Callable[..., StubState]:
    """Factory for stub states: make_state("a", chainable=False, catchable=False)."""

    def factory(
        state_id: str,
        chainable: bool = True,
        catchable: bool = True,
        actions: Optional[list[str]] = None,
    ) -> StubState:
        statements = [PolicyStatement(actions=actions)] if actions else []
        return StubState(
            state_id,
            chainable=chainable,
            catchable=catchable,
            policy_statements=statements,
        )

    return factory


@pytest.fixture
def state_module(tmp_path, monkeypatch) -> str:
    """An importable module defining a small state machine; returns its name."""
    source = '''
from chainflow.core.models import PolicyStatement, RetryPolicy
from chainflow.definition import StateMachineDefinition
from chainflow.states import Fail, Pass, Succeed, Task

invoke = Task(
    "Invoke",
    resource="arn:aws:lambda:us-east-1:123456789012:function:work",
    policy_statements=[PolicyStatement(actions=["lambda:InvokeFunction"])],
)

chain = (
    Pass("Start")
    .next(invoke.to_state_chain().on_error(Fail("Failed", error="WorkFailed")))
    .next(Succeed("Done"))
)

definition = StateMachineDefinition(chain, comment="CLI sample")


def build():
    return Pass("Built")


not_a_definition = 42

'''
    (tmp_path / "sample_machine.py").write_text(source)
    monkeypatch.syspath_prepend(str(tmp_path))
    return "sample_machine"
