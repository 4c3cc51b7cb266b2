"""
Top-level state machine definitions.
"""

import json
from typing import Any, Optional

from chainflow.config import get_settings
from chainflow.core.chain import StateChain
from chainflow.core.models import PolicyStatement, RenderedStateMachine
from chainflow.core.node import Chainable


class StateMachineDefinition:
    """
    A complete state machine built from a chain.

    Adds the definition-level ``Comment`` and ``TimeoutSeconds`` fields to
    the rendered chain.
    """

    def __init__(
        self,
        start: Chainable,
        comment: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ):
        if timeout_seconds is not None and timeout_seconds < 1:
            raise ValueError("timeout_seconds must be >= 1")
        self.chain: StateChain = start.to_state_chain()
        self.comment = comment
        self.timeout_seconds = timeout_seconds

    def render(self) -> RenderedStateMachine:
        """Render the closure of the chain."""
        return self.chain.render_state_machine()

    def to_asl(self) -> dict[str, Any]:
        """The definition in states language form, with definition-level fields."""
        rendered = self.render()
        definition: dict[str, Any] = {}
        if self.comment is not None:
            definition["Comment"] = self.comment
        definition.update(rendered.state_machine_definition)
        if self.timeout_seconds is not None:
            definition["TimeoutSeconds"] = self.timeout_seconds
        return definition

    @property
    def policy_statements(self) -> list[PolicyStatement]:
        """Permission statements required by every reachable state."""
        return self.render().policy_statements

    def to_json(self, indent: Optional[int] = None, sort_keys: Optional[bool] = None) -> str:
        """
        Serialize the states-language definition.

        Args:
            indent: JSON indentation; defaults to the render settings
            sort_keys: Sort object keys; defaults to the render settings
        """
        settings = get_settings().render
        if indent is None:
            indent = settings.indent
        if sort_keys is None:
            sort_keys = settings.sort_keys
        return json.dumps(self.to_asl(), indent=indent or None, sort_keys=sort_keys)
