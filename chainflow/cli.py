"""chainflow command line interface.

Renders state machines defined in Python modules.
"""

import importlib
import json
import logging
from typing import Any, Optional

import typer

from chainflow import __version__
from chainflow.config import get_settings
from chainflow.core.errors import ChainError
from chainflow.core.node import Chainable
from chainflow.definition import StateMachineDefinition

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="chainflow",
    help="chainflow: build and render state machine definitions.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"chainflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level.",
    ),
) -> None:
    """chainflow: build and render state machine definitions."""
    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_definition(target: str) -> StateMachineDefinition:
    """
    Load a definition from a ``module:attribute`` reference.

    The attribute may be a StateMachineDefinition, a state or chain, or a
    callable without arguments returning one of those.

    Raises:
        ValueError: If the reference is malformed or does not resolve to a definition
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Expected MODULE:ATTRIBUTE, got '{target}'")

    module = importlib.import_module(module_name)
    try:
        obj: Any = getattr(module, attribute)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'") from None

    if not isinstance(obj, (StateMachineDefinition, Chainable)) and callable(obj):
        obj = obj()

    if isinstance(obj, StateMachineDefinition):
        return obj
    if isinstance(obj, Chainable):
        return StateMachineDefinition(obj)
    raise ValueError(f"'{target}' is not a state, chain or state machine definition")


@app.command()
def render(
    target: str = typer.Argument(..., help="Definition to render, as MODULE:ATTRIBUTE."),
    indent: Optional[int] = typer.Option(
        None,
        "--indent",
        "-i",
        help="JSON indentation (defaults to RENDER_INDENT).",
    ),
    full: bool = typer.Option(
        False,
        "--full/--asl",
        help="Emit start state, states and permission statements (--full) or the definition only (--asl).",
    ),
) -> None:
    """Render a state machine definition as JSON."""
    settings = get_settings().render
    if indent is None:
        indent = settings.indent

    try:
        definition = load_definition(target)
        if full:
            output = json.dumps(
                definition.render().to_dict(),
                indent=indent or None,
                sort_keys=settings.sort_keys,
            )
        else:
            output = definition.to_json(indent=indent)
    except (ImportError, ValueError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    except ChainError as e:
        typer.secho(f"Error [{e.code.value}]: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    logger.info(f"Rendered {target}")
    typer.echo(output)


if __name__ == "__main__":
    app()
