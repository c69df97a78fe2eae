"""Interactive prompts for the install command.

questionary is used when a TTY is available; callers fall back to plain
arguments and flags otherwise.
"""

import sys

import click

from .errors import ValidationError
from .identifiers import extract_identifier, is_valid_identifier
from .installer import ResolutionPlan, render_plan

PROMPT_MESSAGE = "Please enter VS Code marketplace link or plugin ID"
PROMPT_HINT = (
    "Example: https://marketplace.visualstudio.com/items?itemName=xxx "
    "or publisher.pluginName"
)


def _validate_input(text: str) -> bool | str:
    """questionary validator: True when acceptable, else the error to show."""
    if not text or not text.strip():
        return "Please enter a valid marketplace link or plugin ID"
    try:
        identifier = extract_identifier(text)
    except ValidationError as e:
        return str(e)
    if not is_valid_identifier(identifier):
        return "Invalid plugin ID format. Expected format: publisher.pluginName"
    return True


def prompt_identifier_interactive() -> str | None:
    """Ask for a marketplace link or plugin ID.

    Returns:
        The raw text entered, or None if the user cancels.

    Raises:
        RuntimeError: If not running in a TTY
    """
    if not sys.stdin.isatty():
        raise RuntimeError("Interactive prompt requires a TTY")

    import questionary
    from prompt_toolkit.styles import Style

    style = Style([("instruction", "fg:ansibrightblack")])

    try:
        answer = questionary.text(
            PROMPT_MESSAGE,
            instruction=f"\n  {PROMPT_HINT}\n ",
            validate=_validate_input,
            style=style,
        ).ask()
    except KeyboardInterrupt:
        return None

    if not answer:
        return None
    return answer.strip()


def display_plan(plan: ResolutionPlan) -> None:
    """Print the resolved install order with colors."""
    for line in render_plan(plan).splitlines():
        if line.startswith("Installation Plan"):
            click.secho(line, bold=True)
        elif line.startswith("⚠️") or line.startswith("   •"):
            click.secho(line, fg="yellow")
        else:
            click.echo(line)


def confirm_install_interactive(plan: ResolutionPlan) -> bool:
    """Ask before handing the plan to the host.

    Raises:
        RuntimeError: If not running in a TTY
    """
    if not sys.stdin.isatty():
        raise RuntimeError("Interactive confirmation requires a TTY")

    import questionary

    count = len(plan.artifacts)
    try:
        answer = questionary.confirm(
            f"Install {count} package(s)?", default=True
        ).ask()
    except KeyboardInterrupt:
        return False
    return bool(answer)


__all__ = [
    "prompt_identifier_interactive",
    "display_plan",
    "confirm_install_interactive",
]
