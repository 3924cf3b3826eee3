"""Validation helpers for steps, flow names, and connections."""

from __future__ import annotations

from collections.abc import Iterable

from ctaflow.core.types import Step, Transition

DEFAULT_FLOW_NAME = "Untitled"

MAX_FLOW_NAME_LENGTH = 100


def has_template(step: Step) -> bool:
    """Check whether a step carries a real template.

    Steps without a non-blank template name are treated as not-yet-real:
    they are skipped on save and ignored by the unreachable-steps gate.

    Args:
        step: The step to check.

    Returns:
        True if the template name has non-whitespace content.
    """
    return bool(step.template_name and step.template_name.strip())


def normalize_flow_name(name: str | None, default: str = DEFAULT_FLOW_NAME) -> str:
    """Return a usable flow name.

    Args:
        name: Name entered by the operator (may be empty).
        default: Fallback when the name is blank.

    Returns:
        The stripped name, or the default.

    Raises:
        ValueError: If the name is longer than MAX_FLOW_NAME_LENGTH.

    Example:
        >>> normalize_flow_name("  Diwali offer ")
        'Diwali offer'
        >>> normalize_flow_name("")
        'Untitled'
    """
    cleaned = (name or "").strip()
    if not cleaned:
        return default
    if len(cleaned) > MAX_FLOW_NAME_LENGTH:
        raise ValueError(f"Flow name must be {MAX_FLOW_NAME_LENGTH} characters or less")
    return cleaned


def is_valid_connection(
    transitions: Iterable[Transition],
    source: str | None,
    source_handle: str | None,
) -> bool:
    """Check if the canvas should accept a new connection.

    A connection must start from a button handle, and a button may only
    have one outgoing transition. The graph store itself does not call
    this; it is offered to the canvas.

    Args:
        transitions: Current transitions.
        source: Source step id.
        source_handle: Handle (button text) the drag started from.

    Returns:
        True if the connection may be created.
    """
    if not source or not source_handle:
        return False
    return not any(t.source == source and t.source_handle == source_handle for t in transitions)
