"""Connection binding: turn a drawn connection into a button update.

The binding rule lives in ``select_button`` so it can be swapped without
touching the graph store. The current rule takes the first button that
has no target yet and ignores which handle the operator dragged from.
"""

from __future__ import annotations

import dataclasses
import logging

from ctaflow.core.types import DEFAULT_TRIGGER_TYPE, Button, Step

logger = logging.getLogger(__name__)


def select_button(buttons: list[Button], source_handle: str | None) -> int | None:
    """Pick the button a new transition binds to.

    Args:
        buttons: The source step's buttons, in order.
        source_handle: Handle the connection was drawn from (unused by
            this rule).

    Returns:
        Index of the first button without a target, or None if all
        buttons are already bound.
    """
    for i, button in enumerate(buttons):
        if button.target_node_id is None:
            return i
    return None


def sync_trigger(step: Step) -> Step:
    """Refresh the trigger text from the first button.

    Steps without buttons keep whatever trigger text they had. A stored
    trigger type is kept; a blank one becomes the default.

    Args:
        step: Step to update in place.

    Returns:
        The same step.
    """
    if step.buttons:
        step.trigger_button_text = step.buttons[0].text
        step.trigger_button_type = step.trigger_button_type or DEFAULT_TRIGGER_TYPE
    return step


def bind_connection(step: Step, target_id: str, source_handle: str | None = None) -> int | None:
    """Bind a new transition from ``step`` to ``target_id``.

    Sets ``target_node_id`` on the button chosen by ``select_button``;
    all other buttons are left as they are. The button list is replaced
    rather than mutated so earlier snapshots stay valid.

    Args:
        step: Source step (updated in place).
        target_id: Target step id.
        source_handle: Handle the connection was drawn from.

    Returns:
        Index of the bound button, or None if no button was free.
    """
    index = select_button(step.buttons, source_handle)
    if index is None:
        logger.debug("bind skipped: step=%s has no free button", step.id)
        return None

    buttons = list(step.buttons)
    buttons[index] = dataclasses.replace(buttons[index], target_node_id=target_id)
    step.buttons = buttons
    sync_trigger(step)

    logger.debug("bound: step=%s button=%d -> %s", step.id, index, target_id)
    return index
