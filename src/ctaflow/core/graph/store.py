"""Graph store - owns the steps and transitions of one flow."""

from __future__ import annotations

import dataclasses
import logging
import random
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from ctaflow.core.errors import StepNotFoundError, TransitionNotFoundError
from ctaflow.core.graph.binder import bind_connection, sync_trigger
from ctaflow.core.graph.layout import Direction, auto_layout, random_position
from ctaflow.core.graph.reachability import annotate
from ctaflow.core.mode import ModeController
from ctaflow.core.types import (
    DEFAULT_BUTTON_TYPE,
    DEFAULT_TEMPLATE_TYPE,
    Button,
    Position,
    Step,
    TemplateDescriptor,
    Transition,
)

logger = logging.getLogger(__name__)

# Fields patch_step_data may touch. Identity, position and derived flags
# have their own operations.
PATCHABLE_FIELDS = frozenset(
    {
        "template_name",
        "template_type",
        "message_body",
        "trigger_button_text",
        "trigger_button_type",
        "required_tag",
        "required_source",
        "buttons",
    }
)

BUTTON_FIELDS = frozenset(f.name for f in dataclasses.fields(Button))


class GraphStore:
    """In-memory node and edge collections of a flow.

    Every structural mutation (adding or removing a step or a transition,
    replacing the whole graph, changing the entry step) is followed by a
    reachability pass before it returns, so ``is_unreachable`` is always
    current when a caller looks at it.

    Mutations are refused with ``ReadOnlyError`` when the mode controller
    says the flow is read-only. ``replace`` is not gated: it is how a
    loaded flow gets installed, including in view mode.

    Steps handed out are live objects, but a reachability pass may swap a
    step for an updated copy. Re-read steps through ``get_step`` after a
    mutation rather than holding on to them.

    Example:
        >>> store = GraphStore()
        >>> yes = ButtonTemplate(text="Yes")
        >>> a = store.add_step(TemplateDescriptor(name="welcome", buttons=(yes,)))
        >>> b = store.add_step(TemplateDescriptor(name="offer"))
        >>> store.add_transition(a.id, b.id, "Yes")
        >>> store.get_step(b.id).is_unreachable
        False
    """

    def __init__(
        self,
        mode: ModeController | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._mode = mode or ModeController()
        self._rng = rng or random.Random()
        self._steps: dict[str, Step] = {}
        self._transitions: list[Transition] = []

    # -- queries ---------------------------------------------------------

    @property
    def mode(self) -> ModeController:
        return self._mode

    @property
    def steps(self) -> list[Step]:
        return list(self._steps.values())

    @property
    def transitions(self) -> list[Transition]:
        return list(self._transitions)

    def step_ids(self) -> list[str]:
        return list(self._steps.keys())

    def get_step(self, step_id: str) -> Step:
        """Get a step by id.

        Raises:
            StepNotFoundError: If no such step exists.
        """
        try:
            return self._steps[step_id]
        except KeyError:
            raise StepNotFoundError(step_id) from None

    def get_transition(self, transition_id: str) -> Transition:
        """Get a transition by id.

        Raises:
            TransitionNotFoundError: If no such transition exists.
        """
        for t in self._transitions:
            if t.id == transition_id:
                return t
        raise TransitionNotFoundError(transition_id)

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    # -- steps -----------------------------------------------------------

    def add_step(self, descriptor: TemplateDescriptor) -> Step:
        """Create a step from a picked template.

        Buttons are copied from the descriptor with no targets.

        Args:
            descriptor: Template chosen in the picker.

        Returns:
            The new step (already annotated).
        """
        self._mode.require_mutable("add step")

        buttons = [
            Button(
                text=b.text or "",
                type=b.type or DEFAULT_BUTTON_TYPE,
                sub_type=b.sub_type or "",
                value=b.parameter_value or "",
                target_node_id=None,
                index=i,
            )
            for i, b in enumerate(descriptor.buttons)
        ]
        step = Step(
            id=str(uuid.uuid4()),
            position=random_position(self._rng),
            template_name=descriptor.name or "",
            template_type=descriptor.type or DEFAULT_TEMPLATE_TYPE,
            message_body=descriptor.body or "",
            buttons=buttons,
        )
        sync_trigger(step)

        self._steps[step.id] = step
        logger.debug(
            "step added: id=%s template=%s buttons=%d", step.id, step.template_name, len(buttons)
        )
        self._refresh()
        return self._steps[step.id]

    def remove_step(self, step_id: str) -> None:
        """Delete a step and every transition touching it.

        Buttons on other steps that pointed at it keep their
        ``target_node_id``.

        Raises:
            StepNotFoundError: If no such step exists.
        """
        self._mode.require_mutable("delete step")
        if step_id not in self._steps:
            raise StepNotFoundError(step_id)

        del self._steps[step_id]
        before = len(self._transitions)
        self._transitions = [
            t for t in self._transitions if t.source != step_id and t.target != step_id
        ]
        logger.debug(
            "step removed: id=%s transitions_dropped=%d",
            step_id,
            before - len(self._transitions),
        )
        self._refresh()

    def patch_step_data(self, step_id: str, data: Mapping[str, Any]) -> Step:
        """Shallow-merge content fields into a step.

        Args:
            step_id: Step to edit.
            data: Field name to new value. A ``buttons`` entry replaces
                the button list; buttons may be ``Button`` objects or
                mappings of Button field names, and are renumbered in
                list order. Trigger text is re-synced from the first
                button after every patch.

        Returns:
            The updated step.

        Raises:
            StepNotFoundError: If no such step exists.
            ValueError: If data names a field that cannot be patched, or a
                button carries unknown fields.
        """
        self._mode.require_mutable("edit step")
        step = self.get_step(step_id)

        unknown = set(data) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch step fields: {', '.join(sorted(unknown))}")

        updates = dict(data)
        if "buttons" in updates:
            updates["buttons"] = _coerce_buttons(updates["buttons"])

        for key, value in updates.items():
            setattr(step, key, value)
        sync_trigger(step)

        logger.debug("step patched: id=%s fields=%s", step_id, sorted(data))
        return step

    def move_step(self, step_id: str, position: Position) -> Step:
        """Move a step on the canvas.

        Raises:
            StepNotFoundError: If no such step exists.
        """
        self._mode.require_mutable("move step")
        step = self.get_step(step_id)
        step.position = position
        return step

    def set_entry(self, step_id: str, is_entry: bool = True) -> Step:
        """Mark or unmark a step as the start of the flow.

        Raises:
            StepNotFoundError: If no such step exists.
        """
        self._mode.require_mutable("set entry step")
        step = self.get_step(step_id)
        step.is_entry = is_entry
        logger.debug("entry flag: id=%s is_entry=%s", step_id, is_entry)
        self._refresh()
        return self._steps[step_id]

    # -- transitions -----------------------------------------------------

    def add_transition(
        self,
        source: str,
        target: str,
        source_handle: str | None = None,
    ) -> Transition:
        """Connect two steps.

        The source step's buttons are updated by the connection binder.
        Endpoints are not checked beyond that; the canvas only offers
        existing steps.

        Args:
            source: Source step id.
            target: Target step id.
            source_handle: Text of the button the connection was drawn from.

        Returns:
            The new transition.
        """
        self._mode.require_mutable("connect steps")

        transition = Transition(
            id=str(uuid.uuid4()),
            source=source,
            target=target,
            source_handle=source_handle,
            label=source_handle or "",
        )
        self._transitions.append(transition)

        source_step = self._steps.get(source)
        if source_step is not None:
            bind_connection(source_step, target, source_handle)
        else:
            logger.debug("transition from unknown step: %s", source)

        logger.debug("transition added: %s -> %s handle=%s", source, target, source_handle)
        self._refresh()
        return transition

    def remove_transition(self, transition_id: str) -> None:
        """Delete exactly one transition. Button targets are not touched.

        Raises:
            TransitionNotFoundError: If no such transition exists.
        """
        self._mode.require_mutable("disconnect steps")
        transition = self.get_transition(transition_id)
        self._transitions.remove(transition)
        logger.debug("transition removed: id=%s", transition_id)
        self._refresh()

    # -- whole graph -----------------------------------------------------

    def replace(self, steps: Iterable[Step], transitions: Iterable[Transition]) -> None:
        """Install a complete graph, discarding the current one.

        Raises:
            ValueError: If two steps share an id.
        """
        new_steps: dict[str, Step] = {}
        for step in steps:
            if step.id in new_steps:
                raise ValueError(f"Duplicate step id: {step.id}")
            new_steps[step.id] = step

        self._steps = new_steps
        self._transitions = list(transitions)
        self._refresh()

    def clear(self) -> None:
        """Empty the graph."""
        self.replace([], [])

    def apply_layout(self, direction: Direction = "LR") -> None:
        """Rearrange all steps in layers."""
        self._mode.require_mutable("arrange steps")
        positions = auto_layout(self.steps, self._transitions, direction)
        for step_id, position in positions.items():
            self._steps[step_id].position = position

    def _refresh(self) -> None:
        annotated = annotate(self._steps.values(), self._transitions)
        self._steps = {s.id: s for s in annotated}

    def __repr__(self) -> str:
        return f"GraphStore(steps={len(self._steps)}, transitions={len(self._transitions)})"


def _coerce_buttons(buttons: Iterable[Button | Mapping[str, Any]]) -> list[Button]:
    result: list[Button] = []
    for i, b in enumerate(buttons):
        if isinstance(b, Mapping):
            unknown = set(b) - BUTTON_FIELDS
            if unknown:
                raise ValueError(f"Unknown button fields: {', '.join(sorted(unknown))}")
            b = Button(**b)
        elif not isinstance(b, Button):
            raise ValueError(f"Cannot use {type(b).__name__} as a button")
        result.append(dataclasses.replace(b, index=i))
    return result
