"""Persistence mapper.

Converts between the graph store's in-memory shape and the backend wire
schema:

- ``decode_flow``: fetched document -> steps and transitions (annotated)
- ``encode_flow``: steps and transitions -> save payload

Known hazards are kept as-is: buttons may point at deleted steps, and
transitions are emitted even when an endpoint step was filtered out of
the payload.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ctaflow.core.errors import LoadFailure
from ctaflow.core.graph.binder import sync_trigger
from ctaflow.core.graph.layout import fallback_position
from ctaflow.core.graph.reachability import annotate
from ctaflow.core.persistence.schema import FlowRecord, StepRecord, parse_flow_document
from ctaflow.core.types import (
    DEFAULT_BUTTON_TYPE,
    DEFAULT_TEMPLATE_TYPE,
    DEFAULT_TRIGGER_TYPE,
    Button,
    Position,
    Step,
    Transition,
)
from ctaflow.core.validation import has_template, normalize_flow_name

logger = logging.getLogger(__name__)

LOADED_FLOW_NAME = "Untitled Flow"


@dataclass
class DecodedFlow:
    """Result of decoding a fetched flow document."""

    flow_name: str
    is_published: bool = False
    steps: list[Step] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)


def transition_id(from_node_id: str, to_node_id: str) -> str:
    """Synthesized id for a loaded transition."""
    return f"e-{from_node_id}-{to_node_id}"


def _decode_step(record: StepRecord, index: int) -> Step:
    fallback = fallback_position(index)
    step = Step(
        id=record.id,
        position=Position(
            x=record.position_x if record.position_x is not None else fallback.x,
            y=record.position_y if record.position_y is not None else fallback.y,
        ),
        template_name=record.template_name,
        template_type=record.template_type or DEFAULT_TEMPLATE_TYPE,
        message_body=record.message_body,
        trigger_button_text=record.trigger_button_text,
        trigger_button_type=record.trigger_button_type or DEFAULT_TRIGGER_TYPE,
        required_tag=record.required_tag,
        required_source=record.required_source,
        is_entry=record.is_entry,
        buttons=[
            Button(
                text=b.text,
                type=b.type or "",
                sub_type=b.sub_type or "",
                value=b.value or "",
                target_node_id=b.target_node_id,
                index=b.index if b.index is not None else i,
            )
            for i, b in enumerate(record.buttons)
        ],
    )
    return sync_trigger(step)


def _decode_transitions(record: FlowRecord) -> list[Transition]:
    transitions: list[Transition] = []
    used: set[str] = set()

    for edge in record.edges:
        tid = transition_id(edge.from_node_id, edge.to_node_id)
        if tid in used:
            # Two buttons of one step may lead to the same target.
            base = f"{tid}-{edge.source_handle}" if edge.source_handle else tid
            tid, n = base, 1
            while tid in used:
                n += 1
                tid = f"{base}-{n}"
        used.add(tid)

        transitions.append(
            Transition(
                id=tid,
                source=edge.from_node_id,
                target=edge.to_node_id,
                source_handle=edge.source_handle,
                label=edge.source_handle or "",
            )
        )
    return transitions


def decode_flow(raw: Any, flow_id: str | None = None) -> DecodedFlow:
    """Decode a fetched flow document.

    Args:
        raw: Decoded JSON returned by ``fetch_flow``.
        flow_id: Id the document was fetched for (error reporting only).

    Returns:
        The decoded flow with ``is_unreachable`` set on every step.

    Raises:
        LoadFailure: If the document is malformed.
    """
    try:
        record = parse_flow_document(raw)
    except (TypeError, ValidationError) as e:
        raise LoadFailure(f"Malformed flow document: {e}", flow_id=flow_id) from e

    steps = [_decode_step(node, i) for i, node in enumerate(record.nodes)]

    seen: set[str] = set()
    for step in steps:
        if step.id in seen:
            raise LoadFailure(f"Malformed flow document: duplicate step id {step.id}", flow_id)
        seen.add(step.id)

    transitions = _decode_transitions(record)

    logger.debug(
        "flow decoded: flow_id=%s steps=%d transitions=%d",
        flow_id,
        len(steps),
        len(transitions),
    )
    return DecodedFlow(
        flow_name=record.flow_name or LOADED_FLOW_NAME,
        is_published=record.is_published,
        steps=annotate(steps, transitions),
        transitions=transitions,
    )


def _encode_buttons(buttons: Sequence[Button]) -> list[dict[str, Any]]:
    encoded = []
    for i, button in enumerate(b for b in buttons if (b.text or "").strip()):
        encoded.append(
            {
                "Text": button.text.strip(),
                "Type": button.type or DEFAULT_BUTTON_TYPE,
                "SubType": button.sub_type or "",
                "Value": button.value or "",
                "TargetNodeId": button.target_node_id or None,
                "Index": button.index if button.index is not None else i,
            }
        )
    return encoded


def encode_step(step: Step) -> dict[str, Any]:
    """Re-key one step to the backend's field names."""
    return {
        "Id": step.id,
        "TemplateName": step.template_name,
        "TemplateType": step.template_type or DEFAULT_TEMPLATE_TYPE,
        "MessageBody": step.message_body or "",
        "PositionX": step.position.x,
        "PositionY": step.position.y,
        "TriggerButtonText": step.trigger_button_text or "",
        "TriggerButtonType": step.trigger_button_type or DEFAULT_TRIGGER_TYPE,
        "RequiredTag": step.required_tag or "",
        "RequiredSource": step.required_source or "",
        "IsEntry": step.is_entry,
        "Buttons": _encode_buttons(step.buttons),
    }


def encode_flow(
    flow_name: str | None,
    is_published: bool,
    steps: Iterable[Step],
    transitions: Iterable[Transition],
) -> dict[str, Any]:
    """Build the save payload.

    Steps without a template name are left out. Every transition is
    emitted, whether or not its endpoints made it into the payload.

    Args:
        flow_name: Display name (blank becomes "Untitled").
        is_published: Lifecycle flag, passed through.
        steps: Current steps.
        transitions: Current transitions.

    Returns:
        JSON-ready payload for ``save_flow``.
    """
    steps = list(steps)
    kept = [s for s in steps if has_template(s)]
    if len(kept) != len(steps):
        logger.debug("save: skipping %d step(s) without a template", len(steps) - len(kept))

    return {
        "FlowName": normalize_flow_name(flow_name),
        "IsPublished": bool(is_published),
        "Nodes": [encode_step(s) for s in kept],
        "Edges": [
            {
                "FromNodeId": t.source,
                "ToNodeId": t.target,
                "SourceHandle": t.source_handle or "",
            }
            for t in transitions
        ],
    }
