"""Backend wire records for a fetched flow.

Backend payloads are not consistent about field names (camelCase from the
JSON serializer, PascalCase echoed back from saves, a few legacy names).
``normalize_record`` maps every logical field through a fixed priority
list of accepted names once, at the boundary; after that the pydantic
models below validate the canonical shape and nothing else in the engine
sees the raw payload.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# Logical field -> accepted wire names, highest priority first.
FLOW_FIELDS: dict[str, tuple[str, ...]] = {
    "flow_name": ("flowName", "FlowName", "flow_name", "name"),
    "is_published": ("isPublished", "IsPublished", "is_published"),
    "nodes": ("nodes", "Nodes", "steps"),
    "edges": ("edges", "Edges", "transitions"),
}

NODE_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "Id", "nodeId"),
    "position_x": ("positionX", "PositionX", "position_x"),
    "position_y": ("positionY", "PositionY", "position_y"),
    "template_name": ("templateName", "TemplateName", "template_name"),
    "template_type": ("templateType", "TemplateType", "template_type"),
    "message_body": ("messageBody", "MessageBody", "message_body", "body"),
    "trigger_button_text": ("triggerButtonText", "TriggerButtonText", "trigger_button_text"),
    "trigger_button_type": ("triggerButtonType", "TriggerButtonType", "trigger_button_type"),
    "required_tag": ("requiredTag", "RequiredTag", "required_tag"),
    "required_source": ("requiredSource", "RequiredSource", "required_source"),
    "is_entry": ("isEntry", "IsEntry", "is_entry"),
    "buttons": ("buttons", "Buttons"),
}

BUTTON_FIELDS: dict[str, tuple[str, ...]] = {
    "text": ("text", "Text", "buttonText"),
    "type": ("type", "Type"),
    "sub_type": ("subType", "SubType", "sub_type"),
    "value": ("value", "Value", "parameterValue"),
    "target_node_id": ("targetNodeId", "TargetNodeId", "target_node_id"),
    "index": ("index", "Index"),
}

EDGE_FIELDS: dict[str, tuple[str, ...]] = {
    "from_node_id": ("fromNodeId", "FromNodeId", "from_node_id", "source"),
    "to_node_id": ("toNodeId", "ToNodeId", "to_node_id", "target"),
    "source_handle": ("sourceHandle", "SourceHandle", "source_handle"),
}


def normalize_record(raw: Any, fields: Mapping[str, tuple[str, ...]]) -> dict[str, Any]:
    """Pick each logical field from the first accepted name that is set.

    Args:
        raw: One record as decoded from JSON.
        fields: Logical field -> accepted names, highest priority first.

    Returns:
        Dict keyed by logical field names. Fields with no value are left out.

    Raises:
        TypeError: If raw is not a mapping.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"Expected an object, got {type(raw).__name__}")

    record: dict[str, Any] = {}
    for name, aliases in fields.items():
        for alias in aliases:
            value = raw.get(alias)
            if value is not None:
                record[name] = value
                break
    return record


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"Expected a list of {what}, got {type(value).__name__}")
    return value


def _stringify(v: Any) -> Any:
    # Ids may come back as numbers from older backends.
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return str(v)
    return v


class ButtonRecord(BaseModel):
    """A button as stored by the backend."""

    model_config = ConfigDict(extra="ignore")

    text: str = ""
    type: str | None = None
    sub_type: str | None = None
    value: str | None = None
    target_node_id: str | None = None
    index: int | None = None

    @field_validator("target_node_id", "value", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _stringify(v)

    @field_validator("target_node_id")
    @classmethod
    def blank_target_is_none(cls, v: str | None) -> str | None:
        return v or None


class StepRecord(BaseModel):
    """A step (node) as stored by the backend."""

    model_config = ConfigDict(extra="ignore")

    id: str
    position_x: float | None = None
    position_y: float | None = None
    template_name: str = ""
    template_type: str | None = None
    message_body: str = ""
    trigger_button_text: str = ""
    trigger_button_type: str | None = None
    required_tag: str = ""
    required_source: str = ""
    is_entry: bool = False
    buttons: list[ButtonRecord] = []

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return _stringify(v)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("step id cannot be empty")
        return v


class TransitionRecord(BaseModel):
    """A transition (edge) as stored by the backend."""

    model_config = ConfigDict(extra="ignore")

    from_node_id: str
    to_node_id: str
    source_handle: str | None = None

    @field_validator("from_node_id", "to_node_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _stringify(v)

    @field_validator("from_node_id", "to_node_id")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("transition endpoint cannot be empty")
        return v

    @field_validator("source_handle")
    @classmethod
    def blank_handle_is_none(cls, v: str | None) -> str | None:
        return v or None


class FlowRecord(BaseModel):
    """A complete flow document as returned by ``fetch_flow``."""

    model_config = ConfigDict(extra="ignore")

    flow_name: str | None = None
    is_published: bool = False
    nodes: list[StepRecord] = []
    edges: list[TransitionRecord] = []


def parse_flow_document(raw: Any) -> FlowRecord:
    """Normalize and validate a fetched flow document.

    Args:
        raw: Decoded JSON body of the fetch.

    Returns:
        The validated flow record.

    Raises:
        TypeError: If the document or a nested record has the wrong shape.
        pydantic.ValidationError: If a field fails validation.
    """
    flow = normalize_record(raw, FLOW_FIELDS)

    nodes = []
    for raw_node in _as_list(flow.get("nodes"), "nodes"):
        node = normalize_record(raw_node, NODE_FIELDS)
        node["buttons"] = [
            normalize_record(b, BUTTON_FIELDS) for b in _as_list(node.get("buttons"), "buttons")
        ]
        nodes.append(node)

    flow["nodes"] = nodes
    flow["edges"] = [normalize_record(e, EDGE_FIELDS) for e in _as_list(flow.get("edges"), "edges")]

    return FlowRecord.model_validate(flow)
