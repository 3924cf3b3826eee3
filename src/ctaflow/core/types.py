"""Pure data types for ctaflow.core.

These are simple dataclasses with no behavior coupling.
The graph store, mapper, and mode controller all pass these around.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

DEFAULT_TEMPLATE_TYPE = "text_template"
DEFAULT_BUTTON_TYPE = "QUICK_REPLY"
DEFAULT_TRIGGER_TYPE = "cta"

EDGE_COLOR = "#9333ea"


class ModeKind(Enum):
    """Builder lifecycle states."""

    CREATE = "create"  # Blank flow, fully mutable
    EDIT = "edit"  # Existing flow loaded, fully mutable
    VIEW = "view"  # Existing flow loaded, read-only


class SaveResult(Enum):
    """Outcome of a save request that did not fail."""

    SAVED = auto()
    CANCELLED = auto()  # Operator declined the unreachable-steps gate


@dataclass(frozen=True)
class Position:
    """Canvas coordinates. No meaning to the engine."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class Button:
    """A button on a step.

    Attributes:
        text: Label shown to the contact. Also used as the handle name.
        type: WhatsApp button type (QUICK_REPLY, URL, ...).
        sub_type: Optional button sub type.
        value: Button parameter value (URL, phone number, ...).
        target_node_id: Step this button leads to, if bound.
        index: Position of the button inside its step.
    """

    text: str = ""
    type: str = DEFAULT_BUTTON_TYPE
    sub_type: str = ""
    value: str = ""
    target_node_id: str | None = None
    index: int = 0


@dataclass
class Step:
    """One message/template unit in a flow (a graph node).

    ``trigger_button_text`` mirrors ``buttons[0].text`` whenever the step
    has buttons; see ``ctaflow.core.graph.binder.sync_trigger``.
    ``is_unreachable`` is derived by the reachability analyzer and is never
    set by hand.
    """

    id: str
    position: Position = field(default_factory=Position)
    template_name: str = ""
    template_type: str = DEFAULT_TEMPLATE_TYPE
    message_body: str = ""
    trigger_button_text: str = ""
    trigger_button_type: str = DEFAULT_TRIGGER_TYPE
    required_tag: str = ""
    required_source: str = ""
    buttons: list[Button] = field(default_factory=list)
    is_entry: bool = False
    is_unreachable: bool = False

    @property
    def display_name(self) -> str:
        """Name used in warnings and previews."""
        return self.template_name.strip() or "Untitled Step"


def default_edge_style() -> dict[str, Any]:
    """Visual styling attached to every transition."""
    return {
        "type": "smart",
        "animated": True,
        "stroke": EDGE_COLOR,
        "marker_end": {"type": "arrowclosed", "color": EDGE_COLOR},
    }


@dataclass
class Transition:
    """A directed link from a button on one step to another step.

    Attributes:
        id: Unique identifier.
        source: Source step id.
        target: Target step id.
        source_handle: Text of the button the transition leaves from.
        label: Text drawn on the edge.
        style: Canvas styling, opaque to the engine.
    """

    id: str
    source: str
    target: str
    source_handle: str | None = None
    label: str = ""
    style: dict[str, Any] = field(default_factory=default_edge_style)


@dataclass(frozen=True)
class ButtonTemplate:
    """Button definition as offered by the template picker."""

    text: str = ""
    type: str = DEFAULT_BUTTON_TYPE
    sub_type: str = ""
    parameter_value: str = ""


@dataclass(frozen=True)
class TemplateDescriptor:
    """A template chosen in the picker, used to create a new step.

    Example:
        >>> TemplateDescriptor(
        ...     name="welcome_offer",
        ...     type="image_template",
        ...     body="Hi {{1}}, want 20% off?",
        ...     buttons=(ButtonTemplate(text="Yes"), ButtonTemplate(text="No")),
        ... )
    """

    name: str = ""
    type: str = DEFAULT_TEMPLATE_TYPE
    body: str = ""
    buttons: tuple[ButtonTemplate, ...] = ()


@dataclass(frozen=True)
class BuilderMode:
    """Explicit builder mode: Create, Edit(flow_id) or View(flow_id).

    Use the ``create``/``edit``/``view`` constructors rather than building
    instances directly.
    """

    kind: ModeKind
    flow_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ModeKind.CREATE and self.flow_id is not None:
            raise ValueError("Create mode does not take a flow id")
        if self.kind is not ModeKind.CREATE and not self.flow_id:
            raise ValueError(f"{self.kind.value.capitalize()} mode requires a flow id")

    @classmethod
    def create(cls) -> BuilderMode:
        return cls(ModeKind.CREATE)

    @classmethod
    def edit(cls, flow_id: str) -> BuilderMode:
        return cls(ModeKind.EDIT, flow_id)

    @classmethod
    def view(cls, flow_id: str) -> BuilderMode:
        return cls(ModeKind.VIEW, flow_id)

    @classmethod
    def from_navigation(cls, mode: str | None, flow_id: str | None = None) -> BuilderMode:
        """Parse navigation input (``?mode=edit&id=...``) into a mode.

        Anything other than "edit" or "view" means a fresh flow.

        Raises:
            ValueError: If edit/view is requested without a flow id.
        """
        normalized = (mode or "").strip().lower()
        if normalized == ModeKind.EDIT.value:
            return cls.edit(flow_id or "")
        if normalized == ModeKind.VIEW.value:
            return cls.view(flow_id or "")
        return cls.create()

    @property
    def is_readonly(self) -> bool:
        return self.kind is ModeKind.VIEW

    def __str__(self) -> str:
        if self.flow_id:
            return f"{self.kind.value}({self.flow_id})"
        return self.kind.value
