"""Flow graph - steps, transitions and the algorithms over them.

Classes:
    GraphStore: Owns steps and transitions, runs reachability after changes.

Functions:
    bind_connection: Bind a new transition to a button on its source step.
    sync_trigger: Copy the first button's text into the trigger fields.
    annotate: Recompute is_unreachable for a set of steps.
    unreachable_steps: Steps with a template that nothing leads to.
    auto_layout: Layered placement of steps.
"""

from ctaflow.core.graph.binder import bind_connection, select_button, sync_trigger
from ctaflow.core.graph.layout import auto_layout, fallback_position, random_position
from ctaflow.core.graph.reachability import annotate, unreachable_steps
from ctaflow.core.graph.store import GraphStore

__all__ = [
    "GraphStore",
    "annotate",
    "auto_layout",
    "bind_connection",
    "fallback_position",
    "random_position",
    "select_button",
    "sync_trigger",
    "unreachable_steps",
]
