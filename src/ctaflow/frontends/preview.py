"""Console preview of a flow.

Renders steps, their gates and button wiring as a rich tree, and offers a
console implementation of the pre-save confirmation gate.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text
from rich.tree import Tree

from ctaflow.core.graph.store import GraphStore
from ctaflow.core.types import Step


def _step_label(step: Step) -> Text:
    label = Text()
    label.append(step.display_name, style="bold magenta")
    if step.is_entry:
        label.append("  [entry]", style="green")
    if step.is_unreachable:
        label.append("  unreachable", style="bold red")
    return label


def render_flow(store: GraphStore, flow_name: str = "Untitled Flow") -> Tree:
    """Build a tree of steps and where each button leads.

    Args:
        store: Graph to render.
        flow_name: Title of the tree.

    Returns:
        A rich Tree ready for ``Console.print``.
    """
    names = {s.id: s.display_name for s in store.steps}
    tree = Tree(Text(flow_name, style="bold"))

    if not store.steps:
        tree.add(Text("No steps yet", style="dim"))
        return tree

    for step in store.steps:
        branch = tree.add(_step_label(step))
        if step.message_body:
            branch.add(Text(step.message_body, style="dim"))
        if step.required_tag:
            branch.add(Text(f"Tag: {step.required_tag}", style="yellow"))
        if step.required_source:
            branch.add(Text(f"Source: {step.required_source}", style="cyan"))

        for button in step.buttons:
            line = Text(button.text or "Untitled Button")
            line.append(" -> ")
            if button.target_node_id is None:
                line.append("Not Connected", style="dim")
            elif button.target_node_id in names:
                line.append(names[button.target_node_id], style="bold")
            else:
                line.append(f"missing step {button.target_node_id}", style="red")
            branch.add(line)

    return tree


def print_flow(
    store: GraphStore,
    flow_name: str = "Untitled Flow",
    console: Console | None = None,
) -> None:
    """Print a flow preview to the console."""
    (console or Console()).print(render_flow(store, flow_name))


def console_confirm(names: Sequence[str], console: Console | None = None) -> bool:
    """Ask on the console whether to save despite unreachable steps.

    Usable as the ``confirm`` gate of ``FlowBuilder``.

    Args:
        names: Names of the unreachable steps.
        console: Console to prompt on.

    Returns:
        True to save anyway.
    """
    console = console or Console()
    console.print("[bold yellow]These steps have no incoming trigger and may never run:[/]")
    for name in names:
        console.print(f"  - {name}")
    return Confirm.ask("Save anyway?", console=console, default=False)
