"""Core - the CTA flow graph engine.

This module contains no knowledge of:
- The canvas or how steps are drawn
- Toasts, dialogs, or other UI
- Authentication or permissions

Architecture:
    types           Pure data types (Step, Button, Transition, BuilderMode)
    graph/          Graph store, connection binder, reachability, layout
    persistence/    Wire schema, load/save mapping, backend client
    mode            Mode controller (create / edit / view)
    builder         One editing session tying it all together

Example:
    >>> from ctaflow.core import BuilderMode, FlowBuilder, TemplateDescriptor
    >>> from ctaflow.core.persistence import FlowClient
    >>>
    >>> async def main():
    ...     async with FlowClient() as client:
    ...         builder = FlowBuilder(BuilderMode.edit("flow-42"), backend=client)
    ...         await builder.load()
    ...         step = builder.store.add_step(TemplateDescriptor(name="follow_up"))
    ...         await builder.save()
"""

from ctaflow.core.builder import Confirmer, FlowBuilder
from ctaflow.core.errors import (
    BackendError,
    FlowError,
    LoadFailure,
    ReadOnlyError,
    SaveFailure,
    StepNotFoundError,
    TransitionNotFoundError,
    UnconfirmedSaveError,
)
from ctaflow.core.graph import GraphStore
from ctaflow.core.mode import ModeController
from ctaflow.core.types import (
    BuilderMode,
    Button,
    ButtonTemplate,
    ModeKind,
    Position,
    SaveResult,
    Step,
    TemplateDescriptor,
    Transition,
)

__all__ = [
    # Session
    "FlowBuilder",
    "Confirmer",
    "GraphStore",
    "ModeController",
    # Types
    "BuilderMode",
    "Button",
    "ButtonTemplate",
    "ModeKind",
    "Position",
    "SaveResult",
    "Step",
    "TemplateDescriptor",
    "Transition",
    # Errors
    "BackendError",
    "FlowError",
    "LoadFailure",
    "ReadOnlyError",
    "SaveFailure",
    "StepNotFoundError",
    "TransitionNotFoundError",
    "UnconfirmedSaveError",
]
