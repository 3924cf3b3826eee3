"""ctaflow - CTA flow graph engine for WhatsApp campaign flows.

An operator wires WhatsApp message steps together with button-triggered
transitions. ctaflow holds that graph in memory, keeps button targets and
trigger text in sync, flags steps nothing leads to, and maps the graph to
and from the backend's flow document.

Layers:
    core/       Graph model, algorithms, persistence, mode control
    frontends/  Console preview

Quick Start:
    >>> from ctaflow import BuilderMode, ButtonTemplate, FlowBuilder, TemplateDescriptor
    >>> from ctaflow.core.persistence import FlowClient, FlowClientConfig
    >>>
    >>> async with FlowClient(FlowClientConfig.from_env()) as client:
    ...     builder = FlowBuilder(BuilderMode.create(), backend=client)
    ...     await builder.load()
    ...     welcome = builder.store.add_step(TemplateDescriptor(
    ...         name="welcome",
    ...         buttons=(ButtonTemplate(text="Yes"), ButtonTemplate(text="No")),
    ...     ))
    ...     offer = builder.store.add_step(TemplateDescriptor(name="offer"))
    ...     builder.store.add_transition(welcome.id, offer.id, "Yes")
    ...     await builder.save(is_published=True)
"""

from ctaflow.__version__ import __version__
from ctaflow.core import (
    BackendError,
    BuilderMode,
    Button,
    ButtonTemplate,
    FlowBuilder,
    FlowError,
    GraphStore,
    LoadFailure,
    ModeController,
    ModeKind,
    Position,
    ReadOnlyError,
    SaveFailure,
    SaveResult,
    Step,
    StepNotFoundError,
    TemplateDescriptor,
    Transition,
    TransitionNotFoundError,
    UnconfirmedSaveError,
)

__all__ = [
    "__version__",
    "BackendError",
    "BuilderMode",
    "Button",
    "ButtonTemplate",
    "FlowBuilder",
    "FlowError",
    "GraphStore",
    "LoadFailure",
    "ModeController",
    "ModeKind",
    "Position",
    "ReadOnlyError",
    "SaveFailure",
    "SaveResult",
    "Step",
    "StepNotFoundError",
    "TemplateDescriptor",
    "Transition",
    "TransitionNotFoundError",
    "UnconfirmedSaveError",
]
