"""Flow builder - one editing session of a CTA flow.

Ties the pieces together for the canvas:

    navigation -> BuilderMode -> load() -> GraphStore (annotated)
    gestures   -> GraphStore mutations (gated by ModeController)
    save()     -> confirmation gate -> encode_flow -> backend.save_flow

The canvas, template picker and notifications are collaborators; this
class only raises or returns and lets them decide what to show.
"""

from __future__ import annotations

import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from ctaflow.core.errors import LoadFailure, SaveFailure, UnconfirmedSaveError
from ctaflow.core.graph.reachability import unreachable_steps
from ctaflow.core.graph.store import GraphStore
from ctaflow.core.mode import ModeController
from ctaflow.core.persistence.client import FlowBackend
from ctaflow.core.persistence.mapper import LOADED_FLOW_NAME, decode_flow, encode_flow
from ctaflow.core.types import BuilderMode, SaveResult, Step
from ctaflow.core.validation import normalize_flow_name

logger = logging.getLogger(__name__)

# Receives the names of unreachable steps, returns whether to save anyway.
Confirmer = Callable[[list[str]], "bool | Awaitable[bool]"]


class FlowBuilder:
    """Load, edit and save one flow.

    Args:
        mode: Create, Edit(flow_id) or View(flow_id).
        backend: Anything with ``fetch_flow`` and ``save_flow`` coroutines.
        confirm: Default confirmation gate for saves. Without one, saves
            with unreachable steps are refused unless ``save`` gets a gate.
        rng: Random source for new step positions.

    Example:
        >>> builder = FlowBuilder(BuilderMode.edit("flow-42"), backend=client)
        >>> await builder.load()
        >>> step = builder.store.add_step(descriptor)
        >>> await builder.save(is_published=False)
    """

    def __init__(
        self,
        mode: BuilderMode,
        backend: FlowBackend,
        confirm: Confirmer | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.controller = ModeController(mode)
        self.store = GraphStore(self.controller, rng=rng)
        self.backend = backend
        self._confirm = confirm
        self._flow_name = LOADED_FLOW_NAME
        self._is_published = False
        self._mounted = True
        self._loaded = False

    @property
    def mode(self) -> BuilderMode:
        return self.controller.mode

    @property
    def readonly(self) -> bool:
        return not self.controller.can_mutate

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def is_published(self) -> bool:
        """Published flag of the loaded flow."""
        return self._is_published

    @property
    def flow_name(self) -> str:
        return self._flow_name

    @flow_name.setter
    def flow_name(self, name: str) -> None:
        self.controller.require_mutable("rename flow")
        self._flow_name = normalize_flow_name(name, default="")

    def unmount(self) -> None:
        """Mark the session as gone. A load still in flight is then discarded."""
        self._mounted = False

    async def load(self) -> None:
        """Populate the graph for the current mode.

        Create mode installs an empty graph. Edit and view fetch the flow
        and install it in one step. A result that arrives after ``unmount``
        is dropped, failures included.

        Raises:
            LoadFailure: If the fetch fails or returns a malformed document.
                The previously installed graph is kept.
        """
        if not self.controller.needs_load:
            self.store.clear()
            self._flow_name = LOADED_FLOW_NAME
            self._is_published = False
            self._loaded = True
            return

        flow_id = self.controller.flow_id
        if flow_id is None:
            raise LoadFailure(f"{self.mode} mode has no flow id to load")

        try:
            raw = await self.backend.fetch_flow(flow_id)
        except Exception as e:
            if not self._mounted:
                logger.debug("load failure discarded after unmount: flow_id=%s", flow_id)
                return
            logger.warning("load failed: flow_id=%s error=%s", flow_id, e)
            raise LoadFailure(f"Failed to load flow {flow_id}: {e}", flow_id=flow_id) from e

        if not self._mounted:
            logger.debug("load discarded after unmount: flow_id=%s", flow_id)
            return

        decoded = decode_flow(raw, flow_id=flow_id)

        self.store.replace(decoded.steps, decoded.transitions)
        self._flow_name = decoded.flow_name
        self._is_published = decoded.is_published
        self._loaded = True
        logger.info(
            "flow loaded: flow_id=%s mode=%s steps=%d transitions=%d",
            flow_id,
            self.mode.kind.value,
            len(decoded.steps),
            len(decoded.transitions),
        )

    def unreachable(self) -> list[Step]:
        """Steps the confirmation gate would list right now."""
        return unreachable_steps(self.store.steps)

    def build_payload(self, is_published: bool = False) -> dict[str, Any]:
        """Encode the current graph without saving it."""
        return encode_flow(
            self._flow_name,
            is_published,
            self.store.steps,
            self.store.transitions,
        )

    async def save(
        self,
        is_published: bool = False,
        confirm: Confirmer | None = None,
    ) -> SaveResult:
        """Save the flow as a draft or published.

        If any step with a template is unreachable, the confirmation gate
        is asked first with their names. Declining cancels the save before
        anything is encoded or sent. Without a gate such a save is refused.

        Args:
            is_published: Publish instead of saving a draft.
            confirm: Gate for this save (overrides the builder default).

        Returns:
            SaveResult.SAVED, or SaveResult.CANCELLED if the gate declined.

        Raises:
            ReadOnlyError: In view mode.
            UnconfirmedSaveError: If steps are unreachable and no gate is
                configured.
            SaveFailure: If encoding or the backend call fails. The graph
                is left as it was.
        """
        self.controller.require_savable()

        pending = self.unreachable()
        if pending:
            names = [s.display_name for s in pending]
            gate = confirm or self._confirm
            if gate is None:
                logger.warning("save refused: unconfirmed unreachable steps=%s", names)
                raise UnconfirmedSaveError(names)
            answer = gate(names)
            if inspect.isawaitable(answer):
                answer = await answer
            if not answer:
                logger.info("save cancelled: unreachable steps=%s", names)
                return SaveResult.CANCELLED
            logger.info("saving with unreachable steps: %s", names)

        try:
            payload = self.build_payload(is_published)
            await self.backend.save_flow(payload)
        except Exception as e:
            logger.warning("save failed: flow=%s error=%s", self._flow_name, e)
            raise SaveFailure(f"Failed to save flow '{self._flow_name}': {e}") from e

        logger.info(
            "flow saved: name=%s published=%s steps=%d transitions=%d",
            payload["FlowName"],
            payload["IsPublished"],
            len(payload["Nodes"]),
            len(payload["Edges"]),
        )
        return SaveResult.SAVED

    def __repr__(self) -> str:
        return f"FlowBuilder(mode={self.mode}, {self.store!r})"
