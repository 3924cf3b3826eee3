"""Mode controller.

Holds the builder mode for one session and is the authoritative guard
for every mutating operation. The mode is fixed at construction; a new
navigation builds a new controller.
"""

from __future__ import annotations

import logging

from ctaflow.core.errors import ReadOnlyError
from ctaflow.core.types import BuilderMode, ModeKind

logger = logging.getLogger(__name__)


class ModeController:
    """Gates graph mutations and saving by builder mode.

    Example:
        >>> controller = ModeController(BuilderMode.view("flow-42"))
        >>> controller.can_mutate
        False
        >>> controller.require_mutable("add step")
        Traceback (most recent call last):
        ...
        ctaflow.core.errors.ReadOnlyError: Cannot add step: flow is open read-only
    """

    def __init__(self, mode: BuilderMode | None = None) -> None:
        self._mode = mode or BuilderMode.create()

    @property
    def mode(self) -> BuilderMode:
        return self._mode

    @property
    def kind(self) -> ModeKind:
        return self._mode.kind

    @property
    def flow_id(self) -> str | None:
        return self._mode.flow_id

    @property
    def can_mutate(self) -> bool:
        return not self._mode.is_readonly

    @property
    def can_save(self) -> bool:
        return not self._mode.is_readonly

    @property
    def needs_load(self) -> bool:
        """True when an existing flow has to be fetched."""
        return self._mode.kind is not ModeKind.CREATE

    def require_mutable(self, action: str) -> None:
        """Raise if the graph may not be changed.

        Args:
            action: Human-readable name of the refused operation.

        Raises:
            ReadOnlyError: In view mode.
        """
        if not self.can_mutate:
            logger.warning("refused in %s mode: %s", self._mode, action)
            raise ReadOnlyError(action)

    def require_savable(self) -> None:
        """Raise if saving is not available.

        Raises:
            ReadOnlyError: In view mode.
        """
        if not self.can_save:
            logger.warning("refused in %s mode: save", self._mode)
            raise ReadOnlyError("save flow")

    def __repr__(self) -> str:
        return f"ModeController({self._mode})"
