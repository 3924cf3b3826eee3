"""Error types for the flow engine.

Every failure here is local and recoverable by the operator retrying
the gesture. Nothing is fatal to the process.
"""

from __future__ import annotations


class FlowError(Exception):
    """Base class for flow engine errors."""


class LoadFailure(FlowError):
    """Fetching or decoding an existing flow failed.

    The graph that was installed before the load is left untouched.
    """

    def __init__(self, message: str, flow_id: str | None = None):
        super().__init__(message)
        self.flow_id = flow_id


class SaveFailure(FlowError):
    """Writing the flow to the backend failed.

    The in-memory graph is preserved so the save can be retried.
    """


class ReadOnlyError(FlowError):
    """A mutation was attempted while the builder is in view mode."""

    def __init__(self, action: str):
        super().__init__(f"Cannot {action}: flow is open read-only")
        self.action = action


class StepNotFoundError(FlowError, KeyError):
    """No step with the given id exists in the graph."""

    def __init__(self, step_id: str):
        super().__init__(f"Step '{step_id}' not found")
        self.step_id = step_id

    def __str__(self) -> str:
        return str(self.args[0])


class BackendError(FlowError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: int, response_body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class TransitionNotFoundError(FlowError, KeyError):
    """No transition with the given id exists in the graph."""

    def __init__(self, transition_id: str):
        super().__init__(f"Transition '{transition_id}' not found")
        self.transition_id = transition_id

    def __str__(self) -> str:
        return str(self.args[0])


class UnconfirmedSaveError(FlowError):
    """A save hit unreachable steps but nobody was there to confirm it.

    Raised before anything is encoded or sent.
    """

    def __init__(self, step_names: list[str]):
        super().__init__(
            f"Save needs confirmation: unreachable steps {', '.join(step_names)}"
        )
        self.step_names = step_names
