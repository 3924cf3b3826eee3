"""Reachability analysis.

A step is reachable iff some transition targets it. Entry steps are the
designated start of a flow and count as reachable without an incoming
transition.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from ctaflow.core.types import Step, Transition
from ctaflow.core.validation import has_template


def annotate(steps: Iterable[Step], transitions: Iterable[Transition]) -> list[Step]:
    """Recompute ``is_unreachable`` for every step.

    Pure: the input steps are not modified. Steps whose flag does not
    change are returned as-is.

    Args:
        steps: Current steps.
        transitions: Current transitions.

    Returns:
        Steps in the same order with ``is_unreachable`` set.
    """
    targeted = {t.target for t in transitions}

    result: list[Step] = []
    for step in steps:
        unreachable = step.id not in targeted and not step.is_entry
        if step.is_unreachable != unreachable:
            step = dataclasses.replace(step, is_unreachable=unreachable)
        result.append(step)
    return result


def unreachable_steps(steps: Iterable[Step]) -> list[Step]:
    """Steps with a template that nothing leads to.

    These are the steps the pre-save confirmation gate lists.

    Args:
        steps: Annotated steps.

    Returns:
        Unreachable steps that carry a template name.
    """
    return [s for s in steps if s.is_unreachable and has_template(s)]
