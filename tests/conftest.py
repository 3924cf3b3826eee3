"""Pytest configuration and fixtures."""

import random
from typing import Any

import pytest

from ctaflow.core.graph.store import GraphStore
from ctaflow.core.mode import ModeController
from ctaflow.core.types import BuilderMode, ButtonTemplate, TemplateDescriptor


def make_descriptor(name: str = "welcome", *buttons: str, body: str = "") -> TemplateDescriptor:
    """Template descriptor with quick-reply buttons of the given texts."""
    return TemplateDescriptor(
        name=name,
        type="text_template",
        body=body or f"{name} body",
        buttons=tuple(ButtonTemplate(text=text) for text in buttons),
    )


class FakeBackend:
    """In-memory stand-in for FlowClient."""

    def __init__(self, document: Any = None, fetch_error: Exception | None = None):
        self.document = document
        self.fetch_error = fetch_error
        self.save_error: Exception | None = None
        self.fetched: list[str] = []
        self.saved: list[dict[str, Any]] = []

    async def fetch_flow(self, flow_id: str) -> Any:
        self.fetched.append(flow_id)
        if self.fetch_error:
            raise self.fetch_error
        return self.document

    async def save_flow(self, payload: dict[str, Any]) -> None:
        if self.save_error:
            raise self.save_error
        self.saved.append(payload)


@pytest.fixture
def store():
    """Mutable graph store with a seeded RNG."""
    return GraphStore(rng=random.Random(7))


@pytest.fixture
def view_store():
    """Graph store opened read-only."""
    return GraphStore(ModeController(BuilderMode.view("flow-1")), rng=random.Random(7))


@pytest.fixture
def flow_document():
    """Fetched flow with two steps and one edge (welcome -> offer)."""
    return {
        "flowName": "Diwali offer",
        "isPublished": False,
        "nodes": [
            {
                "id": "welcome",
                "positionX": 10,
                "positionY": 20,
                "templateName": "welcome_msg",
                "templateType": "text_template",
                "messageBody": "Hi! Interested in our Diwali offer?",
                "triggerButtonText": "Yes",
                "triggerButtonType": "cta",
                "requiredTag": "vip",
                "buttons": [
                    {"text": "Yes", "type": "QUICK_REPLY", "targetNodeId": "offer"},
                    {"text": "No", "type": "QUICK_REPLY"},
                ],
            },
            {
                "id": "offer",
                "templateName": "offer_msg",
                "templateType": "image_template",
                "messageBody": "Here is 20% off",
                "buttons": [],
            },
        ],
        "edges": [{"fromNodeId": "welcome", "toNodeId": "offer", "sourceHandle": "Yes"}],
    }


@pytest.fixture
def backend(flow_document):
    return FakeBackend(flow_document)
