"""Tests for the persistence mapper."""

import pytest

from ctaflow.core.errors import LoadFailure
from ctaflow.core.persistence.mapper import decode_flow, encode_flow
from ctaflow.core.types import Button, Position, Step, Transition


class TestDecodeFlow:
    """Tests for the load transform."""

    def test_two_nodes_one_edge(self, flow_document):
        """Structure and reachability of a loaded flow."""
        decoded = decode_flow(flow_document)

        assert len(decoded.steps) == 2
        assert len(decoded.transitions) == 1
        by_id = {s.id: s for s in decoded.steps}
        assert by_id["welcome"].is_unreachable is True
        assert by_id["offer"].is_unreachable is False

    def test_step_fields(self, flow_document):
        welcome = decode_flow(flow_document).steps[0]

        assert welcome.position == Position(10, 20)
        assert welcome.template_name == "welcome_msg"
        assert welcome.message_body == "Hi! Interested in our Diwali offer?"
        assert welcome.required_tag == "vip"
        assert welcome.required_source == ""
        assert [b.text for b in welcome.buttons] == ["Yes", "No"]
        assert [b.target_node_id for b in welcome.buttons] == ["offer", None]
        assert [b.index for b in welcome.buttons] == [0, 1]

    def test_transition_id_and_style(self, flow_document):
        transition = decode_flow(flow_document).transitions[0]

        assert transition.id == "e-welcome-offer"
        assert transition.source == "welcome"
        assert transition.target == "offer"
        assert transition.source_handle == "Yes"
        assert transition.label == "Yes"
        assert transition.style["animated"] is True

    def test_fallback_position(self, flow_document):
        """Steps without coordinates use the index grid."""
        offer = decode_flow(flow_document).steps[1]

        assert offer.position == Position(240, 210)

    def test_defaults(self, flow_document):
        offer = decode_flow(flow_document).steps[1]

        assert offer.trigger_button_type == "cta"
        assert offer.trigger_button_text == ""
        assert offer.buttons == []

    def test_trigger_synced_on_load(self):
        decoded = decode_flow(
            {
                "nodes": [
                    {"id": "a", "triggerButtonText": "stale", "buttons": [{"text": "Fresh"}]},
                ]
            }
        )

        assert decoded.steps[0].trigger_button_text == "Fresh"

    def test_stored_trigger_type_survives_round_trip(self):
        """A stored trigger type is kept on load and written back on save."""
        decoded = decode_flow(
            {
                "nodes": [
                    {
                        "id": "a",
                        "templateName": "promo",
                        "triggerButtonType": "url",
                        "buttons": [{"text": "Go"}],
                    },
                ]
            }
        )

        payload = encode_flow("Promo", False, decoded.steps, decoded.transitions)

        assert decoded.steps[0].trigger_button_type == "url"
        assert decoded.steps[0].trigger_button_text == "Go"
        assert payload["Nodes"][0]["TriggerButtonType"] == "url"

    def test_flow_name_default(self):
        assert decode_flow({}).flow_name == "Untitled Flow"

    def test_duplicate_edges_get_unique_ids(self):
        decoded = decode_flow(
            {
                "nodes": [{"id": "a"}, {"id": "b"}],
                "edges": [
                    {"fromNodeId": "a", "toNodeId": "b", "sourceHandle": "Yes"},
                    {"fromNodeId": "a", "toNodeId": "b", "sourceHandle": "Maybe"},
                    {"fromNodeId": "a", "toNodeId": "b"},
                    {"fromNodeId": "a", "toNodeId": "b"},
                ],
            }
        )

        ids = [t.id for t in decoded.transitions]
        assert ids[0] == "e-a-b"
        assert ids[1] == "e-a-b-Maybe"
        assert len(set(ids)) == 4

    def test_malformed_document(self):
        with pytest.raises(LoadFailure) as exc_info:
            decode_flow({"nodes": [{"templateName": "no id"}]}, flow_id="f1")

        assert exc_info.value.flow_id == "f1"

    def test_duplicate_step_ids(self):
        with pytest.raises(LoadFailure, match="duplicate"):
            decode_flow({"nodes": [{"id": "a"}, {"id": "a"}]})

    def test_not_json_object(self):
        with pytest.raises(LoadFailure):
            decode_flow(None)


class TestEncodeFlow:
    """Tests for the save transform."""

    @pytest.fixture
    def steps(self):
        return [
            Step(
                id="a",
                position=Position(1.5, 2.5),
                template_name="Welcome",
                message_body="hi",
                trigger_button_text="Yes",
                required_tag="vip",
                buttons=[
                    Button(text=" Yes ", target_node_id="b", index=0),
                    Button(text="   ", index=1),
                    Button(text="No", type="", index=2),
                ],
            ),
            Step(id="b", template_name="Offer"),
            Step(id="draft", template_name="  "),
            Step(id="empty"),
        ]

    def test_payload_shape(self, steps):
        payload = encode_flow("Diwali", True, steps, [])

        assert payload["FlowName"] == "Diwali"
        assert payload["IsPublished"] is True
        node = payload["Nodes"][0]
        assert node == {
            "Id": "a",
            "TemplateName": "Welcome",
            "TemplateType": "text_template",
            "MessageBody": "hi",
            "PositionX": 1.5,
            "PositionY": 2.5,
            "TriggerButtonText": "Yes",
            "TriggerButtonType": "cta",
            "RequiredTag": "vip",
            "RequiredSource": "",
            "IsEntry": False,
            "Buttons": [
                {
                    "Text": "Yes",
                    "Type": "QUICK_REPLY",
                    "SubType": "",
                    "Value": "",
                    "TargetNodeId": "b",
                    "Index": 0,
                },
                {
                    "Text": "No",
                    "Type": "QUICK_REPLY",
                    "SubType": "",
                    "Value": "",
                    "TargetNodeId": None,
                    "Index": 2,
                },
            ],
        }

    def test_drops_steps_without_template(self, steps):
        """Blank and whitespace-only template names are never emitted."""
        payload = encode_flow("x", False, steps, [])

        assert [n["Id"] for n in payload["Nodes"]] == ["a", "b"]
        assert all(n["TemplateName"].strip() for n in payload["Nodes"])

    def test_emits_every_transition(self, steps):
        """Transitions to filtered-out steps are still sent."""
        transitions = [
            Transition(id="1", source="a", target="b", source_handle="Yes"),
            Transition(id="2", source="b", target="draft"),
        ]

        payload = encode_flow("x", False, steps, transitions)

        assert payload["Edges"] == [
            {"FromNodeId": "a", "ToNodeId": "b", "SourceHandle": "Yes"},
            {"FromNodeId": "b", "ToNodeId": "draft", "SourceHandle": ""},
        ]

    def test_blank_flow_name(self):
        assert encode_flow("  ", False, [], [])["FlowName"] == "Untitled"

    def test_loaded_flow_round_trips_structure(self, flow_document):
        decoded = decode_flow(flow_document)

        payload = encode_flow(decoded.flow_name, False, decoded.steps, decoded.transitions)

        assert [n["Id"] for n in payload["Nodes"]] == ["welcome", "offer"]
        assert payload["Edges"] == [
            {"FromNodeId": "welcome", "ToNodeId": "offer", "SourceHandle": "Yes"}
        ]
