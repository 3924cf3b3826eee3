"""Tests for wire-record normalization and validation."""

import pytest
from pydantic import ValidationError

from ctaflow.core.persistence.schema import (
    EDGE_FIELDS,
    NODE_FIELDS,
    normalize_record,
    parse_flow_document,
)


class TestNormalizeRecord:
    """Tests for the alias priority lists."""

    def test_first_alias_wins(self):
        record = normalize_record({"positionX": 1, "PositionX": 2}, NODE_FIELDS)

        assert record["position_x"] == 1

    def test_falls_back_to_later_alias(self):
        record = normalize_record({"PositionX": 2}, NODE_FIELDS)

        assert record["position_x"] == 2

    def test_null_skipped(self):
        """A null primary name does not hide a set alternate."""
        record = normalize_record({"fromNodeId": None, "source": "a"}, EDGE_FIELDS)

        assert record["from_node_id"] == "a"

    def test_missing_fields_left_out(self):
        assert normalize_record({}, EDGE_FIELDS) == {}

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            normalize_record(["not", "an", "object"], EDGE_FIELDS)


class TestParseFlowDocument:
    """Tests for parse_flow_document."""

    def test_camel_case(self, flow_document):
        record = parse_flow_document(flow_document)

        assert record.flow_name == "Diwali offer"
        assert [n.id for n in record.nodes] == ["welcome", "offer"]
        assert record.nodes[0].buttons[0].target_node_id == "offer"
        assert record.edges[0].from_node_id == "welcome"
        assert record.edges[0].source_handle == "Yes"

    def test_pascal_case(self):
        record = parse_flow_document(
            {
                "FlowName": "Echo",
                "IsPublished": True,
                "Nodes": [{"Id": "n1", "TemplateName": "t", "Buttons": [{"Text": "Go"}]}],
                "Edges": [{"FromNodeId": "n1", "ToNodeId": "n1", "SourceHandle": "Go"}],
            }
        )

        assert record.is_published is True
        assert record.nodes[0].buttons[0].text == "Go"
        assert record.edges[0].to_node_id == "n1"

    def test_numeric_ids_become_strings(self):
        record = parse_flow_document(
            {
                "nodes": [{"id": 7, "buttons": [{"text": "x", "targetNodeId": 8}]}, {"id": 8}],
                "edges": [{"fromNodeId": 7, "toNodeId": 8}],
            }
        )

        assert record.nodes[0].id == "7"
        assert record.nodes[0].buttons[0].target_node_id == "8"
        assert record.edges[0].from_node_id == "7"

    def test_blank_target_and_handle_are_none(self):
        record = parse_flow_document(
            {
                "nodes": [{"id": "a", "buttons": [{"text": "x", "targetNodeId": ""}]}],
                "edges": [{"fromNodeId": "a", "toNodeId": "a", "sourceHandle": ""}],
            }
        )

        assert record.nodes[0].buttons[0].target_node_id is None
        assert record.edges[0].source_handle is None

    def test_empty_document(self):
        record = parse_flow_document({})

        assert record.flow_name is None
        assert record.nodes == []
        assert record.edges == []

    def test_node_without_id(self):
        with pytest.raises(ValidationError):
            parse_flow_document({"nodes": [{"templateName": "x"}]})

    def test_edge_without_target(self):
        with pytest.raises(ValidationError):
            parse_flow_document({"edges": [{"fromNodeId": "a"}]})

    def test_nodes_not_a_list(self):
        with pytest.raises(TypeError):
            parse_flow_document({"nodes": {"id": "a"}})

    def test_document_not_an_object(self):
        with pytest.raises(TypeError):
            parse_flow_document("<html>Bad gateway</html>")
