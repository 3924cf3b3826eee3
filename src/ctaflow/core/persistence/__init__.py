"""Persistence - backend wire schema, mapping, and HTTP client."""

from ctaflow.core.persistence.client import FlowBackend, FlowClient, FlowClientConfig
from ctaflow.core.persistence.mapper import DecodedFlow, decode_flow, encode_flow
from ctaflow.core.persistence.schema import FlowRecord, parse_flow_document

__all__ = [
    "DecodedFlow",
    "FlowBackend",
    "FlowClient",
    "FlowClientConfig",
    "FlowRecord",
    "decode_flow",
    "encode_flow",
    "parse_flow_document",
]
