"""Unit tests for schema encoding and hydration."""

import json
import logging

import pytest

from pagecore.ir import NODE_TYPES, find_node, to_wire
from pagecore.ops import OP_TYPES, UpdateStyleOp, apply_core_ops
from pagecore.schema import (
    CORE_OPS_SCHEMA,
    EXAMPLE_OPS,
    encode_core_ops,
    export_document_schema,
    export_llm_schema,
    export_ops_schema,
    hydrate_core_ops,
)


def _walk_objects(schema):
    if isinstance(schema, dict):
        if schema.get("type") == "object":
            yield schema
        for value in schema.values():
            yield from _walk_objects(value)
    elif isinstance(schema, list):
        for item in schema:
            yield from _walk_objects(item)


class TestOpsSchema:
    """Tests for the generation-time schema."""

    @pytest.mark.unit
    def test_shape(self):
        """Schema is an array of nine op variants."""
        assert CORE_OPS_SCHEMA["type"] == "array"
        variants = CORE_OPS_SCHEMA["items"]["anyOf"]
        assert [v["properties"]["op"]["const"] for v in variants] == [
            "updateProps", "updateStyle", "updateText", "replace", "delete",
            "insert", "addEvent", "removeEvent", "updateAnimation",
        ]

    @pytest.mark.unit
    def test_variants_follow_engine_op_names(self):
        """Schema variants cover exactly the ops the engine parses."""
        variants = CORE_OPS_SCHEMA["items"]["anyOf"]
        assert tuple(v["properties"]["op"]["const"] for v in variants) == OP_TYPES

    @pytest.mark.unit
    def test_every_object_closed(self):
        """Every object disallows additional properties."""
        objects = list(_walk_objects(CORE_OPS_SCHEMA))
        assert len(objects) == 10
        assert all(o["additionalProperties"] is False for o in objects)

    @pytest.mark.unit
    def test_free_form_fields_are_strings(self):
        """props, style, events and motion are JSON strings."""
        node = CORE_OPS_SCHEMA["$defs"]["CoreNode"]["properties"]
        for field in ("props", "style", "events", "motion"):
            assert node[field]["type"] == "string"
            assert node[field]["description"].startswith("JSON-encoded")
        assert set(node["type"]["enum"]) == NODE_TYPES
        assert node["children"]["items"] == {"$ref": "#/$defs/CoreNode"}

    @pytest.mark.unit
    def test_export_is_a_copy(self):
        """Callers can modify the exported schema freely."""
        exported = export_ops_schema()
        exported["items"]["anyOf"].clear()
        assert len(CORE_OPS_SCHEMA["items"]["anyOf"]) == 9


class TestDocumentSchema:
    """Tests for the pydantic-derived document schema."""

    @pytest.mark.unit
    def test_has_camel_case_fields(self):
        """The schema uses wire names."""
        schema = export_document_schema()
        assert "app" in schema["properties"]
        defs = schema["$defs"]
        assert "CoreNode" in defs
        assert "minWidth" in defs["StyleTokens"]["properties"]
        assert "do" in defs["EventBinding"]["properties"]


class TestHydration:
    """Tests for hydrate_core_ops."""

    @pytest.mark.unit
    def test_top_level_fields(self):
        """String fields on ops are parsed."""
        ops = hydrate_core_ops(
            [
                {"op": "updateProps", "nodeId": "a", "props": '{"x": 1}'},
                {"op": "addEvent", "nodeId": "a", "event": '{"event": "click", "do": []}'},
                {"op": "updateAnimation", "nodeId": "a", "motion": "null"},
            ]
        )
        assert ops[0]["props"] == {"x": 1}
        assert ops[1]["event"]["event"] == "click"
        assert ops[2]["motion"] is None

    @pytest.mark.unit
    def test_nested_nodes(self):
        """Node fields are parsed recursively through children."""
        ops = hydrate_core_ops(
            [
                {
                    "op": "insert",
                    "parentId": "app",
                    "position": "append",
                    "node": {
                        "id": "c",
                        "type": "Card",
                        "style": '{"radius": "md"}',
                        "children": [
                            {"id": "t", "type": "Text", "events": '[{"event": "click", "do": []}]'}
                        ],
                    },
                }
            ]
        )
        node = ops[0]["node"]
        assert node["style"] == {"radius": "md"}
        assert node["children"][0]["events"][0]["event"] == "click"

    @pytest.mark.unit
    def test_unparseable_string_kept(self, caplog):
        """Bad JSON stays a raw string and is logged."""
        with caplog.at_level(logging.WARNING, logger="pagecore.schema.lib"):
            ops = hydrate_core_ops([{"op": "updateStyle", "nodeId": "a", "style": "{bad"}])
        assert ops[0]["style"] == "{bad"
        assert "ops[0].style" in caplog.text

    @pytest.mark.unit
    def test_input_not_mutated(self):
        """Hydration returns new dicts."""
        raw = [{"op": "updateProps", "nodeId": "a", "props": '{"x": 1}'}]
        hydrate_core_ops(raw)
        assert raw[0]["props"] == '{"x": 1}'

    @pytest.mark.unit
    def test_non_list_raises(self):
        """Only lists are accepted."""
        with pytest.raises(TypeError):
            hydrate_core_ops({"op": "delete"})

    @pytest.mark.unit
    def test_hydrated_ops_apply(self, sample_document):
        """Hydrated ops are accepted by the ops engine."""
        ops = hydrate_core_ops(
            [{"op": "updateStyle", "nodeId": "title", "style": '{"color": "danger"}'}]
        )
        result = apply_core_ops(sample_document, ops)
        assert find_node(result.app, "title").style.color == "danger"


class TestEncoding:
    """Tests for encode_core_ops."""

    @pytest.mark.unit
    def test_hydrate_inverts_encode(self):
        """Encoding then hydrating restores the structured ops."""
        encoded = encode_core_ops(EXAMPLE_OPS)
        assert isinstance(encoded[0]["node"]["style"], str)
        assert isinstance(encoded[0]["node"]["children"][2]["events"], str)
        assert hydrate_core_ops(encoded) == EXAMPLE_OPS

    @pytest.mark.unit
    def test_encodes_models(self):
        """Typed ops are serialized to wire names first."""
        encoded = encode_core_ops([UpdateStyleOp(node_id="a", style={"color": "primary"})])
        assert encoded == [
            {"op": "updateStyle", "nodeId": "a", "style": json.dumps({"color": "primary"}, separators=(",", ":"))}
        ]

    @pytest.mark.unit
    def test_round_trip_through_engine(self, sample_document):
        """Encoded, hydrated ops edit the document like the originals."""
        direct = apply_core_ops(sample_document, EXAMPLE_OPS)
        via_wire = apply_core_ops(sample_document, hydrate_core_ops(encode_core_ops(EXAMPLE_OPS)))
        assert to_wire(direct) == to_wire(via_wire)
        assert find_node(direct.app, "signup-submit") is not None


class TestLLMSchema:
    """Tests for export_llm_schema."""

    @pytest.mark.unit
    def test_bundle_contents(self):
        """Bundle carries schema, vocabularies and examples."""
        bundle = export_llm_schema()
        assert bundle["schema"]["type"] == "array"
        assert "Button" in bundle["node_types"]["interactive"]
        assert "2xl" in bundle["tokens"]["space"]
        assert "toast" in bundle["effects"]
        assert "fadeIn" in bundle["motion"]["presets"]
        assert bundle["op_types"] == list(OP_TYPES)
        assert all(isinstance(e, dict) for e in bundle["examples"])

    @pytest.mark.unit
    def test_bundle_is_json_serializable(self):
        """The bundle can be embedded in a prompt as JSON."""
        json.dumps(export_llm_schema())
