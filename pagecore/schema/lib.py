"""Schema encoding for builder output.

Constrained decoding requires ``additionalProperties: false`` on every
object, which rules out free-form objects. The generation schema therefore
carries props, style, events, event and motion as JSON-encoded strings, and
``hydrate_core_ops`` parses them back before the ops engine sees them.

This module provides:
- The generation-time ops schema (``CORE_OPS_SCHEMA``)
- The true document schema derived from the IR models
- Hydration and its inverse encoder
- An LLM-oriented bundle of vocabularies and examples
"""

import copy
import json
import logging
from typing import Any

from pydantic import BaseModel

from pagecore.ir import (
    EFFECT_TYPES,
    AlignToken,
    ColorRole,
    ConditionOp,
    CoreDocument,
    LayoutToken,
    MotionPresetName,
    MotionTrigger,
    NodeCategory,
    NodeType,
    RadiusToken,
    ShadowToken,
    SpaceToken,
    TypographyToken,
    get_types_by_category,
)
from pagecore.ops import OP_TYPES, encode_op

logger = logging.getLogger(__name__)

# Fields carried as JSON strings on an op and on a generated node
OP_STRING_FIELDS: tuple[str, ...] = ("props", "style", "event", "motion")
NODE_STRING_FIELDS: tuple[str, ...] = ("props", "style", "events", "motion")


# =============================================================================
# Generation schema
# =============================================================================


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _op(name: str, properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"op": {"type": "string", "const": name}, **properties},
        "required": ["op", *required],
        "additionalProperties": False,
    }


_NODE_REF = {"$ref": "#/$defs/CoreNode"}
_NODE_ID = {"type": "string"}

CORE_NODE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "type": {"type": "string", "enum": [nt.value for nt in NodeType]},
        "props": _string("JSON-encoded props object"),
        "style": _string("JSON-encoded StyleTokens object"),
        "events": _string("JSON-encoded EventBinding[] array"),
        "motion": _string("JSON-encoded MotionSpec object"),
        "children": {"type": "array", "items": _NODE_REF},
        "text": {"type": "string"},
    },
    "required": ["id", "type"],
    "additionalProperties": False,
}

# Properties and required fields of each op variant, keyed by op name
_OP_FIELDS: dict[str, tuple[dict[str, Any], list[str]]] = {
    "updateProps": (
        {"nodeId": _NODE_ID, "props": _string("JSON-encoded props to merge")},
        ["nodeId", "props"],
    ),
    "updateStyle": (
        {"nodeId": _NODE_ID, "style": _string("JSON-encoded StyleTokens to merge")},
        ["nodeId", "style"],
    ),
    "updateText": ({"nodeId": _NODE_ID, "text": {"type": "string"}}, ["nodeId", "text"]),
    "replace": ({"nodeId": _NODE_ID, "node": _NODE_REF}, ["nodeId", "node"]),
    "delete": ({"nodeId": _NODE_ID}, ["nodeId"]),
    "insert": (
        {
            "parentId": _NODE_ID,
            "position": {
                "type": "string",
                "enum": ["prepend", "append", "before", "after"],
            },
            "node": _NODE_REF,
        },
        ["parentId", "position", "node"],
    ),
    "addEvent": (
        {"nodeId": _NODE_ID, "event": _string("JSON-encoded EventBinding object")},
        ["nodeId", "event"],
    ),
    "removeEvent": (
        {"nodeId": _NODE_ID, "eventIndex": {"type": "number"}},
        ["nodeId", "eventIndex"],
    ),
    "updateAnimation": (
        {"nodeId": _NODE_ID, "motion": _string("JSON-encoded MotionSpec object")},
        ["nodeId", "motion"],
    ),
}

CORE_OPS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {"anyOf": [_op(name, *_OP_FIELDS[name]) for name in OP_TYPES]},
    "$defs": {"CoreNode": CORE_NODE_SCHEMA},
}


def export_ops_schema() -> dict[str, Any]:
    """Export the generation-time CoreOp[] schema.

    Returns:
        A deep copy of CORE_OPS_SCHEMA, safe for callers to modify.
    """
    return copy.deepcopy(CORE_OPS_SCHEMA)


def export_document_schema() -> dict[str, Any]:
    """Export the unconstrained CoreDocument JSON Schema from the IR models."""
    return CoreDocument.model_json_schema(by_alias=True)


# =============================================================================
# Hydration
# =============================================================================


def _try_parse_json(value: str, where: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Could not decode JSON in '%s'; keeping raw string", where)
        return value


def _hydrate_node(node: dict[str, Any], where: str) -> dict[str, Any]:
    result = dict(node)
    for field in NODE_STRING_FIELDS:
        if isinstance(result.get(field), str):
            result[field] = _try_parse_json(result[field], f"{where}.{field}")
    if isinstance(result.get("children"), list):
        result["children"] = [
            _hydrate_node(child, f"{where}.children[{i}]") if isinstance(child, dict) else child
            for i, child in enumerate(result["children"])
        ]
    return result


def hydrate_core_ops(raw_ops: list[Any]) -> list[Any]:
    """Parse JSON-encoded string fields of generated ops back to structure.

    Fields that fail to parse keep their raw string; the ops engine then
    rejects that op on its own. Entries that are not objects pass through.

    Args:
        raw_ops: Ops as produced under CORE_OPS_SCHEMA.

    Returns:
        New list of ops with structured props, style, event(s) and motion.

    Raises:
        TypeError: If ``raw_ops`` is not a list.

    Example:
        >>> hydrate_core_ops([{"op": "updateStyle", "nodeId": "a", "style": '{"color": "primary"}'}])
        [{'op': 'updateStyle', 'nodeId': 'a', 'style': {'color': 'primary'}}]
    """
    if not isinstance(raw_ops, list):
        raise TypeError(f"Expected a list of ops, got {type(raw_ops).__name__}")

    hydrated: list[Any] = []
    for i, op in enumerate(raw_ops):
        if not isinstance(op, dict):
            hydrated.append(op)
            continue
        result = dict(op)
        if isinstance(result.get("node"), dict):
            result["node"] = _hydrate_node(result["node"], f"ops[{i}].node")
        for field in OP_STRING_FIELDS:
            if isinstance(result.get(field), str):
                result[field] = _try_parse_json(result[field], f"ops[{i}].{field}")
        hydrated.append(result)
    return hydrated


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _encode_node(node: dict[str, Any]) -> dict[str, Any]:
    result = dict(node)
    for field in NODE_STRING_FIELDS:
        if field in result and not isinstance(result[field], str):
            result[field] = _dumps(result[field])
    if isinstance(result.get("children"), list):
        result["children"] = [_encode_node(child) for child in result["children"]]
    return result


def encode_core_ops(ops: list[Any]) -> list[dict[str, Any]]:
    """Encode structured ops into the generation wire form.

    This is the inverse of ``hydrate_core_ops``: free-form fields become
    JSON strings so the result conforms to CORE_OPS_SCHEMA.

    Args:
        ops: Typed op models or structured wire dicts.
    """
    encoded: list[dict[str, Any]] = []
    for op in ops:
        result = encode_op(op) if isinstance(op, BaseModel) else dict(op)
        if isinstance(result.get("node"), dict):
            result["node"] = _encode_node(result["node"])
        for field in OP_STRING_FIELDS:
            if field in result and not isinstance(result[field], str):
                result[field] = _dumps(result[field])
        encoded.append(result)
    return encoded


# =============================================================================
# LLM export
# =============================================================================

EXAMPLE_OPS: list[dict[str, Any]] = [
    {
        "op": "insert",
        "parentId": "app",
        "position": "append",
        "node": {
            "id": "signup",
            "type": "Card",
            "style": {"space": "lg", "radius": "md", "shadow": "sm"},
            "children": [
                {"id": "signup-title", "type": "Heading", "props": {"level": 2}, "text": "Join us"},
                {"id": "signup-email", "type": "Input", "props": {"placeholder": "Email", "bind": "email"}},
                {
                    "id": "signup-submit",
                    "type": "Button",
                    "props": {"variant": "primary"},
                    "text": "Sign up",
                    "events": [
                        {
                            "event": "click",
                            "do": [{"type": "toast", "message": "Thanks!", "variant": "success"}],
                        }
                    ],
                },
            ],
        },
    },
    {"op": "updateStyle", "nodeId": "signup", "style": {"bg": "surface"}},
    {
        "op": "updateAnimation",
        "nodeId": "signup",
        "motion": {"mode": "preset", "preset": "slideUp", "trigger": "onVisible"},
    },
]


def export_llm_schema() -> dict[str, Any]:
    """Export an LLM-optimized schema with vocabularies and examples.

    This bundle is designed for injection into builder prompts to guide
    structured op generation.

    Returns:
        Dict with the ops schema, node types by category, token
        vocabularies, effect and motion vocabularies, and encoded examples.
    """
    return {
        "schema": export_ops_schema(),
        "node_types": {
            cat.value: [nt.value for nt in get_types_by_category(cat)]
            for cat in NodeCategory
        },
        "tokens": {
            "space": [t.value for t in SpaceToken],
            "radius": [t.value for t in RadiusToken],
            "shadow": [t.value for t in ShadowToken],
            "color": [t.value for t in ColorRole],
            "typography": [t.value for t in TypographyToken],
            "layout": [t.value for t in LayoutToken],
            "align": [t.value for t in AlignToken],
        },
        "op_types": list(OP_TYPES),
        "effects": list(EFFECT_TYPES),
        "condition_ops": [op.value for op in ConditionOp],
        "motion": {
            "presets": [p.value for p in MotionPresetName],
            "triggers": [t.value for t in MotionTrigger],
        },
        "constraints": {
            "id": "Must be unique within the document",
            "target": "Effect targets must name an existing node id",
        },
        "examples": encode_core_ops(EXAMPLE_OPS),
    }
