"""Immutable tree operations over page documents."""

from pagecore.ops.lib import (
    OP_TYPES,
    AddEventOp,
    CoreOp,
    DeleteOp,
    InsertOp,
    InsertPosition,
    RejectedOp,
    RemoveEventOp,
    ReplaceOp,
    UpdateAnimationOp,
    UpdatePropsOp,
    UpdateStyleOp,
    UpdateTextOp,
    apply_core_ops,
    encode_op,
    fresh_id,
    parse_core_op,
    parse_core_ops,
)

__all__ = [
    # Op models
    "CoreOp",
    "OP_TYPES",
    "UpdatePropsOp",
    "UpdateStyleOp",
    "UpdateTextOp",
    "ReplaceOp",
    "DeleteOp",
    "InsertOp",
    "InsertPosition",
    "AddEventOp",
    "RemoveEventOp",
    "UpdateAnimationOp",
    # Parsing
    "RejectedOp",
    "parse_core_op",
    "parse_core_ops",
    "encode_op",
    # Application
    "apply_core_ops",
    "fresh_id",
]
