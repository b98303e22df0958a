"""Immutable tree mutation engine.

Ops are small, id-addressed edits produced by a builder. ``apply_core_ops``
applies an ordered batch to a deep copy of a document and never touches the
input. Ops that address ids that do not exist are silent no-ops, and ops that
fail to parse are skipped with a warning, so one bad edit never sinks the
rest of the batch.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from pagecore.ir.lib import (
    CoreDocument,
    CoreNode,
    DocumentError,
    EventBinding,
    IRModel,
    MotionSpec,
    StyleTokens,
    find_node,
    iter_ids,
    to_wire,
)

logger = logging.getLogger(__name__)

InsertPosition = Literal["prepend", "append", "before", "after"]


# =============================================================================
# Op models
# =============================================================================


class UpdatePropsOp(IRModel):
    """Shallow-merge ``props`` into the node's props."""

    op: Literal["updateProps"] = "updateProps"
    node_id: str
    props: dict[str, Any]


class UpdateStyleOp(IRModel):
    """Shallow-merge ``style`` tokens into the node's style."""

    op: Literal["updateStyle"] = "updateStyle"
    node_id: str
    style: StyleTokens


class UpdateTextOp(IRModel):
    op: Literal["updateText"] = "updateText"
    node_id: str
    text: str


class ReplaceOp(IRModel):
    """Swap every subtree whose id matches for ``node``."""

    op: Literal["replace"] = "replace"
    node_id: str
    node: CoreNode


class DeleteOp(IRModel):
    op: Literal["delete"] = "delete"
    node_id: str


class InsertOp(IRModel):
    """Insert ``node`` relative to ``parent_id``.

    For ``prepend`` and ``append``, ``parent_id`` is the container whose
    children receive the node. For ``before`` and ``after`` it names a
    sibling, and the node is spliced next to it in that sibling's parent.
    Use ``into_parent`` and ``relative_to_sibling`` to build either form
    without tripping over the field name.
    """

    op: Literal["insert"] = "insert"
    parent_id: str
    position: InsertPosition
    node: CoreNode

    @classmethod
    def into_parent(
        cls,
        parent_id: str,
        node: CoreNode,
        at: Literal["prepend", "append"] = "append",
    ) -> "InsertOp":
        if at not in ("prepend", "append"):
            raise ValueError(f"Invalid parent position '{at}'. Use 'prepend' or 'append'")
        return cls(parent_id=parent_id, position=at, node=node)

    @classmethod
    def relative_to_sibling(
        cls,
        sibling_id: str,
        node: CoreNode,
        side: Literal["before", "after"] = "after",
    ) -> "InsertOp":
        if side not in ("before", "after"):
            raise ValueError(f"Invalid sibling position '{side}'. Use 'before' or 'after'")
        return cls(parent_id=sibling_id, position=side, node=node)

    @property
    def anchor_kind(self) -> Literal["parent", "sibling"]:
        """Whether ``parent_id`` names a container or a sibling."""
        return "parent" if self.position in ("prepend", "append") else "sibling"


class AddEventOp(IRModel):
    op: Literal["addEvent"] = "addEvent"
    node_id: str
    event: EventBinding


class RemoveEventOp(IRModel):
    """Remove the event binding at ``event_index``. Out of range is a no-op."""

    op: Literal["removeEvent"] = "removeEvent"
    node_id: str
    event_index: int


class UpdateAnimationOp(IRModel):
    """Replace the node's motion wholesale. A null motion clears it."""

    op: Literal["updateAnimation"] = "updateAnimation"
    node_id: str
    motion: MotionSpec | None = None


CoreOp = Annotated[
    Union[
        UpdatePropsOp,
        UpdateStyleOp,
        UpdateTextOp,
        ReplaceOp,
        DeleteOp,
        InsertOp,
        AddEventOp,
        RemoveEventOp,
        UpdateAnimationOp,
    ],
    Field(discriminator="op"),
]

OP_TYPES: tuple[str, ...] = (
    "updateProps",
    "updateStyle",
    "updateText",
    "replace",
    "delete",
    "insert",
    "addEvent",
    "removeEvent",
    "updateAnimation",
)

_OP_MODELS = (
    UpdatePropsOp,
    UpdateStyleOp,
    UpdateTextOp,
    ReplaceOp,
    DeleteOp,
    InsertOp,
    AddEventOp,
    RemoveEventOp,
    UpdateAnimationOp,
)

_op_adapter: TypeAdapter = TypeAdapter(CoreOp)


# =============================================================================
# Parsing
# =============================================================================


@dataclass
class RejectedOp:
    """An op that could not be parsed.

    Attributes:
        index: Position of the op in the submitted batch.
        raw: The op as submitted.
        reason: Human-readable parse failure.
    """

    index: int
    raw: Any
    reason: str

    def __str__(self) -> str:
        return f"op[{self.index}]: {self.reason}"


def parse_core_op(raw: Any) -> BaseModel:
    """Parse one wire op into its typed model.

    Raises:
        pydantic.ValidationError: If the op is not a well-formed CoreOp.
    """
    if isinstance(raw, _OP_MODELS):
        return raw
    return _op_adapter.validate_python(raw)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{first['msg']} at '{loc}'" if loc else first["msg"]


def parse_core_ops(raw_ops: Sequence[Any]) -> tuple[list[BaseModel], list[RejectedOp]]:
    """Parse a batch of wire ops, separating the well-formed from the rest.

    Args:
        raw_ops: Ops as dicts (hydrated wire form) or op models.

    Returns:
        Tuple of (parsed ops in order, rejected ops).

    Raises:
        TypeError: If ``raw_ops`` is not a list of ops.
    """
    if isinstance(raw_ops, (str, bytes, dict)) or not isinstance(raw_ops, (list, tuple)):
        raise TypeError(f"Expected a list of ops, got {type(raw_ops).__name__}")

    parsed: list[BaseModel] = []
    rejected: list[RejectedOp] = []
    for index, raw in enumerate(raw_ops):
        try:
            parsed.append(parse_core_op(raw))
        except ValidationError as e:
            rejected.append(RejectedOp(index=index, raw=raw, reason=_describe(e)))
    return parsed, rejected


def encode_op(op: BaseModel) -> dict[str, Any]:
    """Serialize a typed op to its structured wire form."""
    return to_wire(op)


# =============================================================================
# Application
# =============================================================================


def _update_props(root: CoreNode, op: UpdatePropsOp) -> None:
    node = find_node(root, op.node_id)
    if node is None or not op.props:
        return
    node.props = {**(node.props or {}), **op.props}


def _update_style(root: CoreNode, op: UpdateStyleOp) -> None:
    node = find_node(root, op.node_id)
    delta = to_wire(op.style)
    if node is None or not delta:
        return
    current = to_wire(node.style) if node.style is not None else {}
    node.style = StyleTokens.model_validate({**current, **delta})


def _update_text(root: CoreNode, op: UpdateTextOp) -> None:
    node = find_node(root, op.node_id)
    if node is not None:
        node.text = op.text


def _replace_in(node: CoreNode, op: ReplaceOp) -> CoreNode:
    if node.id == op.node_id:
        return op.node.model_copy(deep=True)
    if node.children:
        node.children = [_replace_in(child, op) for child in node.children]
    return node


def _delete_from(node: CoreNode, node_id: str) -> None:
    if not node.children:
        return
    node.children = [child for child in node.children if child.id != node_id]
    for child in node.children:
        _delete_from(child, node_id)


def _insert_into_parent(root: CoreNode, op: InsertOp) -> None:
    parent = find_node(root, op.parent_id)
    if parent is None:
        return
    children = list(parent.children or [])
    new_node = op.node.model_copy(deep=True)
    if op.position == "prepend":
        children.insert(0, new_node)
    else:
        children.append(new_node)
    parent.children = children


def _insert_beside(node: CoreNode, op: InsertOp) -> bool:
    children = node.children or []
    for i, child in enumerate(children):
        if child.id == op.parent_id:
            at = i if op.position == "before" else i + 1
            node.children = children[:at] + [op.node.model_copy(deep=True)] + children[at:]
            return True
    return any(_insert_beside(child, op) for child in children)


def _add_event(root: CoreNode, op: AddEventOp) -> None:
    node = find_node(root, op.node_id)
    if node is not None:
        node.events = [*(node.events or []), op.event.model_copy(deep=True)]


def _remove_event(root: CoreNode, op: RemoveEventOp) -> None:
    node = find_node(root, op.node_id)
    if node is None or not node.events:
        return
    if 0 <= op.event_index < len(node.events):
        node.events = [e for i, e in enumerate(node.events) if i != op.event_index]


def _update_animation(root: CoreNode, op: UpdateAnimationOp) -> None:
    node = find_node(root, op.node_id)
    if node is not None:
        node.motion = op.motion.model_copy(deep=True) if op.motion is not None else None


def _apply_op(document: CoreDocument, op: BaseModel) -> None:
    root = document.app
    if isinstance(op, UpdatePropsOp):
        _update_props(root, op)
    elif isinstance(op, UpdateStyleOp):
        _update_style(root, op)
    elif isinstance(op, UpdateTextOp):
        _update_text(root, op)
    elif isinstance(op, ReplaceOp):
        document.app = _replace_in(root, op)
    elif isinstance(op, DeleteOp):
        _delete_from(root, op.node_id)
    elif isinstance(op, InsertOp):
        if op.anchor_kind == "parent":
            _insert_into_parent(root, op)
        else:
            _insert_beside(root, op)
    elif isinstance(op, AddEventOp):
        _add_event(root, op)
    elif isinstance(op, RemoveEventOp):
        _remove_event(root, op)
    elif isinstance(op, UpdateAnimationOp):
        _update_animation(root, op)
    else:
        raise TypeError(f"Unsupported op type: {type(op).__name__}")


def apply_core_ops(document: CoreDocument, ops: Sequence[Any]) -> CoreDocument:
    """Apply an ordered batch of ops and return the edited copy.

    The input document and the op payloads are never mutated. Ops addressing
    ids that do not resolve have no effect. Ops that fail to parse are
    skipped and logged; the rest of the batch still applies.

    Args:
        document: Document to edit.
        ops: Ops as hydrated wire dicts or typed op models.

    Returns:
        CoreDocument: A new document with the ops applied in order.

    Raises:
        DocumentError: If ``document`` is not a CoreDocument.
        TypeError: If ``ops`` is not a list.

    Example:
        >>> doc = apply_core_ops(doc, [
        ...     {"op": "updateText", "nodeId": "title", "text": "Hello"},
        ... ])
    """
    if not isinstance(document, CoreDocument):
        raise DocumentError(f"Expected a CoreDocument, got {type(document).__name__}")

    parsed, rejected = parse_core_ops(ops)
    for item in rejected:
        logger.warning("Skipping malformed %s", item)

    result = document.model_copy(deep=True)
    for op in parsed:
        _apply_op(result, op)

    logger.debug("Applied %d op(s), skipped %d", len(parsed), len(rejected))
    return result


def fresh_id(document: CoreDocument, prefix: str = "node", taken: Iterable[str] = ()) -> str:
    """Return an id with ``prefix`` that no node in the document uses.

    Args:
        document: Document whose ids must be avoided.
        prefix: Leading part of the id.
        taken: Extra ids to avoid, e.g. ones already handed out in a batch.
    """
    used = set(iter_ids(document.app)) | set(taken)
    if prefix not in used:
        return prefix
    n = 2
    while f"{prefix}-{n}" in used:
        n += 1
    return f"{prefix}-{n}"
