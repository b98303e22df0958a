"""pagecore: typed page IR, tree ops and HTML compiler for builder-driven pages."""

from pagecore.adapters import CoreAdapter, get_adapter, list_adapters
from pagecore.builder import (
    Builder,
    CompletionBuilder,
    transform_core_page,
)
from pagecore.compiler import compile_document
from pagecore.ir import (
    CoreDocument,
    CoreNode,
    DocumentError,
    NodeType,
    load_document,
    new_document,
)
from pagecore.ops import CoreOp, apply_core_ops
from pagecore.schema import export_ops_schema, hydrate_core_ops
from pagecore.validation import Diagnostic, is_valid, validate_document

__all__ = [
    # IR
    "CoreDocument",
    "CoreNode",
    "NodeType",
    "DocumentError",
    "new_document",
    "load_document",
    # Ops
    "CoreOp",
    "apply_core_ops",
    # Schema
    "export_ops_schema",
    "hydrate_core_ops",
    # Validation
    "validate_document",
    "is_valid",
    "Diagnostic",
    # Compiler
    "compile_document",
    "CoreAdapter",
    "get_adapter",
    "list_adapters",
    # Builder
    "Builder",
    "CompletionBuilder",
    "transform_core_page",
]
