"""Generation schema, hydration and schema exports."""

from pagecore.schema.lib import (
    CORE_NODE_SCHEMA,
    CORE_OPS_SCHEMA,
    EXAMPLE_OPS,
    NODE_STRING_FIELDS,
    OP_STRING_FIELDS,
    encode_core_ops,
    export_document_schema,
    export_llm_schema,
    export_ops_schema,
    hydrate_core_ops,
)

__all__ = [
    # Schemas
    "CORE_OPS_SCHEMA",
    "CORE_NODE_SCHEMA",
    "export_ops_schema",
    "export_document_schema",
    "export_llm_schema",
    # Codec
    "OP_STRING_FIELDS",
    "NODE_STRING_FIELDS",
    "hydrate_core_ops",
    "encode_core_ops",
    "EXAMPLE_OPS",
]
