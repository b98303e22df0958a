"""Compiler adapter abstraction and registry."""

from pagecore.adapters.lib import (
    AdapterAssets,
    CoreAdapter,
    ResolvedTag,
    TokenStyleAdapter,
    attr_value,
    get_adapter,
    list_adapters,
    register_adapter,
)

__all__ = [
    "CoreAdapter",
    "TokenStyleAdapter",
    "ResolvedTag",
    "AdapterAssets",
    "attr_value",
    "register_adapter",
    "get_adapter",
    "list_adapters",
]
