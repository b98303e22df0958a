"""FluentLM themed adapter."""

from .lib import CLASS_MAP, FluentLMAdapter

__all__ = ["FluentLMAdapter", "CLASS_MAP"]
