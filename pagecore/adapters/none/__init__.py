"""Framework-free adapter."""

from .lib import TAG_MAP, NoneAdapter

__all__ = ["NoneAdapter", "TAG_MAP"]
