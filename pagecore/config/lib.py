"""Environment configuration for pagecore.

Every setting pagecore reads from the environment is declared once as an
``EnvVar`` member carrying its default, type and category. Values resolve in
the order override, environment, default, so callers can pin a setting for
one call without touching ``os.environ``.

Example:
    >>> from pagecore.config import EnvVar, get_environment
    >>> get_environment(EnvVar.PAGECORE_ADAPTER)
    'fluentlm'
    >>> get_environment(EnvVar.PAGECORE_ADAPTER, override="none")
    'none'
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

from pagecore.core.log import level_from_name

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Declaration of one pagecore setting.

    Attributes:
        name: Environment variable name (e.g., "PAGECORE_ADAPTER").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, bool).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by pagecore.

    Member values are EnvConfig declarations read by `get_environment()`.

    Categories:
        - compiler: Adapter selection and asset locations
        - builder: Page transform behaviour
        - general: Logging and document defaults
    """

    # -------------------------------------------------------------------------
    # Compiler
    # -------------------------------------------------------------------------
    PAGECORE_ADAPTER = EnvConfig(
        name="PAGECORE_ADAPTER",
        default="fluentlm",
        var_type=str,
        description="Default compiler adapter (fluentlm, none)",
        category="compiler",
    )
    PAGECORE_FLUENTLM_BASE_URL = EnvConfig(
        name="PAGECORE_FLUENTLM_BASE_URL",
        default="/frameworks/fluentlm",
        var_type=str,
        description="Base URL the FluentLM stylesheet and script are served from",
        category="compiler",
    )

    # -------------------------------------------------------------------------
    # Builder
    # -------------------------------------------------------------------------
    PAGECORE_STRICT_VALIDATION = EnvConfig(
        name="PAGECORE_STRICT_VALIDATION",
        default=False,
        var_type=bool,
        description="Fail a page transform when the result has validation errors",
        category="builder",
    )
    PAGECORE_PRODUCT_NAME = EnvConfig(
        name="PAGECORE_PRODUCT_NAME",
        default="PageCore",
        var_type=str,
        description="Product name used in builder system prompts",
        category="builder",
    )

    # -------------------------------------------------------------------------
    # General
    # -------------------------------------------------------------------------
    PAGECORE_LOG_LEVEL = EnvConfig(
        name="PAGECORE_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR)",
        category="general",
    )
    PAGECORE_DOCUMENT_VERSION = EnvConfig(
        name="PAGECORE_DOCUMENT_VERSION",
        default="1.0",
        var_type=str,
        description="Version stamped on newly created documents",
        category="general",
    )


# =============================================================================
# Conversion
# =============================================================================

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def _parse_bool(value: str) -> bool | None:
    """Read a flag word; None when the word is neither true nor false."""
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Coerce a raw environment string to ``var_type``.

    Missing values and values that do not convert yield ``default``.
    """
    if value is None:
        return default
    if var_type is bool:
        flag = _parse_bool(value)
        return default if flag is None else flag
    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default
    return value


# =============================================================================
# Lookup
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a setting.

    A non-None ``override`` wins outright. Otherwise the environment value is
    converted to the declared type, falling back to the declared default.

    Args:
        env_var: The setting to read.
        override: Value to use instead of the environment.

    Returns:
        The resolved value.
    """
    if override is not None:
        return override
    config: EnvConfig = env_var.value
    return _convert_value(os.environ.get(config.name), config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_default_adapter_name(override: str | None = None) -> str:
    """Name of the adapter the compiler uses when none is given."""
    return get_environment(EnvVar.PAGECORE_ADAPTER, override=override)


def get_fluentlm_base_url(override: str | None = None) -> str:
    """FluentLM asset base URL, without a trailing slash."""
    return get_environment(EnvVar.PAGECORE_FLUENTLM_BASE_URL, override=override).rstrip("/")


def get_strict_validation(override: bool | None = None) -> bool:
    return bool(get_environment(EnvVar.PAGECORE_STRICT_VALIDATION, override=override))


def get_product_name(override: str | None = None) -> str:
    """Product name the builder introduces itself as."""
    return get_environment(EnvVar.PAGECORE_PRODUCT_NAME, override=override)


def get_log_level(override: str | None = None) -> int:
    """Resolve PAGECORE_LOG_LEVEL to a numeric logging level.

    Unknown level names resolve to INFO.
    """
    name = get_environment(EnvVar.PAGECORE_LOG_LEVEL, override=override)
    return level_from_name(str(name), default=logging.INFO)


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """Declared settings, optionally only those in ``category``
    (compiler, builder or general)."""
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_default_adapter_name",
    "get_fluentlm_base_url",
    "get_strict_validation",
    "get_product_name",
    "get_log_level",
    # Introspection
    "list_environment_variables",
]
