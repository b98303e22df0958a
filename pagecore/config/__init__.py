"""Centralized configuration management for pagecore.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from pagecore.config import EnvVar, get_environment
    >>>
    >>> strict = get_environment(EnvVar.PAGECORE_STRICT_VALIDATION)
    >>> for var in list_environment_variables("compiler"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    compiler: Adapter selection and asset locations
    builder: Page transform behaviour
    general: Logging and document defaults
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_default_adapter_name,
    get_environment,
    get_environment_info,
    get_fluentlm_base_url,
    get_log_level,
    get_product_name,
    get_strict_validation,
    # Introspection
    list_environment_variables,
)

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
    "get_log_level",
    "get_product_name",
    # Introspection
    "list_environment_variables",
]
