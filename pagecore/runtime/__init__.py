"""Client runtime script embedded in compiled pages."""

from pagecore.runtime.lib import (
    ATTR_BIND,
    ATTR_EVENTS,
    ATTR_ID,
    ATTR_MOTION,
    ATTR_SHOW,
    ATTR_TOAST_REGION,
    DELEGATED_EVENTS,
    MOTION_CLASS_PREFIX,
    RUNTIME_GLOBAL,
    STATE_GLOBAL,
    get_runtime_js,
)

__all__ = [
    "get_runtime_js",
    # DOM contract
    "ATTR_ID",
    "ATTR_EVENTS",
    "ATTR_MOTION",
    "ATTR_BIND",
    "ATTR_SHOW",
    "ATTR_TOAST_REGION",
    "STATE_GLOBAL",
    "RUNTIME_GLOBAL",
    "MOTION_CLASS_PREFIX",
    "DELEGATED_EVENTS",
]
