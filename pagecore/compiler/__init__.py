"""HTML compiler for pagecore documents."""

from pagecore.compiler.lib import (
    DEFAULT_LANG,
    DEFAULT_TITLE,
    MOTION_PRESET_CSS,
    TOAST_CSS,
    VOID_ELEMENTS,
    CompileResult,
    compile_document,
    compile_with_report,
    escape_html,
)

__all__ = [
    "compile_document",
    "compile_with_report",
    "CompileResult",
    "escape_html",
    # Page constants
    "DEFAULT_TITLE",
    "DEFAULT_LANG",
    "VOID_ELEMENTS",
    "MOTION_PRESET_CSS",
    "TOAST_CSS",
]
