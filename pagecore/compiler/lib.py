"""Compile a CoreDocument into a standalone HTML page.

Compilation is a single top-down pass. Each node asks the adapter for its
tag, default attributes and token styles, gets the runtime's ``data-core-*``
attributes, renders any type-specific inner structure, then recurses into
its children. A separate scan of the tree decides which motion presets need
keyframes and whether the runtime script is embedded at all.

Example:
    >>> from pagecore.compiler import compile_document
    >>> html = compile_document(doc, "none")
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pagecore.adapters import CoreAdapter, get_adapter
from pagecore.config import get_default_adapter_name
from pagecore.ir import (
    CoreDocument,
    CoreNode,
    RunAnimationEffect,
    load_document,
    to_wire,
    walk,
)
from pagecore.runtime import (
    ATTR_BIND,
    ATTR_EVENTS,
    ATTR_ID,
    ATTR_MOTION,
    ATTR_SHOW,
    ATTR_TOAST_REGION,
    MOTION_CLASS_PREFIX,
    STATE_GLOBAL,
    get_runtime_js,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "PageCore Page"
DEFAULT_LANG = "en"

# Elements that never get content or a closing tag
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


# =============================================================================
# Stylesheets
# =============================================================================


def _preset_css(name: str, keyframes: str, animation: str) -> str:
    cls = f"{MOTION_CLASS_PREFIX}{name}"
    return f"@keyframes {cls}{{{keyframes}}} .{cls}{{animation:{cls} {animation}}}"


MOTION_PRESET_CSS: dict[str, str] = {
    "fadeIn": _preset_css("fadeIn", "from{opacity:0}to{opacity:1}", "0.3s ease forwards"),
    "fadeOut": _preset_css("fadeOut", "from{opacity:1}to{opacity:0}", "0.3s ease forwards"),
    "slideUp": _preset_css(
        "slideUp",
        "from{transform:translateY(20px);opacity:0}to{transform:translateY(0);opacity:1}",
        "0.3s ease forwards",
    ),
    "slideDown": _preset_css(
        "slideDown",
        "from{transform:translateY(-20px);opacity:0}to{transform:translateY(0);opacity:1}",
        "0.3s ease forwards",
    ),
    "slideLeft": _preset_css(
        "slideLeft",
        "from{transform:translateX(20px);opacity:0}to{transform:translateX(0);opacity:1}",
        "0.3s ease forwards",
    ),
    "slideRight": _preset_css(
        "slideRight",
        "from{transform:translateX(-20px);opacity:0}to{transform:translateX(0);opacity:1}",
        "0.3s ease forwards",
    ),
    "scaleIn": _preset_css(
        "scaleIn",
        "from{transform:scale(0.9);opacity:0}to{transform:scale(1);opacity:1}",
        "0.3s ease forwards",
    ),
    "scaleOut": _preset_css(
        "scaleOut",
        "from{transform:scale(1);opacity:1}to{transform:scale(0.9);opacity:0}",
        "0.3s ease forwards",
    ),
    "bounce": _preset_css(
        "bounce",
        "0%,100%{transform:translateY(0)}50%{transform:translateY(-10px)}",
        "0.5s ease",
    ),
    "shake": _preset_css(
        "shake",
        "0%,100%{transform:translateX(0)}25%{transform:translateX(-5px)}75%{transform:translateX(5px)}",
        "0.4s ease",
    ),
    "pulse": _preset_css("pulse", "0%,100%{opacity:1}50%{opacity:0.5}", "1s ease infinite"),
    "spin": _preset_css(
        "spin", "from{transform:rotate(0deg)}to{transform:rotate(360deg)}", "1s linear infinite"
    ),
}

TOAST_CSS = "\n".join(
    [
        ".core-toast-region,.flm-toast-region{position:fixed;bottom:1rem;right:1rem;"
        "z-index:10000;display:flex;flex-direction:column;gap:0.5rem}",
        ".core-toast{padding:0.75rem 1rem;border-radius:6px;color:#fff;opacity:0;"
        "transition:opacity 0.3s;font-size:0.9rem;max-width:360px;"
        "box-shadow:0 4px 12px rgba(0,0,0,0.15)}",
        ".core-toast--show{opacity:1}",
        ".core-toast--info{background:#0078d4}",
        ".core-toast--success{background:#28a745}",
        ".core-toast--warning{background:#ffc107;color:#212529}",
        ".core-toast--danger{background:#dc3545}",
    ]
)


# =============================================================================
# Escaping
# =============================================================================


def escape_html(text: str) -> str:
    """Escape text for element content and double-quoted attributes."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _script_json(value: Any) -> str:
    """JSON safe to inline inside a script element."""
    return _compact_json(value).replace("</", "<\\/")


# =============================================================================
# Tree scan
# =============================================================================


@dataclass
class _PageFeatures:
    presets: list[str] = field(default_factory=list)
    has_events: bool = False
    has_motion: bool = False
    has_toast_region: bool = False
    node_count: int = 0

    def use_preset(self, name: str) -> None:
        if name in MOTION_PRESET_CSS and name not in self.presets:
            self.presets.append(name)


def _scan(root: CoreNode) -> _PageFeatures:
    features = _PageFeatures()
    for node, _ in walk(root):
        features.node_count += 1
        if node.type == "ToastRegion":
            features.has_toast_region = True
        if node.motion is not None:
            features.has_motion = True
            if node.motion.mode == "preset":
                features.use_preset(node.motion.preset)
        for binding in node.events or []:
            features.has_events = True
            for effect in binding.effects:
                if isinstance(effect, RunAnimationEffect):
                    features.use_preset(effect.animation)
    return features


# =============================================================================
# Node rendering
# =============================================================================


def _render_attrs(attrs: dict[str, str]) -> str:
    return " ".join(
        name if value == "" else f'{name}="{escape_html(value)}"' for name, value in attrs.items()
    )


def _checkbox_content(node: CoreNode, props: dict[str, Any]) -> list[str]:
    input_attrs = {"type": "checkbox", "class": "flm-checkbox-input"}
    if props.get("checked"):
        input_attrs["checked"] = ""
    if props.get("name"):
        input_attrs["name"] = str(props["name"])
    if props.get("bind"):
        input_attrs[ATTR_BIND] = str(props["bind"])
    parts = [f"<input {_render_attrs(input_attrs)}>"]
    if node.text:
        parts.append(f'<span class="flm-checkbox-label">{escape_html(node.text)}</span>')
    return parts


def _select_content(options: list[Any]) -> list[str]:
    parts = []
    for option in options:
        if isinstance(option, dict):
            value = str(option.get("value", ""))
            label = str(option.get("label", value))
            selected = " selected" if option.get("selected") else ""
        else:
            value = label = str(option)
            selected = ""
        parts.append(f'<option value="{escape_html(value)}"{selected}>{escape_html(label)}</option>')
    return parts


def _table_content(headers: list[Any], rows: Any) -> list[str]:
    parts = ["<thead><tr>"]
    parts.extend(f"<th>{escape_html(str(h))}</th>" for h in headers)
    parts.append("</tr></thead>")
    if isinstance(rows, list):
        parts.append("<tbody>")
        for row in rows:
            cells = row if isinstance(row, list) else [row]
            parts.append("<tr>")
            parts.extend(f"<td>{escape_html(str(cell))}</td>" for cell in cells)
            parts.append("</tr>")
        parts.append("</tbody>")
    return parts


def _tabs_content(tabs: list[Any]) -> list[str]:
    parts = ['<div class="flm-pivot-tabs" role="tablist">']
    for tab in tabs:
        if not isinstance(tab, dict):
            continue
        active = bool(tab.get("active"))
        cls = "flm-pivot-tab flm-pivot-tab--active" if active else "flm-pivot-tab"
        attrs = {
            "class": cls,
            "role": "tab",
            "aria-selected": "true" if active else "false",
            "data-panel": str(tab.get("id", "")),
        }
        parts.append(f"<button {_render_attrs(attrs)}>{escape_html(str(tab.get('label', '')))}</button>")
    parts.append("</div>")
    return parts


class _NodeCompiler:
    """Renders nodes through one adapter."""

    def __init__(self, adapter: CoreAdapter):
        self.adapter = adapter

    def compile(self, node: CoreNode) -> str:
        props = node.props or {}
        resolved = self.adapter.resolve_tag(node.type, props)
        tag = resolved.tag
        attrs = dict(resolved.attrs)

        token_css = self.adapter.resolve_style(node.style) if node.style is not None else {}
        token_style = ";".join(f"{k}:{v}" for k, v in token_css.items())
        style = ";".join(part for part in (attrs.get("style", ""), token_style) if part)
        if style:
            attrs["style"] = style

        attrs[ATTR_ID] = node.id
        if node.events:
            attrs[ATTR_EVENTS] = _compact_json([to_wire(binding) for binding in node.events])
        if node.motion is not None:
            attrs[ATTR_MOTION] = _compact_json(to_wire(node.motion))

        for prop, attr in (
            ("ariaLabel", "aria-label"),
            ("ariaDescribedBy", "aria-describedby"),
            ("role", "role"),
            ("id", "id"),
        ):
            if props.get(prop):
                attrs[attr] = str(props[prop])
        if props.get("bind") and node.type != "Checkbox":
            attrs[ATTR_BIND] = str(props["bind"])
        if props.get("show"):
            attrs[ATTR_SHOW] = str(props["show"])
        if node.type == "ToastRegion":
            attrs[ATTR_TOAST_REGION] = ""

        open_tag = f"<{tag} {_render_attrs(attrs)}>"
        if tag in VOID_ELEMENTS:
            return open_tag

        parts = self._inner(node, props)
        dialog_body = node.type == "Dialog" and bool(props.get("title"))
        for child in node.children or []:
            parts.append(self.compile(child))
        if dialog_body:
            parts.append("</div>")

        return f"{open_tag}{''.join(parts)}</{tag}>"

    def _inner(self, node: CoreNode, props: dict[str, Any]) -> list[str]:
        if node.type == "Checkbox":
            return _checkbox_content(node, props)
        if node.type == "Select" and isinstance(props.get("options"), list):
            return _select_content(props["options"])
        if node.type == "Table" and isinstance(props.get("headers"), list):
            return _table_content(props["headers"], props.get("rows"))
        if node.type == "Tabs" and isinstance(props.get("tabs"), list):
            return _tabs_content(props["tabs"])
        if node.type == "Disclosure":
            if props.get("summary"):
                return [f"<summary>{escape_html(str(props['summary']))}</summary>"]
            return []
        if node.type == "Dialog" and props.get("title"):
            title = escape_html(str(props["title"]))
            return [
                f'<div class="flm-dialog-header"><h2 class="flm-dialog-title">{title}</h2></div>',
                '<div class="flm-dialog-body">',
            ]
        if node.type == "RichText" and node.text:
            # Trusted markup, emitted verbatim
            return [node.text]
        if node.text:
            return [escape_html(node.text)]
        return []


# =============================================================================
# Page assembly
# =============================================================================


@dataclass
class CompileResult:
    """A compiled page plus what went into it.

    Attributes:
        html: The complete page.
        presets_used: Motion presets whose keyframes were emitted, in first-use order.
        runtime_embedded: Whether the runtime script was included.
    """

    html: str
    presets_used: list[str] = field(default_factory=list)
    runtime_embedded: bool = False


def _resolve_adapter(adapter: CoreAdapter | str | None) -> CoreAdapter:
    if isinstance(adapter, CoreAdapter):
        return adapter
    return get_adapter(adapter or get_default_adapter_name())


def compile_with_report(
    document: CoreDocument | dict[str, Any] | str,
    adapter: CoreAdapter | str | None = None,
) -> CompileResult:
    """Compile a document and report the presets and runtime it needed.

    Args:
        document: Document model or its wire form.
        adapter: Adapter instance or registered name. Defaults to
            ``PAGECORE_ADAPTER``.

    Returns:
        CompileResult: Page HTML and compilation facts.

    Raises:
        DocumentError: If ``document`` cannot be loaded.
        KeyError: If the adapter name is not registered.
    """
    doc = load_document(document)
    resolved = _resolve_adapter(adapter)
    features = _scan(doc.app)
    assets = resolved.assets()
    doc_styles = (doc.assets.styles if doc.assets else None) or []
    doc_scripts = (doc.assets.scripts if doc.assets else None) or []

    head = [
        '<meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"<title>{escape_html(doc.title if doc.title is not None else DEFAULT_TITLE)}</title>",
    ]
    for href in [*assets.styles, *doc_styles]:
        head.append(f'<link rel="stylesheet" href="{escape_html(href)}">')
    if features.presets:
        preset_css = "\n".join(MOTION_PRESET_CSS[name] for name in features.presets)
        head.append(f'<style id="core-motion-presets">\n{preset_css}\n</style>')
    if features.has_toast_region:
        head.append(f'<style id="core-toast-styles">\n{TOAST_CSS}\n</style>')

    body = _NodeCompiler(resolved).compile(doc.app)

    scripts = [f'<script src="{escape_html(src)}"></script>' for src in [*assets.scripts, *doc_scripts]]
    state = doc.initial_state
    if state:
        scripts.append(f'<script id="core-state-init">window.{STATE_GLOBAL} = {_script_json(state)};</script>')
    runtime_embedded = features.has_events or features.has_motion
    if runtime_embedded:
        scripts.append(f'<script id="core-runtime">\n{get_runtime_js()}\n</script>')
    for module in doc.modules or []:
        scripts.append(
            f'<script type="module" id="core-module-{escape_html(module.id)}">\n{module.source}\n</script>'
        )

    lang = doc.lang if doc.lang is not None else DEFAULT_LANG
    html = "\n".join(
        [
            "<!DOCTYPE html>",
            f'<html lang="{escape_html(lang)}">',
            "<head>",
            "\n".join(head),
            "</head>",
            "<body>",
            body,
            "\n".join(scripts),
            "</body>",
            "</html>",
        ]
    )

    logger.debug(
        "Compiled %d node(s) with adapter '%s' (presets=%s, runtime=%s)",
        features.node_count,
        resolved.name,
        features.presets,
        runtime_embedded,
    )
    return CompileResult(html=html, presets_used=list(features.presets), runtime_embedded=runtime_embedded)


def compile_document(
    document: CoreDocument | dict[str, Any] | str,
    adapter: CoreAdapter | str | None = None,
) -> str:
    """Compile a document into a full HTML page string.

    Args:
        document: Document model or its wire form.
        adapter: Adapter instance or registered name. Defaults to
            ``PAGECORE_ADAPTER``.

    Returns:
        str: The page, starting with ``<!DOCTYPE html>``.
    """
    return compile_with_report(document, adapter).html
