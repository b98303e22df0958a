"""Adapter abstraction for HTML compilation.

An adapter maps the framework-neutral parts of the IR onto a concrete CSS
framework: style tokens become CSS declarations, node types become tags with
default attributes, and the framework contributes stylesheet and script
URLs. This module defines the abstract base class, a token-table base that
concrete adapters specialise, and a registry for accessing adapters by name.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from pagecore.ir import SpaceSides, StyleTokens


@dataclass
class ResolvedTag:
    """HTML tag and default attributes for a node.

    Attributes:
        tag: Element name (e.g. "button").
        attrs: Attribute map. An empty string value renders as a bare
            attribute (e.g. ``disabled``).
    """

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)


@dataclass
class AdapterAssets:
    """Framework asset URLs injected into the page head and body."""

    styles: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)


def attr_value(value: Any) -> str:
    """Render a prop value as an attribute string, JSON-style.

    Booleans become "true"/"false" and integral floats drop their fraction.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def heading_tag(props: dict[str, Any]) -> str:
    """h1..h6 from ``props["level"]``, clamped, defaulting to h2."""
    level = props.get("level")
    level = int(level) if _is_number(level) else 2
    return f"h{min(max(level, 1), 6)}"


def grid_columns(props: dict[str, Any]) -> str:
    """grid-template-columns value from ``props["columns"]``."""
    cols = props.get("columns", "auto")
    if _is_number(cols):
        return f"repeat({attr_value(cols)}, 1fr)"
    return str(cols)


def spacer_style(props: dict[str, Any]) -> str:
    return f"height:{props.get('size', '1rem')};flex-shrink:0"


def _flag(props: dict[str, Any], attrs: dict[str, str], *names: str) -> None:
    for name in names:
        if props.get(name):
            attrs[name] = ""


def _copy(props: dict[str, Any], attrs: dict[str, str], *names: str) -> None:
    for name in names:
        if props.get(name):
            attrs[name] = attr_value(props[name])


def image_attrs(props: dict[str, Any]) -> dict[str, str]:
    attrs: dict[str, str] = {}
    _copy(props, attrs, "src", "alt")
    return attrs


def link_attrs(props: dict[str, Any]) -> dict[str, str]:
    attrs: dict[str, str] = {}
    _copy(props, attrs, "href", "target")
    return attrs


def form_attrs(props: dict[str, Any]) -> dict[str, str]:
    attrs: dict[str, str] = {}
    _copy(props, attrs, "action", "method")
    return attrs


def input_attrs(props: dict[str, Any]) -> dict[str, str]:
    """Attributes of a text-like input.

    The input type comes from ``inputType``, then ``type``, then "text".
    """
    input_type = props.get("inputType", props.get("type"))
    attrs = {"type": attr_value(input_type) if input_type is not None else "text"}
    _copy(props, attrs, "placeholder", "name")
    if props.get("value") is not None:
        attrs["value"] = attr_value(props["value"])
    _flag(props, attrs, "required", "disabled")
    return attrs


def select_attrs(props: dict[str, Any]) -> dict[str, str]:
    attrs: dict[str, str] = {}
    _copy(props, attrs, "name")
    _flag(props, attrs, "disabled")
    return attrs


class CoreAdapter(ABC):
    """Abstract base class for compiler adapters.

    Subclasses must implement:
        - name: Adapter identifier string
        - resolve_style: Style tokens to CSS declarations
        - resolve_tag: Node type and props to tag and attributes
        - assets: Framework stylesheet and script URLs

    Example:
        >>> class MyAdapter(CoreAdapter):
        ...     name = "mine"
        ...     def resolve_style(self, tokens): return {}
        ...     def resolve_tag(self, node_type, props): return ResolvedTag("div")
        ...     def assets(self): return AdapterAssets()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier string."""
        ...

    @abstractmethod
    def resolve_style(self, tokens: StyleTokens) -> dict[str, str]:
        """Map style tokens to CSS declarations (property: value).

        Unknown token keys are ignored.
        """
        ...

    @abstractmethod
    def resolve_tag(self, node_type: str, props: dict[str, Any]) -> ResolvedTag:
        """Map a node type and its props to an HTML tag and attributes."""
        ...

    @abstractmethod
    def assets(self) -> AdapterAssets:
        """Framework CSS and JS URLs to inject into the page."""
        ...


class TokenStyleAdapter(CoreAdapter):
    """Adapter base resolving style tokens through lookup tables.

    Concrete adapters override the tables; the resolution order and the
    CSS properties each token controls are shared.
    """

    SPACE_MAP: dict[str, str] = {}
    RADIUS_MAP: dict[str, str] = {}
    SHADOW_MAP: dict[str, str] = {}
    COLOR_MAP: dict[str, str] = {}
    # Background colors fall back to COLOR_MAP when empty
    BG_COLOR_MAP: dict[str, str] = {}
    TYPOGRAPHY_MAP: dict[str, tuple[str, str, str]] = {}
    MONOSPACE_FAMILY = "monospace"
    DEFAULT_BORDER_COLOR = "currentColor"

    FONT_WEIGHT_MAP: dict[str, str] = {
        "normal": "400",
        "medium": "500",
        "semibold": "600",
        "bold": "700",
    }

    ALIGN_MAP: dict[str, str] = {
        "start": "flex-start",
        "center": "center",
        "end": "flex-end",
        "stretch": "stretch",
        "between": "space-between",
        "around": "space-around",
        "evenly": "space-evenly",
    }

    def _space(self, token: str) -> str:
        return self.SPACE_MAP.get(token, "0")

    def _resolve_padding(self, space: str | SpaceSides, css: dict[str, str]) -> None:
        if isinstance(space, str):
            css["padding"] = self.SPACE_MAP.get(space, space)
            return
        if space.x:
            css["padding-left"] = css["padding-right"] = self._space(space.x)
        if space.y:
            css["padding-top"] = css["padding-bottom"] = self._space(space.y)
        for edge in ("top", "right", "bottom", "left"):
            token = getattr(space, edge)
            if token:
                css[f"padding-{edge}"] = self._space(token)

    def resolve_style(self, tokens: StyleTokens) -> dict[str, str]:
        css: dict[str, str] = {}

        if tokens.space:
            self._resolve_padding(tokens.space, css)
        if tokens.radius:
            css["border-radius"] = self.RADIUS_MAP.get(tokens.radius, tokens.radius)
        if tokens.border:
            width = attr_value(tokens.border.width if tokens.border.width is not None else 1)
            style = tokens.border.style or "solid"
            color = (
                self.COLOR_MAP.get(tokens.border.color, tokens.border.color)
                if tokens.border.color
                else self.DEFAULT_BORDER_COLOR
            )
            css["border"] = f"{width}px {style} {color}"
        if tokens.shadow:
            css["box-shadow"] = self.SHADOW_MAP.get(tokens.shadow, "none")
        if tokens.color:
            css["color"] = self.COLOR_MAP.get(tokens.color, tokens.color)
        if tokens.bg:
            bg_map = self.BG_COLOR_MAP or self.COLOR_MAP
            css["background-color"] = bg_map.get(tokens.bg, tokens.bg)
        if tokens.typography and tokens.typography in self.TYPOGRAPHY_MAP:
            size, weight, line_height = self.TYPOGRAPHY_MAP[tokens.typography]
            css["font-size"] = size
            css["font-weight"] = weight
            css["line-height"] = line_height
            if tokens.typography == "code":
                css["font-family"] = self.MONOSPACE_FAMILY
            if tokens.typography == "overline":
                css["text-transform"] = "uppercase"
        if tokens.layout:
            css["display"] = "none" if tokens.layout == "hidden" else tokens.layout
        if tokens.align:
            css["align-items"] = self.ALIGN_MAP.get(tokens.align, tokens.align)
        if tokens.justify:
            css["justify-content"] = self.ALIGN_MAP.get(tokens.justify, tokens.justify)
        if tokens.gap:
            css["gap"] = self.SPACE_MAP.get(tokens.gap, tokens.gap)

        for attr, prop in (
            ("width", "width"),
            ("height", "height"),
            ("min_width", "min-width"),
            ("max_width", "max-width"),
            ("min_height", "min-height"),
            ("max_height", "max-height"),
            ("overflow", "overflow"),
        ):
            value = getattr(tokens, attr)
            if value:
                css[prop] = value

        if tokens.opacity is not None:
            css["opacity"] = attr_value(tokens.opacity)
        if tokens.font_weight:
            css["font-weight"] = self.FONT_WEIGHT_MAP.get(tokens.font_weight, tokens.font_weight)
        if tokens.font_size:
            css["font-size"] = tokens.font_size
        if tokens.text_align:
            css["text-align"] = tokens.text_align
        if tokens.cursor:
            css["cursor"] = tokens.cursor
        if tokens.position:
            css["position"] = tokens.position

        return css


# Adapter registry - populated by adapter modules on import
_registry: dict[str, type[CoreAdapter]] = {}

_BUILTIN_ADAPTERS = ("fluentlm", "none")


def register_adapter(adapter_cls: type[CoreAdapter]) -> type[CoreAdapter]:
    """Register an adapter class in the registry.

    Uses a temporary instance to retrieve the adapter name.

    Args:
        adapter_cls: The adapter class to register.

    Returns:
        The adapter class (for decorator chaining).

    Example:
        >>> @register_adapter
        ... class MyAdapter(TokenStyleAdapter):
        ...     name = "mine"
        ...     ...
    """
    _registry[adapter_cls().name] = adapter_cls
    return adapter_cls


def get_adapter(name: str) -> CoreAdapter:
    """Get an adapter instance by name.

    Args:
        name: The adapter identifier (e.g., "fluentlm", "none").

    Returns:
        CoreAdapter: An instance of the requested adapter.

    Raises:
        KeyError: If no adapter with the given name is registered.

    Example:
        >>> adapter = get_adapter("none")
        >>> adapter.resolve_tag("Button", {}).tag
        'button'
    """
    if name not in _registry:
        _import_adapters()
        if name not in _registry:
            available = ", ".join(sorted(_registry)) or "(none)"
            raise KeyError(f"Unknown adapter '{name}'. Available: {available}")
    return _registry[name]()


def list_adapters() -> list[str]:
    """List all registered adapter names.

    Example:
        >>> list_adapters()
        ['fluentlm', 'none']
    """
    _import_adapters()
    return sorted(_registry)


def _import_adapters() -> None:
    """Import built-in adapter modules to trigger registration."""
    import importlib

    for module_name in _BUILTIN_ADAPTERS:
        importlib.import_module(f"pagecore.adapters.{module_name}")

