"""Framework-free adapter.

Style tokens resolve to literal CSS values and node types to plain semantic
tags. Layout primitives (Stack, Grid, Cluster, Spacer) carry their own
inline flex and grid styles since no stylesheet backs them. No assets.
"""

from typing import Any

from pagecore.adapters.lib import (
    AdapterAssets,
    ResolvedTag,
    TokenStyleAdapter,
    attr_value,
    form_attrs,
    grid_columns,
    heading_tag,
    image_attrs,
    input_attrs,
    link_attrs,
    register_adapter,
    select_attrs,
    spacer_style,
)

TAG_MAP: dict[str, str] = {
    "App": "div",
    "Page": "main",
    "Section": "section",
    "Box": "div",
    "Stack": "div",
    "Grid": "div",
    "Cluster": "div",
    "Spacer": "div",
    "Divider": "hr",
    "Heading": "h2",
    "Text": "p",
    "RichText": "div",
    "Image": "img",
    "Icon": "span",
    "Button": "button",
    "Link": "a",
    "Form": "form",
    "Input": "input",
    "Select": "select",
    "Checkbox": "label",
    "Card": "div",
    "List": "ul",
    "Table": "table",
    "Badge": "span",
    "Animate": "div",
    "Disclosure": "details",
    "Tabs": "div",
    "Dialog": "dialog",
    "ToastRegion": "div",
}


@register_adapter
class NoneAdapter(TokenStyleAdapter):
    """Plain HTML with literal inline CSS.

    Example output:
        ```html
        <div style="display:flex;flex-direction:column;padding:1rem">
          <button data-variant="primary">Save</button>
        </div>
        ```
    """

    SPACE_MAP = {
        "none": "0",
        "xs": "0.25rem",
        "sm": "0.5rem",
        "md": "1rem",
        "lg": "1.5rem",
        "xl": "2rem",
        "2xl": "3rem",
        "3xl": "4rem",
    }

    RADIUS_MAP = {
        "none": "0",
        "sm": "4px",
        "md": "8px",
        "lg": "12px",
        "xl": "16px",
        "full": "9999px",
    }

    SHADOW_MAP = {
        "none": "none",
        "sm": "0 1px 2px rgba(0,0,0,0.05)",
        "md": "0 4px 6px rgba(0,0,0,0.1)",
        "lg": "0 10px 15px rgba(0,0,0,0.1)",
        "xl": "0 20px 25px rgba(0,0,0,0.1)",
    }

    COLOR_MAP = {
        "primary": "#0078d4",
        "secondary": "#6c757d",
        "success": "#28a745",
        "warning": "#ffc107",
        "danger": "#dc3545",
        "info": "#17a2b8",
        "neutral": "#6c757d",
        "surface": "#ffffff",
        "background": "#f5f5f5",
        "text": "#212529",
        "textSecondary": "#6c757d",
        "border": "#dee2e6",
        "muted": "#f8f9fa",
    }

    # (font-size, font-weight, line-height)
    TYPOGRAPHY_MAP = {
        "display": ("2.5rem", "700", "1.2"),
        "headline": ("2rem", "600", "1.25"),
        "title": ("1.5rem", "600", "1.3"),
        "subtitle": ("1.25rem", "500", "1.4"),
        "body": ("1rem", "400", "1.5"),
        "caption": ("0.875rem", "400", "1.4"),
        "overline": ("0.75rem", "600", "1.5"),
        "code": ("0.875rem", "400", "1.5"),
    }

    DEFAULT_BORDER_COLOR = "#dee2e6"

    @property
    def name(self) -> str:
        """Adapter identifier."""
        return "none"

    def resolve_tag(self, node_type: str, props: dict[str, Any]) -> ResolvedTag:
        tag = TAG_MAP.get(node_type, "div")
        attrs: dict[str, str] = {}

        if node_type == "Heading":
            return ResolvedTag(heading_tag(props))
        if node_type == "Image":
            attrs = image_attrs(props)
        elif node_type == "Link":
            attrs = link_attrs(props)
        elif node_type == "Input":
            attrs = input_attrs(props)
        elif node_type == "Select":
            attrs = select_attrs(props)
        elif node_type == "Button":
            if props.get("disabled"):
                attrs["disabled"] = ""
            if props.get("variant"):
                attrs["data-variant"] = attr_value(props["variant"])
        elif node_type == "Form":
            attrs = form_attrs(props)
        elif node_type == "Stack":
            attrs["style"] = "display:flex;flex-direction:column"
        elif node_type == "Grid":
            attrs["style"] = f"display:grid;grid-template-columns:{grid_columns(props)}"
        elif node_type == "Cluster":
            attrs["style"] = "display:flex;flex-wrap:wrap"
        elif node_type == "Spacer":
            attrs["style"] = spacer_style(props)
            attrs["aria-hidden"] = "true"
        elif node_type == "Dialog":
            if props.get("open"):
                attrs["open"] = ""

        return ResolvedTag(tag, attrs)

    def assets(self) -> AdapterAssets:
        return AdapterAssets()
