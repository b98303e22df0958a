"""FluentLM adapter.

FluentLM is a Fluent-styled component stylesheet. Style tokens resolve to
its theme variables (``var(--spacingM)`` and friends) so pages follow the
active theme, and node types resolve to ``flm-*`` component classes.
Assets are served from ``PAGECORE_FLUENTLM_BASE_URL``.
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
from pagecore.config import get_fluentlm_base_url

# Node types that map to a tag plus a single component class
CLASS_MAP: dict[str, tuple[str, str]] = {
    "App": ("div", "flm-app"),
    "Page": ("main", "flm-page"),
    "Section": ("section", "flm-section"),
    "Box": ("div", "flm-box"),
    "Stack": ("div", "flm-stack"),
    "Divider": ("hr", "flm-divider"),
    "RichText": ("div", "flm-richtext"),
    "Checkbox": ("label", "flm-checkbox"),
    "Card": ("div", "flm-card"),
    "List": ("ul", "flm-list"),
    "Table": ("table", "flm-table"),
    "Badge": ("span", "flm-badge"),
    "Animate": ("div", "flm-animate"),
    "Disclosure": ("details", "flm-disclosure"),
    "Tabs": ("div", "flm-pivot"),
}

BUTTON_VARIANTS = frozenset({"primary", "subtle", "icon"})


@register_adapter
class FluentLMAdapter(TokenStyleAdapter):
    """Maps tokens to FluentLM theme variables and component classes.

    Example output:
        ```html
        <section class="flm-section" style="padding:var(--spacingL1)">
          <button class="flm-button flm-button--primary">Save</button>
        </section>
        ```
    """

    SPACE_MAP = {
        "none": "0",
        "xs": "var(--spacingXS)",
        "sm": "var(--spacingS1)",
        "md": "var(--spacingM)",
        "lg": "var(--spacingL1)",
        "xl": "var(--spacingXL)",
        "2xl": "var(--spacingXXL)",
        "3xl": "var(--spacingXXXL)",
    }

    RADIUS_MAP = {
        "none": "0",
        "sm": "var(--borderRadiusSmall)",
        "md": "var(--borderRadiusMedium)",
        "lg": "var(--borderRadiusLarge)",
        "xl": "var(--borderRadiusXLarge)",
        "full": "9999px",
    }

    SHADOW_MAP = {
        "none": "none",
        "sm": "var(--shadow2)",
        "md": "var(--shadow4)",
        "lg": "var(--shadow8)",
        "xl": "var(--shadow16)",
    }

    COLOR_MAP = {
        "primary": "var(--themePrimary)",
        "secondary": "var(--neutralSecondary)",
        "success": "var(--greenText)",
        "warning": "var(--yellowText)",
        "danger": "var(--redText)",
        "info": "var(--blueText)",
        "neutral": "var(--neutralPrimary)",
        "surface": "var(--bodyBackground)",
        "background": "var(--bodyBackground)",
        "text": "var(--bodyText)",
        "textSecondary": "var(--neutralSecondary)",
        "border": "var(--neutralLight)",
        "muted": "var(--neutralLighter)",
    }

    # Status roles use tinted surfaces rather than their text colors
    BG_COLOR_MAP = {
        **COLOR_MAP,
        "secondary": "var(--neutralLighter)",
        "success": "var(--greenBackground)",
        "warning": "var(--yellowBackground)",
        "danger": "var(--redBackground)",
        "info": "var(--blueBackground)",
        "neutral": "var(--neutralLighter)",
        "muted": "var(--neutralLighterAlt)",
    }

    # (font-size, font-weight, line-height)
    TYPOGRAPHY_MAP = {
        "display": ("2.5rem", "700", "1.2"),
        "headline": ("2rem", "600", "1.25"),
        "title": ("var(--fontSizeXL)", "600", "1.3"),
        "subtitle": ("var(--fontSizeLarge)", "500", "1.4"),
        "body": ("var(--fontSizeMedium)", "400", "1.5"),
        "caption": ("var(--fontSizeSmall)", "400", "1.4"),
        "overline": ("var(--fontSizeXSmall)", "600", "1.5"),
        "code": ("var(--fontSizeSmall)", "400", "1.5"),
    }

    MONOSPACE_FAMILY = "var(--fontFamilyMonospace, monospace)"
    DEFAULT_BORDER_COLOR = "var(--neutralLight)"

    def __init__(self, base_url: str | None = None):
        self.base_url = get_fluentlm_base_url(base_url)

    @property
    def name(self) -> str:
        """Adapter identifier."""
        return "fluentlm"

    def resolve_tag(self, node_type: str, props: dict[str, Any]) -> ResolvedTag:
        if node_type in CLASS_MAP:
            tag, css_class = CLASS_MAP[node_type]
            return ResolvedTag(tag, {"class": css_class})

        if node_type == "Grid":
            return ResolvedTag(
                "div",
                {"class": "flm-grid", "style": f"grid-template-columns:{grid_columns(props)}"},
            )
        if node_type == "Cluster":
            return ResolvedTag("div", {"class": "flm-cluster", "style": "display:flex;flex-wrap:wrap"})
        if node_type == "Spacer":
            return ResolvedTag("div", {"aria-hidden": "true", "style": spacer_style(props)})
        if node_type == "Heading":
            return ResolvedTag(heading_tag(props))
        if node_type == "Text":
            return ResolvedTag("p")
        if node_type == "Image":
            return ResolvedTag("img", image_attrs(props))
        if node_type == "Icon":
            attrs = {"data-icon": attr_value(props["name"])} if props.get("name") else {}
            return ResolvedTag("span", attrs)
        if node_type == "Button":
            return ResolvedTag("button", self._button_attrs(props))
        if node_type == "Link":
            return ResolvedTag("a", link_attrs(props))
        if node_type == "Form":
            return ResolvedTag("form", {"class": "flm-form", **form_attrs(props)})
        if node_type == "Input":
            return ResolvedTag("input", {"class": "flm-textfield-input", **input_attrs(props)})
        if node_type == "Select":
            return ResolvedTag("select", {"class": "flm-dropdown-select", **select_attrs(props)})
        if node_type == "Dialog":
            attrs = {"class": "flm-dialog", "role": "dialog", "aria-modal": "true"}
            if props.get("open"):
                attrs["open"] = ""
            return ResolvedTag("dialog", attrs)
        if node_type == "ToastRegion":
            return ResolvedTag("div", {"class": "flm-toast-region", "aria-live": "polite"})
        return ResolvedTag("div")

    def _button_attrs(self, props: dict[str, Any]) -> dict[str, str]:
        variant = props.get("variant")
        css_class = "flm-button"
        if variant in BUTTON_VARIANTS:
            css_class = f"flm-button flm-button--{variant}"
        attrs = {"class": css_class}
        if props.get("disabled"):
            attrs["disabled"] = ""
        if props.get("icon"):
            attrs["data-icon"] = attr_value(props["icon"])
        return attrs

    def assets(self) -> AdapterAssets:
        return AdapterAssets(
            styles=[
                f"{self.base_url}/fluentlm.min.css",
                f"{self.base_url}/theme-light.css",
            ],
            scripts=[f"{self.base_url}/fluentlm.min.js"],
        )
